"""Application configuration manager wrapping QSettings."""

import logging

from PySide6.QtCore import QObject, Signal, Slot, QSettings

from memory_loop_client.services.sse_parser import MAX_FRAME_SIZE

logger = logging.getLogger(__name__)

# Default values
DEFAULTS = {
    "chat/maxFrameSize": MAX_FRAME_SIZE,
    "tasks/hideCompleted": False,
    "advanced/debugLogging": False,
}


class ConfigManager(QObject):
    """Centralized client settings with QML property bindings."""

    settings_changed = Signal(str)  # key

    def __init__(self, parent=None):
        super().__init__(parent)
        self._settings = QSettings()

    @Slot(str, result=int)
    def get_int(self, key: str) -> int:
        val = self._settings.value(key, DEFAULTS.get(key, 0))
        try:
            return int(val)
        except (ValueError, TypeError):
            logger.debug("Setting %s has non-integer value %r, using default", key, val)
            return DEFAULTS.get(key, 0)

    @Slot(str, result=bool)
    def get_bool(self, key: str) -> bool:
        val = self._settings.value(key, DEFAULTS.get(key, False))
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    @Slot(str, bool)
    def set_bool(self, key: str, value: bool):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str)
    def reset(self, key: str):
        """Drop a stored value so the default applies again."""
        self._settings.remove(key)
        self.settings_changed.emit(key)

    @Slot(int)
    def set_max_frame_size(self, size: int):
        self._settings.setValue("chat/maxFrameSize", size)
        self.settings_changed.emit("chat/maxFrameSize")

    def max_frame_size(self) -> int:
        size = self.get_int("chat/maxFrameSize")
        return size if size > 0 else MAX_FRAME_SIZE

    def debug_logging(self) -> bool:
        return self.get_bool("advanced/debugLogging")
