"""Entry point for `python -m memory_loop_client`."""

import sys


def main():
    from memory_loop_client.app import run
    sys.exit(run())


if __name__ == "__main__":
    main()
