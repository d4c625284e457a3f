"""
anki-card entrypoint.
"""

import sys

from ankicard.cli import run


def main() -> None:
    """Run anki-card and exit with its status."""
    sys.exit(run())


if __name__ == "__main__":
    main()
