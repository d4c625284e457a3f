"""Allow ``python -m ankicard``."""

from ankicard.main import main

main()
