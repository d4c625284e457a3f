"""anki-card - generate printable flashcard PDFs from CSV."""

__version__ = "1.0.1"
