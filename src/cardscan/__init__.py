"""cardscan - find flashcard notes in Markdown and keep their IDs in sync."""

__version__ = "0.1.0"
