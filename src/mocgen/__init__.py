"""mocgen - render Map-of-Content markdown documents from a note vault."""

__version__ = "0.1.0"
