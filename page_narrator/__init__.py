"""Page narrator: reads documents aloud page by page."""

__version__ = "0.1.0"
