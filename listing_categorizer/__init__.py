"""Category normalization and classification for scraped gear listings."""

__version__ = "0.1.0"
