"""Portal: news and project site API with session authentication."""

__version__ = "0.1.0"
