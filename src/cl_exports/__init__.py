"""Command-line client for Commerce Layer export jobs."""

__version__ = "0.1.0"
