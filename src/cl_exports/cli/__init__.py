"""Command-line interface for Commerce Layer exports."""
