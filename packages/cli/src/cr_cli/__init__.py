"""Command-line interface for cr."""
