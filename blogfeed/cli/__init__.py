"""Command line interface for the article store."""
