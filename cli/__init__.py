"""Command-line entry point for book-search."""
