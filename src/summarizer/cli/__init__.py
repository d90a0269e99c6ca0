"""Command-line interface for summarizer."""
