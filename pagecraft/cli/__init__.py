"""Command-line interface for pagecraft."""
