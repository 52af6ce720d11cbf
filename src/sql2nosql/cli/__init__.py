"""Command-line interface for sql2nosql."""
