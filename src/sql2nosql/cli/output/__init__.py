"""CLI output helpers."""

from sql2nosql.cli.output.formatters import OutputFormatter

__all__ = ["OutputFormatter"]
