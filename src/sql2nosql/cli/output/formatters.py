"""Output formatting utilities for CLI."""

from __future__ import annotations

from typing import Any, Dict, List

import click


class OutputFormatter:
    """Format output for CLI display.

    Example:
        >>> out = OutputFormatter()
        >>> out.success("Analysis written")
        >>> out.stats({"tables": 5, "foreign keys": 4})
    """

    @staticmethod
    def success(message: str) -> None:
        click.echo(f"✓ {message}")

    @staticmethod
    def error(message: str, abort: bool = False) -> None:
        """Display error message.

        Args:
            message: Error message to display
            abort: Whether to abort command execution after displaying error
        """
        click.echo(f"❌ {message}", err=True)
        if abort:
            raise click.Abort()

    @staticmethod
    def warning(message: str) -> None:
        click.echo(f"⚠️  {message}")

    @staticmethod
    def section(title: str) -> None:
        click.echo(f"\n{title}")

    @staticmethod
    def stats(stats_dict: Dict[str, Any], indent: str = "   ") -> None:
        """Display statistics dictionary in key: value format."""
        for key, value in stats_dict.items():
            click.echo(f"{indent}{key}: {value}")

    @staticmethod
    def list_items(items: List[str], indent: str = "   ", bullet: str = "-") -> None:
        for item in items:
            click.echo(f"{indent}{bullet} {item}")

    @staticmethod
    def table_summary(
        table_name: str,
        col_count: int,
        fk_count: int,
        primary_key: str = None,
        indent: str = "   ",
    ) -> None:
        """Display table summary in consistent format.

        Args:
            table_name: Name of the table
            col_count: Number of columns
            fk_count: Number of outgoing foreign keys
            primary_key: Primary key column names (if any)
            indent: Indentation string
        """
        pk_str = f", PK={primary_key}" if primary_key else ""
        click.echo(
            f"{indent}✓ {table_name}: {col_count} columns, {fk_count} FKs{pk_str}"
        )

    @staticmethod
    def collection_result(
        collection: str,
        status: str,
        attempted: int,
        succeeded: int,
        skipped: int,
        indent: str = "   ",
    ) -> None:
        """Display one collection's migration outcome."""
        mark = {"completed": "✓", "failed": "❌", "skipped": "⏭"}.get(status, "•")
        click.echo(
            f"{indent}{mark} {collection}: {status}, attempted={attempted} "
            f"succeeded={succeeded} skipped={skipped}"
        )

    @staticmethod
    def progress_start(message: str) -> None:
        click.echo(f"\n🔍 {message}")

    @staticmethod
    def next_steps(title: str, steps: List[str]) -> None:
        """Display next steps section."""
        click.echo(f"\n{title}")
        for step in steps:
            click.echo(f"   - {step}")
