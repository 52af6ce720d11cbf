"""CLI entry point for sql2nosql."""

from __future__ import annotations

import click

from sql2nosql import __version__

# Import command groups
from sql2nosql.cli.commands import advise, analyze, migrate_group
from sql2nosql.utils.config import load_config
from sql2nosql.utils.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to config.yml file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Logging level",
)
@click.pass_context
def cli(ctx, config, log_level):
    """sql2nosql - Map relational schemas to MongoDB and plan the migration.

    \b
    Examples:
        # Analyze a DDL file
        sql2nosql analyze --ddl schema.sql

        # Get LLM embedding recommendations
        sql2nosql advise --ddl schema.sql

        # Plan the migration with the augmented schema
        sql2nosql migrate plan --ddl schema.sql -d output/document-schema.json

        # Rehearse, then run
        sql2nosql migrate run -c "postgresql://localhost/chinook" --dry-run
        sql2nosql migrate run -c "postgresql://localhost/chinook"
    """
    ctx.ensure_object(dict)

    # Setup logging
    setup_logging(level=log_level)

    # Load config if provided
    if config:
        ctx.obj["config"] = load_config(config)


# Register commands
cli.add_command(analyze.analyze_cmd)
cli.add_command(advise.advise_cmd)
cli.add_command(migrate_group.migrate_group)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
