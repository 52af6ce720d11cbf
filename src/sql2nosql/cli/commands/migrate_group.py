"""Migration commands - plan, run."""

from __future__ import annotations

import click

from sql2nosql.cli.decorators import (
    handle_errors,
    with_migration_options,
    with_source_options,
)
from sql2nosql.cli.handlers import MigrationHandler, SchemaHandler
from sql2nosql.cli.output import OutputFormatter
from sql2nosql.utils.config import get_config
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)
out = OutputFormatter()

DEFAULT_PLAN_DIR = "migration"


@click.group(name="migrate")
def migrate_group():
    """Migration planning and execution.

    'plan' synthesizes per-collection parameters and scripts; 'run' executes
    a plan against the source database and MongoDB.
    """
    pass


@migrate_group.command(name="plan")
@with_source_options
@click.option(
    "--document-schema",
    "-d",
    "document_schema_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Document schema JSON written by 'analyze' (default: baseline mapping)",
)
@click.option(
    "--recommendations",
    "-r",
    "recommendations_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Recommendations to merge into the baseline before planning",
)
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(file_okay=False),
    help=f"Plan directory (default: <output.dir>/{DEFAULT_PLAN_DIR})",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Stop at the first collection that cannot be planned",
)
@with_migration_options
@handle_errors
def plan_cmd(
    connection,
    db_schema,
    ddl_file,
    document_schema_file,
    recommendations_file,
    output_dir,
    strict,
    dry_run,
    batch_size,
    skip_on_error,
    progress_interval,
):
    """Synthesize migration parameters and per-collection scripts.

    \b
    Examples:
        # Baseline mapping from DDL
        sql2nosql migrate plan --ddl schema.sql

        # Augmented schema saved by analyze
        sql2nosql migrate plan --ddl schema.sql -d output/document-schema.json

        # Smaller pages, stop on the first bad row
        sql2nosql migrate plan --ddl schema.sql --batch-size 500 --fail-fast
    """
    config = get_config()
    schema_handler = SchemaHandler(config)
    handler = MigrationHandler(config)

    migration_config = handler.migration_config(
        dry_run=dry_run,
        batch_size=batch_size,
        skip_on_error=skip_on_error,
        progress_interval=progress_interval,
    )

    relational = schema_handler.load_relational_schema(connection, db_schema, ddl_file)
    document = handler.target_schema(relational, document_schema_file, recommendations_file)

    target = output_dir or schema_handler.output_dir() / DEFAULT_PLAN_DIR
    report, scripts = handler.plan(
        relational, document, target, migration_config, fail_fast=strict or None
    )

    out.section("📋 Execution order:")
    out.list_items(report.order, bullet="→")
    out.stats(
        {
            "Batch size": migration_config.batch_size or "full scan",
            "Error policy": migration_config.error_policy.value,
            "Dry run": migration_config.dry_run,
        }
    )

    for warning in report.warnings:
        out.warning(warning)
    for name, error in report.failures.items():
        out.error(f"{name}: {error}")

    out.success(f"Wrote {len(scripts)} migration scripts to {target}")
    if not report.ok:
        raise click.exceptions.Exit(1)


@migrate_group.command(name="run")
@click.argument("plan_dir", required=False, type=click.Path(file_okay=False))
@click.option(
    "--connection",
    "-c",
    type=str,
    help="Source database URL (default: source.connection)",
)
@click.option(
    "--schema",
    "db_schema",
    type=str,
    help="Source database schema (default: source.schema)",
)
@click.option("--mongo-uri", type=str, help="MongoDB URI (default: destination.uri)")
@click.option(
    "--database",
    type=str,
    help="Destination database (default: destination.database)",
)
@with_migration_options
@handle_errors
def run_cmd(
    plan_dir,
    connection,
    db_schema,
    mongo_uri,
    database,
    dry_run,
    batch_size,
    skip_on_error,
    progress_interval,
):
    """Execute a migration plan.

    PLAN_DIR: Directory written by 'migrate plan' (default: <output.dir>/migration)

    \b
    Examples:
        sql2nosql migrate run -c "postgresql://localhost/chinook"
        sql2nosql migrate run ./output/migration --dry-run
        sql2nosql migrate run --fail-fast --batch-size 200
    """
    config = get_config()
    handler = MigrationHandler(config)

    plan_dir = plan_dir or SchemaHandler(config).output_dir() / DEFAULT_PLAN_DIR
    parameters = handler.load_plan(plan_dir)
    parameters = handler.apply_overrides(
        parameters,
        dry_run=dry_run,
        batch_size=batch_size,
        skip_on_error=skip_on_error,
        progress_interval=progress_interval,
    )
    if not parameters:
        out.warning(f"No collections to migrate in {plan_dir}")
        return

    dry = any(p.dry_run for p in parameters)
    out.progress_start(
        f"Migrating {len(parameters)} collections{' (dry run)' if dry else ''}..."
    )
    summary = handler.run(parameters, connection, db_schema, mongo_uri, database)

    for result in summary.collections:
        out.collection_result(
            result.collection,
            result.status,
            result.attempted,
            result.succeeded,
            result.skipped,
        )
        if result.error:
            out.list_items([result.error], indent="     ")

    out.section("📊 Summary:")
    out.stats(
        {
            "Documents written" if not dry else "Documents built": summary.succeeded,
            "Rows skipped": summary.skipped,
            "Failed collections": ", ".join(summary.failed_collections) or "none",
        }
    )
    if summary.failed_collections:
        raise click.exceptions.Exit(1)
