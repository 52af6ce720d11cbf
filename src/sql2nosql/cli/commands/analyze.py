"""Analyze command - map a relational schema to a document schema and report."""

from __future__ import annotations

import click

from sql2nosql.cli.decorators import (
    handle_errors,
    with_agent_config,
    with_output_dir,
    with_source_options,
)
from sql2nosql.cli.handlers import SchemaHandler
from sql2nosql.cli.output import OutputFormatter
from sql2nosql.utils.config import get_config
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)
out = OutputFormatter()


@click.command(name="analyze")
@with_source_options
@with_output_dir
@click.option(
    "--recommendations",
    "-r",
    "recommendations_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Advisory recommendations JSON to merge into the baseline",
)
@click.option(
    "--advise",
    is_flag=True,
    help="Ask the configured LLM provider for recommendations and merge them",
)
@with_agent_config
@handle_errors
def analyze_cmd(
    connection,
    db_schema,
    ddl_file,
    output_dir,
    recommendations_file,
    advise,
    provider,
    model,
):
    """Analyze a relational schema and propose a document schema.

    Reads the schema from a live database (--connection) or a DDL file
    (--ddl), maps every table to a collection and writes
    schema-analysis.json, per-table JSON/HTML files and index.html.

    \b
    Examples:
        # From a DDL file
        sql2nosql analyze --ddl schema.sql

        # From PostgreSQL
        sql2nosql analyze -c "postgresql://localhost/chinook" --schema public

        # Merge saved recommendations
        sql2nosql analyze --ddl schema.sql -r recommendations.json

        # Ask an LLM for recommendations
        sql2nosql analyze --ddl schema.sql --advise --provider anthropic
    """
    if recommendations_file and advise:
        out.error("Use either --recommendations or --advise, not both", abort=True)

    config = get_config()
    handler = SchemaHandler(config)

    out.progress_start("Loading relational schema...")
    relational = handler.load_relational_schema(connection, db_schema, ddl_file)
    out.success(
        f"Loaded {len(relational.tables)} tables and "
        f"{len(relational.foreign_keys)} foreign keys:"
    )
    for table in relational.tables:
        out.table_summary(
            table.name,
            len(table.columns),
            len(relational.get_foreign_keys_for_table(table.name)),
            ", ".join(table.primary_key) or None,
        )

    baseline = handler.map(relational)
    out.success(f"Mapped {len(baseline.collections)} collections")

    advisory = None
    if recommendations_file:
        advisory = handler.load_recommendations(recommendations_file)
    elif advise or config.get("advisory.enabled"):
        out.progress_start("Requesting recommendations from the LLM advisor...")
        advisory = handler.advise(relational, baseline, provider, model)

    augmentation = None
    if advisory is not None:
        augmentation = handler.augment(baseline, relational, advisory)
        out.section("🧩 Advisory merge:")
        out.stats(
            {
                "Recommendations": len(advisory.embeddings),
                "Applied": len(augmentation.applied),
                "Skipped": len(augmentation.skipped),
            }
        )
        if augmentation.skipped:
            out.list_items(
                [
                    f"{o.recommendation.collection}.{o.recommendation.field}: {o.reason}"
                    for o in augmentation.skipped
                ]
            )

    target = handler.output_dir(output_dir)
    written = handler.write_report(
        relational, baseline, target, augmentation=augmentation, advisory=advisory
    )
    out.success(f"Wrote {len(written)} files to {target}")

    out.next_steps(
        "Next steps:",
        [
            f"Open {target / 'index.html'} to review the mapping",
            f"sql2nosql migrate plan --document-schema {target / 'document-schema.json'}",
        ],
    )
