"""Advise command - ask an LLM for embedding recommendations."""

from __future__ import annotations

import click

from sql2nosql.cli.decorators import (
    handle_errors,
    with_agent_config,
    with_output_dir,
    with_source_options,
)
from sql2nosql.cli.handlers import SchemaHandler
from sql2nosql.cli.handlers.schema_handler import RECOMMENDATIONS_FILE
from sql2nosql.cli.output import OutputFormatter
from sql2nosql.utils.config import get_config

out = OutputFormatter()


@click.command(name="advise")
@with_source_options
@with_output_dir
@with_agent_config
@handle_errors
def advise_cmd(connection, db_schema, ddl_file, output_dir, provider, model):
    """Generate embedding recommendations with the configured LLM provider.

    Writes recommendations.json, which can be reviewed and passed back to
    'sql2nosql analyze --recommendations' or 'sql2nosql migrate plan'.

    \b
    Examples:
        sql2nosql advise --ddl schema.sql
        sql2nosql advise -c "postgresql://localhost/chinook" --provider anthropic
    """
    config = get_config()
    handler = SchemaHandler(config)

    relational = handler.load_relational_schema(connection, db_schema, ddl_file)
    baseline = handler.map(relational)

    out.progress_start(
        f"Requesting recommendations for {len(baseline.collections)} collections..."
    )
    advisory = handler.advise(relational, baseline, provider, model)

    target = handler.output_dir(output_dir)
    path = target / RECOMMENDATIONS_FILE
    advisory.save(path)

    out.success(f"Saved {len(advisory.embeddings)} recommendations to {path}")
    for rec in advisory.embeddings:
        confidence = f" ({rec.confidence:.0%})" if rec.confidence is not None else ""
        out.list_items(
            [f"{rec.collection}.{rec.field}: {rec.strategy.value}{confidence}"]
        )
    if advisory.insights:
        out.section("💡 Insights:")
        out.list_items(
            [f"[{i.type}] {i.collection}: {i.recommendation}" for i in advisory.insights]
        )
    for warning in advisory.warnings:
        out.warning(warning)
