"""Write synthesized parameters and per-collection migration scripts to disk.

Layout of the output directory::

    migration/
        plan.json                  # order, failures, warnings
        <collection>.params.json   # ScriptParameters
        01_<collection>.py         # runnable script, numbered in execution order
"""

from __future__ import annotations

import json
from pathlib import Path
from string import Template
from typing import List

from sql2nosql.core.migration.params import ScriptParameters
from sql2nosql.core.migration.synthesizer import SynthesisReport
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)

SCRIPT_TEMPLATE = Template('''\
#!/usr/bin/env python
"""Migrate table "$table" into collection "$collection".

Generated by sql2nosql. Parameters live in $params_file; edit them there.
Run after: $preload
"""

from pathlib import Path

import click

from sql2nosql.connectors.db_connector import SQLAlchemyRowSource
from sql2nosql.connectors.mongo_sink import MongoDocumentSink
from sql2nosql.core.migration.params import ScriptParameters
from sql2nosql.core.migration.runtime import MigrationRunner
from sql2nosql.utils.logging import setup_logging

PARAMS_FILE = Path(__file__).with_name("$params_file")


@click.command()
@click.option("--connection", envvar="SQL2NOSQL_SOURCE_URL", required=True, help="Source database URL")
@click.option("--schema", "db_schema", default=$source_schema, help="Source database schema")
@click.option("--mongo-uri", envvar="SQL2NOSQL_MONGO_URI", default=$uri, help="MongoDB URI")
@click.option("--database", default=$database, help="Destination database")
@click.option("--dry-run/--no-dry-run", default=$dry_run, help="Build documents without writing")
@click.option("--log-level", default="INFO", help="Logging level")
def main(connection, db_schema, mongo_uri, database, dry_run, log_level):
    setup_logging(log_level)
    params = ScriptParameters.load(PARAMS_FILE)
    if dry_run != params.dry_run:
        params = ScriptParameters.from_dict({**params.to_dict(), "dry_run": dry_run})

    source = SQLAlchemyRowSource(connection, schema=db_schema)
    sink = MongoDocumentSink(mongo_uri, database)
    try:
        summary = MigrationRunner(source, sink).run([params])
    finally:
        sink.close()
        source.close()

    result = summary.get(params.collection)
    click.echo(
        f"{result.collection}: {result.status}, attempted={result.attempted} "
        f"succeeded={result.succeeded} skipped={result.skipped}"
    )
    if result.status != "completed":
        raise SystemExit(1)


if __name__ == "__main__":
    main()
''')


def script_name(position: int, params: ScriptParameters) -> str:
    return f"{position:02d}_{params.collection}.py"


def render_script(
    params: ScriptParameters,
    destination_uri: str,
    database: str,
    source_schema: str = "public",
) -> str:
    """Render the runnable migration script for one collection."""
    return SCRIPT_TEMPLATE.substitute(
        table=params.table,
        collection=params.collection,
        params_file=f"{params.collection}.params.json",
        preload=", ".join(params.preload) or "nothing (no dependencies)",
        source_schema=repr(source_schema),
        uri=repr(destination_uri),
        database=repr(database),
        dry_run=repr(params.dry_run),
    )


def write_migration_bundle(
    report: SynthesisReport,
    output_dir: str | Path,
    destination_uri: str,
    database: str,
    source_schema: str = "public",
) -> List[Path]:
    """Write plan, parameter files and scripts.

    Args:
        report: Synthesis report
        output_dir: Directory to write into (created if missing)
        destination_uri: Default MongoDB URI baked into the scripts
        database: Default destination database baked into the scripts
        source_schema: Default source schema baked into the scripts

    Returns:
        Paths of the generated scripts, in execution order
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / "plan.json", "w") as f:
        json.dump(report.to_dict(), f, indent=2)

    scripts = []
    for position, params in enumerate(report.parameters, start=1):
        params.save(output_dir / f"{params.collection}.params.json")
        script_path = output_dir / script_name(position, params)
        script_path.write_text(
            render_script(params, destination_uri, database, source_schema)
        )
        scripts.append(script_path)

    logger.info(f"Wrote {len(scripts)} migration scripts to {output_dir}")
    return scripts
