"""Business logic for migrate commands."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Tuple

from sql2nosql.connectors.db_connector import SQLAlchemyRowSource
from sql2nosql.connectors.memory import InMemoryDocumentSink
from sql2nosql.core.advisory.types import AdvisoryReport
from sql2nosql.core.document.mapper import map_to_document_schema
from sql2nosql.core.document.merger import augment_schema
from sql2nosql.core.document.types import DocumentSchema
from sql2nosql.core.migration.generator import write_migration_bundle
from sql2nosql.core.migration.params import (
    ErrorPolicy,
    MigrationConfig,
    ScriptParameters,
)
from sql2nosql.core.migration.runtime import (
    DocumentSink,
    MigrationRunner,
    MigrationSummary,
)
from sql2nosql.core.migration.synthesizer import SynthesisReport, synthesize_parameters
from sql2nosql.core.schema.types import RelationalSchema
from sql2nosql.utils.config import Config
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


class MigrationHandler:
    """Handler for migration planning and execution.

    Example:
        >>> handler = MigrationHandler(config)
        >>> report, scripts = handler.plan(relational, document, "./migration")
        >>> summary = handler.run(handler.load_plan("./migration"), "sqlite:///db.sqlite")
    """

    def __init__(self, config: Config):
        self.config = config

    def migration_config(self, **overrides) -> MigrationConfig:
        """Validated settings from the ``migration`` section plus CLI overrides."""
        return MigrationConfig.from_config(self.config, **overrides)

    def target_schema(
        self,
        relational: RelationalSchema,
        document_schema_file: Optional[str] = None,
        recommendations_file: Optional[str] = None,
    ) -> DocumentSchema:
        """Document schema to migrate into.

        A saved document schema wins; otherwise the baseline mapping,
        augmented with recommendations when a file is given.
        """
        if document_schema_file:
            logger.info(f"Using document schema from {document_schema_file}")
            return DocumentSchema.load(document_schema_file)

        baseline = map_to_document_schema(relational)
        if not recommendations_file:
            return baseline

        advisory = AdvisoryReport.load(recommendations_file)
        result = augment_schema(
            baseline,
            relational,
            advisory.embeddings,
            min_confidence=self.config.get("advisory.min_confidence", 0.0) or 0.0,
        )
        return result.schema

    def plan(
        self,
        relational: RelationalSchema,
        document: DocumentSchema,
        output_dir: str | Path,
        migration_config: Optional[MigrationConfig] = None,
        fail_fast: Optional[bool] = None,
    ) -> Tuple[SynthesisReport, List[Path]]:
        """Synthesize parameters and write the migration bundle."""
        migration_config = migration_config or self.migration_config()
        if fail_fast is None:
            fail_fast = bool(self.config.get("migration.fail_fast", False))

        report = synthesize_parameters(
            relational, document, migration_config, fail_fast=fail_fast
        )
        scripts = write_migration_bundle(
            report,
            output_dir,
            destination_uri=self.config.get("destination.uri"),
            database=self.config.get("destination.database"),
            source_schema=self.config.get("source.schema") or "public",
        )
        return report, scripts

    def load_plan(self, plan_dir: str | Path) -> List[ScriptParameters]:
        """Load the parameters of a plan directory in execution order.

        Raises:
            FileNotFoundError: If ``plan.json`` or a parameter file is missing
        """
        plan_dir = Path(plan_dir)
        plan_path = plan_dir / "plan.json"
        if not plan_path.exists():
            raise FileNotFoundError(
                f"{plan_path} (run 'sql2nosql migrate plan' first)"
            )
        with open(plan_path, "r") as f:
            plan = json.load(f)

        parameters = []
        for collection in plan.get("order", []):
            if collection in plan.get("failures", {}):
                logger.warning(f"Skipping {collection}: it could not be planned")
                continue
            parameters.append(ScriptParameters.load(plan_dir / f"{collection}.params.json"))
        return parameters

    @staticmethod
    def apply_overrides(
        parameters: List[ScriptParameters],
        dry_run: Optional[bool] = None,
        batch_size: Optional[int] = None,
        skip_on_error: Optional[bool] = None,
        progress_interval: Optional[int] = None,
    ) -> List[ScriptParameters]:
        """Return copies of ``parameters`` with the given runtime settings replaced."""
        # Validates the overrides with the same rules as the config
        MigrationConfig(
            batch_size=batch_size if batch_size is not None else 0,
            progress_interval=progress_interval if progress_interval is not None else 0,
        )

        updated = []
        for params in parameters:
            changes = {}
            if dry_run is not None:
                changes["dry_run"] = dry_run
            if batch_size is not None:
                changes["batch_plan"] = replace(params.batch_plan, batch_size=batch_size)
            if skip_on_error is not None:
                changes["error_policy"] = (
                    ErrorPolicy.SKIP_AND_LOG if skip_on_error else ErrorPolicy.FAIL_FAST
                )
            if progress_interval is not None:
                changes["progress_interval"] = progress_interval
            updated.append(replace(params, **changes) if changes else params)
        return updated

    def create_sink(
        self,
        dry_run: bool,
        uri: Optional[str] = None,
        database: Optional[str] = None,
    ) -> DocumentSink:
        """MongoDB sink, or an in-memory one for dry runs (nothing is written)."""
        if dry_run:
            logger.info("Dry run: documents are built in memory only")
            return InMemoryDocumentSink()

        from sql2nosql.connectors.mongo_sink import MongoDocumentSink

        return MongoDocumentSink(
            uri or self.config.get("destination.uri"),
            database or self.config.get("destination.database"),
        )

    def run(
        self,
        parameters: List[ScriptParameters],
        connection: Optional[str] = None,
        db_schema: Optional[str] = None,
        uri: Optional[str] = None,
        database: Optional[str] = None,
    ) -> MigrationSummary:
        """Execute the parameters against the source database and destination.

        Raises:
            ValueError: If no source connection is given or configured
            MigrationRowError: On the first failing row under fail-fast
        """
        connection = connection or self.config.get("source.connection")
        if not connection:
            raise ValueError(
                "No source connection. Pass --connection or set source.connection"
            )

        dry_run = any(p.dry_run for p in parameters)
        source = SQLAlchemyRowSource(
            connection, schema=db_schema or self.config.get("source.schema")
        )
        sink = self.create_sink(dry_run, uri, database)
        try:
            return MigrationRunner(source, sink).run(parameters)
        finally:
            close = getattr(sink, "close", None)
            if close is not None:
                close()
            source.close()
