"""Business logic for analyze and advise commands."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from sql2nosql.connectors import ConnectorFactory
from sql2nosql.core.advisory.advisor import SchemaAdvisor
from sql2nosql.core.advisory.types import AdvisoryReport
from sql2nosql.core.document.mapper import map_to_document_schema
from sql2nosql.core.document.merger import AugmentationResult, augment_schema
from sql2nosql.core.document.types import DocumentSchema
from sql2nosql.core.report import write_analysis_report
from sql2nosql.core.schema.types import RelationalSchema
from sql2nosql.utils.config import Config
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)

DOCUMENT_SCHEMA_FILE = "document-schema.json"
RECOMMENDATIONS_FILE = "recommendations.json"


class SchemaHandler:
    """Handler for schema analysis operations.

    Keeps the analyze/advise commands thin: source selection, mapping,
    advisory merge and report writing live here.

    Example:
        >>> handler = SchemaHandler(config)
        >>> relational = handler.load_relational_schema(ddl_file="schema.sql")
        >>> baseline = handler.map(relational)
    """

    def __init__(self, config: Config):
        """Initialize handler.

        Args:
            config: Configuration instance
        """
        self.config = config

    def load_relational_schema(
        self,
        connection: Optional[str] = None,
        db_schema: Optional[str] = None,
        ddl_file: Optional[str] = None,
    ) -> RelationalSchema:
        """Load the relational schema from CLI options, falling back to config.

        Raises:
            ValueError: If no source is given and none is configured
        """
        if ddl_file:
            self.config.set("source.ddl_file", ddl_file)
        if connection:
            self.config.set("source.connection", connection)
            self.config.set("source.ddl_file", None)
        if db_schema:
            self.config.set("source.schema", db_schema)

        connector = ConnectorFactory.from_config(self.config)
        try:
            return connector.load_schema()
        finally:
            connector.close()

    def map(self, relational: RelationalSchema) -> DocumentSchema:
        return map_to_document_schema(relational)

    def load_recommendations(self, path: str | Path) -> AdvisoryReport:
        report = AdvisoryReport.load(path)
        logger.info(f"Loaded {len(report.embeddings)} recommendations from {path}")
        return report

    def advise(
        self,
        relational: RelationalSchema,
        baseline: DocumentSchema,
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ) -> AdvisoryReport:
        """Ask the configured LLM provider for embedding recommendations."""
        from sql2nosql.agent import AgentWrapper

        agent = AgentWrapper(provider=provider, model=model, config=self.config)
        advisor = SchemaAdvisor(agent, temperature=self.config.get("agent.temperature"))
        return advisor.recommend(relational, baseline)

    def augment(
        self,
        baseline: DocumentSchema,
        relational: RelationalSchema,
        advisory: AdvisoryReport,
    ) -> AugmentationResult:
        min_confidence = self.config.get("advisory.min_confidence", 0.0) or 0.0
        return augment_schema(
            baseline, relational, advisory.embeddings, min_confidence=min_confidence
        )

    def output_dir(self, output_dir: Optional[str] = None) -> Path:
        return Path(output_dir or self.config.get("output.dir", "./output"))

    def write_report(
        self,
        relational: RelationalSchema,
        baseline: DocumentSchema,
        output_dir: Path,
        augmentation: Optional[AugmentationResult] = None,
        advisory: Optional[AdvisoryReport] = None,
    ) -> List[Path]:
        """Write the analysis report plus the final document schema.

        ``document-schema.json`` holds the augmented schema when one exists,
        otherwise the baseline; ``migrate plan`` reads it.
        """
        written = write_analysis_report(
            relational, baseline, output_dir, augmentation=augmentation, advisory=advisory
        )
        final = augmentation.schema if augmentation is not None else baseline
        schema_path = output_dir / DOCUMENT_SCHEMA_FILE
        final.save(schema_path)
        written.append(schema_path)
        return written
