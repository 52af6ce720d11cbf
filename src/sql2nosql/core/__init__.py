"""Core modules for sql2nosql."""

# Re-export all public APIs
from sql2nosql.core.advisory import (
    AdvisoryRecommendation,
    AdvisoryReport,
    RelationshipType,
    SchemaAdvisor,
    Strategy,
)
from sql2nosql.core.document import (
    AugmentationResult,
    DocumentCollection,
    DocumentSchema,
    ObjectField,
    ReferenceField,
    ScalarField,
    augment_schema,
    build_dependency_graph,
    map_to_document_schema,
    resolve_execution_order,
    resolve_referenced_table,
)
from sql2nosql.core.migration import (
    MigrationConfig,
    MigrationRunner,
    MigrationSummary,
    ScriptParameters,
    SynthesisReport,
    synthesize_parameters,
)
from sql2nosql.core.schema import (
    Column,
    ForeignKey,
    RelationalSchema,
    SqlColumnType,
    Table,
    parse_sql_schema,
)

__all__ = [
    # Relational schema
    "Column",
    "ForeignKey",
    "RelationalSchema",
    "SqlColumnType",
    "Table",
    "parse_sql_schema",
    # Document schema
    "AugmentationResult",
    "DocumentCollection",
    "DocumentSchema",
    "ObjectField",
    "ReferenceField",
    "ScalarField",
    "augment_schema",
    "build_dependency_graph",
    "map_to_document_schema",
    "resolve_execution_order",
    "resolve_referenced_table",
    # Advisory
    "AdvisoryRecommendation",
    "AdvisoryReport",
    "RelationshipType",
    "SchemaAdvisor",
    "Strategy",
    # Migration
    "MigrationConfig",
    "MigrationRunner",
    "MigrationSummary",
    "ScriptParameters",
    "SynthesisReport",
    "synthesize_parameters",
]
