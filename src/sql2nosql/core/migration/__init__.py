"""Migration parameter synthesis, script generation and the reference runner."""

from sql2nosql.core.migration.generator import render_script, write_migration_bundle
from sql2nosql.core.migration.params import (
    BatchPlan,
    EmbedSpec,
    ErrorPolicy,
    IdentityShape,
    IndexSpec,
    MigrationConfig,
    ScriptParameters,
)
from sql2nosql.core.migration.runtime import (
    CollectionSummary,
    DocumentSink,
    MigrationRunner,
    MigrationSummary,
    RowSource,
    build_document,
    iter_pages,
)
from sql2nosql.core.migration.synthesizer import (
    SynthesisReport,
    resolve_identity,
    synthesize_parameters,
)

__all__ = [
    "BatchPlan",
    "CollectionSummary",
    "DocumentSink",
    "EmbedSpec",
    "ErrorPolicy",
    "IdentityShape",
    "IndexSpec",
    "MigrationConfig",
    "MigrationRunner",
    "MigrationSummary",
    "RowSource",
    "ScriptParameters",
    "SynthesisReport",
    "build_document",
    "iter_pages",
    "render_script",
    "resolve_identity",
    "synthesize_parameters",
    "write_migration_bundle",
]
