"""Document schema model, mapping, advisory merge and dependency ordering."""

from sql2nosql.core.document.dependencies import (
    build_dependency_graph,
    resolve_execution_order,
)
from sql2nosql.core.document.mapper import map_column, map_to_document_schema
from sql2nosql.core.document.merger import (
    AugmentationResult,
    MergeOutcome,
    augment_schema,
)
from sql2nosql.core.document.resolver import (
    ResolvedReference,
    resolve_referenced_table,
)
from sql2nosql.core.document.types import (
    DocumentCollection,
    DocumentField,
    DocumentSchema,
    ObjectField,
    ReferenceField,
    ScalarField,
    ScalarType,
)

__all__ = [
    "AugmentationResult",
    "DocumentCollection",
    "DocumentField",
    "DocumentSchema",
    "MergeOutcome",
    "ObjectField",
    "ReferenceField",
    "ResolvedReference",
    "ScalarField",
    "ScalarType",
    "augment_schema",
    "build_dependency_graph",
    "map_column",
    "map_to_document_schema",
    "resolve_execution_order",
    "resolve_referenced_table",
]
