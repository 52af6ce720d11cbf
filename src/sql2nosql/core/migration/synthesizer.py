"""Synthesize per-collection migration parameters.

For each collection, in dependency order:

- identity: primary key, else the first id-like column
- upsert filter: one equality per identity column
- batching: full scan or keyset pages ordered by the identity columns
- indexes: one unique index per primary key / unique constraint
- preload + embeds: the dependency collections and how to join them
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sql2nosql.core.document.dependencies import (
    build_dependency_graph,
    find_embedded_source,
    resolve_execution_order,
)
from sql2nosql.core.document.merger import nested_field_name
from sql2nosql.core.document.types import DocumentCollection, DocumentSchema
from sql2nosql.core.errors import MissingIdentityError, SchemaValidationError
from sql2nosql.core.migration.params import (
    BatchPlan,
    EmbedSpec,
    IdentityShape,
    IndexSpec,
    MigrationConfig,
    ScriptParameters,
)
from sql2nosql.core.schema.naming import is_id_like
from sql2nosql.core.schema.types import RelationalSchema, Table
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SynthesisReport:
    """Parameters for every collection that could be planned, plus failures.

    ``parameters`` follows ``order``; ``failures`` maps collection name to the
    error that prevented planning it.
    """

    order: List[str] = field(default_factory=list)
    parameters: List[ScriptParameters] = field(default_factory=list)
    failures: Dict[str, Exception] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def get(self, collection: str) -> Optional[ScriptParameters]:
        for params in self.parameters:
            if params.collection == collection:
                return params
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order": list(self.order),
            "parameters": [p.to_dict() for p in self.parameters],
            "failures": {name: str(err) for name, err in self.failures.items()},
            "warnings": list(self.warnings),
        }


def resolve_identity(table: Table) -> IdentityShape:
    """Primary key in declared order, else the first id-like column.

    Raises:
        MissingIdentityError: If neither exists
    """
    if table.primary_key:
        return IdentityShape(columns=table.primary_key, source="primary_key")
    for column in table.columns:
        if is_id_like(column.name):
            unique = column.is_unique or (column.name,) in table.unique_constraints
            return IdentityShape(columns=(column.name,), source="id_like", unique=unique)
    raise MissingIdentityError(table.name)


def build_indexes(table: Table) -> List[IndexSpec]:
    """Unique indexes for the primary key and every unique constraint."""
    groups = []
    if table.primary_key:
        groups.append(tuple(table.primary_key))
    groups.extend(tuple(g) for g in table.unique_constraints)
    groups.extend((c.name,) for c in table.columns if c.is_unique)

    indexes = []
    seen = set()
    for columns in groups:
        if columns in seen:
            continue
        seen.add(columns)
        suffix = "pk" if columns == tuple(table.primary_key) else "uniq"
        indexes.append(
            IndexSpec(name=f"{table.name}_{'_'.join(columns)}_{suffix}", columns=columns)
        )
    return indexes


def build_embed_spec(
    relational: RelationalSchema,
    table: Table,
    field_name: str,
    source_collection: str,
) -> Optional[EmbedSpec]:
    """Work out how ``table`` rows join to ``source_collection`` documents.

    A declared foreign key to the source table wins. Otherwise a column whose
    id-stripped name equals the embedded field name is joined against the
    source's same-named column, or its single-column primary key.
    """
    for fk in relational.get_foreign_keys_for_table(table.name):
        if fk.to_table == source_collection and nested_field_name(fk.from_column) == field_name:
            return EmbedSpec(field_name, source_collection, (fk.from_column,), (fk.to_column,))
    for fk in relational.get_foreign_keys_for_table(table.name):
        if fk.to_table == source_collection:
            return EmbedSpec(field_name, source_collection, (fk.from_column,), (fk.to_column,))

    source = relational.get_table(source_collection)
    if source is None:
        return None

    for column in table.columns:
        if not is_id_like(column.name) or nested_field_name(column.name) != field_name:
            continue
        if source.has_column(column.name):
            return EmbedSpec(field_name, source_collection, (column.name,), (column.name,))
        if len(source.primary_key) == 1:
            return EmbedSpec(
                field_name, source_collection, (column.name,), (source.primary_key[0],)
            )
    return None


def synthesize_collection(
    relational: RelationalSchema,
    document: DocumentSchema,
    collection: DocumentCollection,
    dependencies: List[str],
    config: MigrationConfig,
    warnings: Optional[List[str]] = None,
) -> ScriptParameters:
    """Parameters for a single collection.

    Raises:
        SchemaValidationError: If no table backs the collection
        MissingIdentityError: If the table has no usable identity
    """
    warnings = warnings if warnings is not None else []
    table = relational.get_table(collection.name)
    if table is None:
        raise SchemaValidationError(
            f"Collection '{collection.name}' has no source table", table=collection.name
        )

    identity = resolve_identity(table)
    if identity.source == "id_like":
        column = table.get_column(identity.columns[0])
        message = (
            f"{collection.name}: no primary key, using '{column.name}' as identity"
        )
        if not identity.unique:
            message += (
                " (column is not declared unique: rows sharing a value collapse into "
                "one document, and the table is read in a single scan)"
            )
        logger.warning(message)
        warnings.append(message)

    embeds = []
    for embedded in collection.embedded_fields():
        source = find_embedded_source(document, collection.name, embedded.name)
        if source is None or source not in dependencies:
            continue
        spec = build_embed_spec(relational, table, embedded.name, source)
        if spec is None:
            message = (
                f"{collection.name}.{embedded.name}: no join column to {source}; "
                "field will not be filled"
            )
            logger.warning(message)
            warnings.append(message)
            continue
        embeds.append(spec)

    # Keyset pages need a strict order; repeated fallback values would drop rows
    batch_size = config.batch_size if identity.unique else 0

    return ScriptParameters(
        collection=collection.name,
        table=table.name,
        identity=identity,
        batch_plan=BatchPlan(order_by=identity.columns, batch_size=batch_size),
        indexes=tuple(build_indexes(table)),
        preload=tuple(dependencies),
        embeds=tuple(embeds),
        fields=collection.fields,
        error_policy=config.error_policy,
        dry_run=config.dry_run,
        progress_interval=config.progress_interval,
    )


def synthesize_parameters(
    relational: RelationalSchema,
    document: DocumentSchema,
    config: MigrationConfig,
    fail_fast: bool = False,
) -> SynthesisReport:
    """Synthesize migration parameters for every collection.

    Args:
        relational: Source relational schema
        document: Target document schema (baseline or augmented)
        config: Validated migration configuration
        fail_fast: Raise on the first collection that cannot be planned
            instead of recording it in ``failures``

    Returns:
        SynthesisReport with parameters in dependency order

    Raises:
        DependencyCycleError: If embedded collections depend on each other
        MissingIdentityError: With ``fail_fast`` and a collection lacking identity
    """
    order = resolve_execution_order(document)
    graph = build_dependency_graph(document)
    report = SynthesisReport(order=order)

    for name in order:
        collection = document.get_collection(name)
        try:
            params = synthesize_collection(
                relational, document, collection, graph[name], config, report.warnings
            )
        except (MissingIdentityError, SchemaValidationError) as e:
            if fail_fast:
                raise
            logger.error(f"Cannot plan migration for {name}: {e}")
            report.failures[name] = e
            continue
        report.parameters.append(params)

    blocked = [
        p.collection for p in report.parameters if set(p.preload) & set(report.failures)
    ]
    for name in blocked:
        message = f"{name}: depends on a collection that could not be planned"
        logger.warning(message)
        report.warnings.append(message)

    logger.info(
        f"Planned {len(report.parameters)} collections"
        f" ({len(report.failures)} failed) with batch size {config.batch_size}"
    )
    return report
