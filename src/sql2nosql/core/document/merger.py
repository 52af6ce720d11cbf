"""Merge advisory embedding recommendations into a baseline document schema."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from sql2nosql.core.advisory.types import (
    AdvisoryRecommendation,
    RelationshipType,
    Strategy,
)
from sql2nosql.core.document.mapper import map_column
from sql2nosql.core.document.resolver import resolve_referenced_table
from sql2nosql.core.document.types import (
    DocumentField,
    DocumentSchema,
    ObjectField,
)
from sql2nosql.core.schema.naming import is_id_like, strip_id_suffix
from sql2nosql.core.schema.types import RelationalSchema, Table
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MergeOutcome:
    """What happened to one recommendation."""

    recommendation: AdvisoryRecommendation
    reason: str
    nested_field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection": self.recommendation.collection,
            "field": self.recommendation.field,
            "strategy": self.recommendation.strategy.value,
            "nested_field": self.nested_field,
            "reason": self.reason,
        }


@dataclass
class AugmentationResult:
    """Augmented schema plus the per-recommendation outcomes."""

    schema: DocumentSchema
    applied: List[MergeOutcome] = field(default_factory=list)
    skipped: List[MergeOutcome] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema.to_dict(),
            "applied": [o.to_dict() for o in self.applied],
            "skipped": [o.to_dict() for o in self.skipped],
        }


def nested_field_name(field_name: str) -> str:
    """Embedded field name for a recommendation's field (``artist_id`` -> ``artist``)."""
    stripped = strip_id_suffix(field_name).rstrip("_")
    return stripped or f"{field_name}_obj"


def build_nested_fields(
    table: Table, suggested: Optional[Sequence[str]]
) -> List[DocumentField]:
    """Nested fields for an embedded copy of ``table``.

    Suggested fields first (columns missing from the table are dropped),
    then every id-like column of the table. All nested fields are optional.
    """
    if suggested is None:
        names = table.column_names
    else:
        names = []
        for name in suggested:
            if not table.has_column(name):
                logger.warning(
                    f"Suggested field '{name}' is not a column of '{table.name}'; ignoring"
                )
                continue
            if name not in names:
                names.append(name)

    for column in table.columns:
        if is_id_like(column.name) and column.name not in names:
            names.append(column.name)

    return [map_column(table.get_column(name), optional=True) for name in names]


def augment_schema(
    baseline: DocumentSchema,
    relational: RelationalSchema,
    recommendations: Sequence[AdvisoryRecommendation],
    min_confidence: float = 0.0,
) -> AugmentationResult:
    """Apply embedding recommendations to a baseline schema.

    Recommendations are processed in list order. The baseline is never
    modified; the returned schema is a new value. Unresolvable or invalid
    recommendations are skipped with a warning and listed in ``skipped``.

    Args:
        baseline: Baseline document schema from the mapper
        relational: Relational schema the baseline was derived from
        recommendations: Recommendations to apply
        min_confidence: Skip recommendations with a lower confidence score

    Returns:
        AugmentationResult
    """
    schema = baseline
    result = AugmentationResult(schema=baseline)

    def skip(rec: AdvisoryRecommendation, reason: str) -> None:
        logger.warning(f"Skipping recommendation {rec.collection}.{rec.field}: {reason}")
        result.skipped.append(MergeOutcome(recommendation=rec, reason=reason))

    for rec in recommendations:
        if rec.confidence is not None and rec.confidence < min_confidence:
            skip(rec, f"confidence {rec.confidence} below {min_confidence}")
            continue

        collection = schema.get_collection(rec.collection)
        if collection is None:
            skip(rec, f"unknown collection '{rec.collection}'")
            continue

        resolved = resolve_referenced_table(relational, rec.collection, rec.field)
        if resolved is None:
            skip(rec, f"cannot resolve a referenced table for field '{rec.field}'")
            continue

        implicit = (
            rec.relationship_type == RelationshipType.IMPLICIT or not resolved.is_explicit
        )
        if rec.strategy == Strategy.FULL and implicit:
            skip(rec, "full embedding is only allowed for foreign-key relationships")
            continue

        if rec.strategy == Strategy.REFERENCE:
            result.applied.append(
                MergeOutcome(recommendation=rec, reason="kept as reference")
            )
            continue

        name = nested_field_name(rec.field)
        nested = build_nested_fields(resolved.table, rec.suggested_fields)
        existing = collection.get_field(name)

        if existing is None:
            embedded = ObjectField(
                name=name,
                fields=tuple(nested),
                optional=True,
                description=(
                    f"Embedded {rec.strategy.value} copy of {resolved.table.name}"
                ),
            )
            collection = replace(collection, fields=collection.fields + (embedded,))
            reason = f"embedded {len(nested)} fields from {resolved.table.name}"
        elif isinstance(existing, ObjectField):
            merged = existing.with_nested(nested)
            added = len(merged.fields) - len(existing.fields or ())
            collection = replace(
                collection,
                fields=tuple(merged if f.name == name else f for f in collection.fields),
            )
            reason = f"merged {added} new fields into existing '{name}'"
        else:
            skip(rec, f"field '{name}' already exists and is not an object")
            continue

        schema = schema.replace_collection(collection)
        logger.info(f"Applied {rec.strategy.value} embedding {rec.collection}.{name}: {reason}")
        result.applied.append(
            MergeOutcome(recommendation=rec, reason=reason, nested_field=name)
        )

    result.schema = schema
    return result
