"""Deterministic relational -> document schema mapping.

Rules:
- each table becomes a collection with the same name and column order
- foreign-key columns become reference fields
- every other column is mapped by its type
"""

from __future__ import annotations

from typing import Dict, Tuple

from sql2nosql.core.document.types import (
    DocumentCollection,
    DocumentField,
    DocumentSchema,
    ObjectField,
    ReferenceField,
    ScalarField,
    ScalarType,
)
from sql2nosql.core.schema.types import Column, RelationalSchema, SqlColumnType
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)

_SCALAR_TYPES: Dict[SqlColumnType, ScalarType] = {
    SqlColumnType.INTEGER: ScalarType.NUMBER,
    SqlColumnType.BIGINT: ScalarType.NUMBER,
    SqlColumnType.SERIAL: ScalarType.NUMBER,
    SqlColumnType.BIGSERIAL: ScalarType.NUMBER,
    SqlColumnType.NUMERIC: ScalarType.NUMBER,
    SqlColumnType.BOOLEAN: ScalarType.BOOLEAN,
    SqlColumnType.TIMESTAMP: ScalarType.DATE,
    SqlColumnType.TIMESTAMPTZ: ScalarType.DATE,
    SqlColumnType.DATE: ScalarType.DATE,
    SqlColumnType.TEXT: ScalarType.STRING,
    SqlColumnType.VARCHAR: ScalarType.STRING,
    SqlColumnType.UUID: ScalarType.STRING,
}

_OPAQUE_OBJECT_TYPES = (SqlColumnType.JSON, SqlColumnType.JSONB)


def map_column(column: Column, optional: bool | None = None) -> DocumentField:
    """Map a non-foreign-key column to a document field.

    Args:
        column: Relational column
        optional: Override the optional flag (defaults to the column's nullability)
    """
    is_optional = column.nullable if optional is None else optional
    if column.type in _OPAQUE_OBJECT_TYPES:
        return ObjectField(name=column.name, fields=None, optional=is_optional)
    return ScalarField(
        name=column.name,
        type=_SCALAR_TYPES.get(column.type, ScalarType.UNKNOWN),
        optional=is_optional,
    )


def describe_identity(schema: RelationalSchema, table_name: str) -> str:
    """Name the identity field(s) of ``table_name`` for reference descriptions."""
    table = schema.get_table(table_name)
    if table is None or not table.primary_key:
        return "id"
    if len(table.primary_key) == 1:
        return table.primary_key[0]
    return f"[{', '.join(table.primary_key)}]"


def map_to_document_schema(schema: RelationalSchema) -> DocumentSchema:
    """Map a relational schema to its baseline document schema.

    Pure and deterministic: the same input always yields an equal output.

    Args:
        schema: Relational schema

    Returns:
        DocumentSchema with one collection per table, in table order
    """
    references: Dict[Tuple[str, str], str] = {
        (fk.from_table, fk.from_column): fk.to_table for fk in schema.foreign_keys
    }

    collections = []
    for table in schema.tables:
        fields = []
        for column in table.columns:
            ref_collection = references.get((table.name, column.name))
            if ref_collection is not None:
                fields.append(
                    ReferenceField(
                        name=column.name,
                        ref_collection=ref_collection,
                        optional=column.nullable,
                        description=(
                            f"Reference to {ref_collection}."
                            f"{describe_identity(schema, ref_collection)}"
                        ),
                    )
                )
            else:
                fields.append(map_column(column))

        collections.append(
            DocumentCollection(
                name=table.name,
                fields=tuple(fields),
                description=f"Collection derived from table {table.name}",
            )
        )

    logger.debug(f"Mapped {len(collections)} tables to collections")
    return DocumentSchema(collections=tuple(collections))
