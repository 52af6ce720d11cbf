"""Resolve which table a (collection, field) pair points at.

Kept separate from the merger so the naming heuristics can be swapped or
extended without touching merge logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sql2nosql.core.schema.naming import match_name, strip_id_suffix
from sql2nosql.core.schema.types import ForeignKey, RelationalSchema, Table


@dataclass(frozen=True)
class ResolvedReference:
    """Outcome of a successful resolution.

    ``foreign_key`` is set when a declared foreign key backs the relationship;
    ``None`` means the table was guessed from the field's name.
    """

    table: Table
    foreign_key: Optional[ForeignKey] = None

    @property
    def is_explicit(self) -> bool:
        return self.foreign_key is not None


def resolve_referenced_table(
    schema: RelationalSchema, collection: str, field_name: str
) -> Optional[ResolvedReference]:
    """Find the table referenced by ``collection.field_name``.

    A declared foreign key on (collection, field) wins. Otherwise the field's
    ``_id``/``id`` suffix is stripped and the rest is matched case-insensitively
    against table names, as-is or with ``s``/``es`` appended.

    Args:
        schema: Relational schema
        collection: Collection (table) name that owns the field
        field_name: Field (column) name, e.g. ``artist_id``

    Returns:
        ResolvedReference, or None when nothing matches
    """
    fk = schema.find_foreign_key(collection, field_name)
    if fk is not None:
        table = schema.get_table(fk.to_table)
        if table is not None:
            return ResolvedReference(table=table, foreign_key=fk)

    base = strip_id_suffix(field_name).rstrip("_")
    if not base:
        return None

    name = match_name(base, schema.table_names, include_singular=False)
    if name is None:
        return None
    return ResolvedReference(table=schema.get_table(name))
