"""Relational schema model, DDL parsing and name normalization."""

from sql2nosql.core.schema.ddl_parser import map_type, parse_sql_schema
from sql2nosql.core.schema.naming import (
    is_id_like,
    match_name,
    name_variants,
    strip_id_suffix,
)
from sql2nosql.core.schema.types import (
    Cardinality,
    Column,
    ForeignKey,
    RelationalSchema,
    SqlColumnType,
    Table,
)

__all__ = [
    "Cardinality",
    "Column",
    "ForeignKey",
    "RelationalSchema",
    "SqlColumnType",
    "Table",
    "is_id_like",
    "map_type",
    "match_name",
    "name_variants",
    "parse_sql_schema",
    "strip_id_suffix",
]
