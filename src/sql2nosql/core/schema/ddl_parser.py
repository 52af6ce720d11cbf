"""Deterministic parser for a Postgres-style subset of DDL.

Handles:
- ``CREATE TABLE [IF NOT EXISTS] <name> (...);``
- column lines: ``name type [NOT NULL] [DEFAULT ...] [PRIMARY KEY] [UNIQUE] [REFERENCES t(c)]``
- table-level ``[CONSTRAINT n] PRIMARY KEY (col, ...)``
- table-level ``[CONSTRAINT n] UNIQUE (col, ...)``
- table-level ``[CONSTRAINT n] FOREIGN KEY (col) REFERENCES other(col)``

Composite foreign keys are skipped. Other statements are ignored.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from sql2nosql.core.schema.types import (
    Column,
    ForeignKey,
    RelationalSchema,
    SqlColumnType,
    Table,
)
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)

TYPE_MAP: Dict[str, SqlColumnType] = {
    "integer": SqlColumnType.INTEGER,
    "int": SqlColumnType.INTEGER,
    "int4": SqlColumnType.INTEGER,
    "smallint": SqlColumnType.INTEGER,
    "bigint": SqlColumnType.BIGINT,
    "int8": SqlColumnType.BIGINT,
    "serial": SqlColumnType.SERIAL,
    "bigserial": SqlColumnType.BIGSERIAL,
    "numeric": SqlColumnType.NUMERIC,
    "decimal": SqlColumnType.NUMERIC,
    "real": SqlColumnType.NUMERIC,
    "float": SqlColumnType.NUMERIC,
    "double precision": SqlColumnType.NUMERIC,
    "text": SqlColumnType.TEXT,
    "varchar": SqlColumnType.VARCHAR,
    "character varying": SqlColumnType.VARCHAR,
    "char": SqlColumnType.VARCHAR,
    "character": SqlColumnType.VARCHAR,
    "boolean": SqlColumnType.BOOLEAN,
    "bool": SqlColumnType.BOOLEAN,
    "timestamp": SqlColumnType.TIMESTAMP,
    "timestamp without time zone": SqlColumnType.TIMESTAMP,
    "timestamptz": SqlColumnType.TIMESTAMPTZ,
    "timestamp with time zone": SqlColumnType.TIMESTAMPTZ,
    "date": SqlColumnType.DATE,
    "json": SqlColumnType.JSON,
    "jsonb": SqlColumnType.JSONB,
    "uuid": SqlColumnType.UUID,
}

# Longest first so "timestamp with time zone" wins over "timestamp"
_MULTI_WORD_TYPES = sorted(
    (name for name in TYPE_MAP if " " in name), key=len, reverse=True
)

_CREATE_TABLE_RE = re.compile(
    r"^CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(\"?[\w.]+\"?(?:\.\"?\w+\"?)?)\s*\((.*)\)$",
    re.IGNORECASE | re.DOTALL,
)
_CONSTRAINT_PREFIX_RE = re.compile(r"^CONSTRAINT\s+\"?\w+\"?\s+", re.IGNORECASE)
_REFERENCES_RE = re.compile(
    r"REFERENCES\s+(\"?[\w.]+\"?)\s*\(([^)]+)\)", re.IGNORECASE
)
_COLUMN_LIST_RE = re.compile(r"\(([^)]+)\)")


def map_type(type_text: str) -> SqlColumnType:
    """Map a DDL type spelling to a SqlColumnType (UNKNOWN when unrecognized)."""
    base = re.sub(r"\(.*", "", type_text.strip().lower()).strip()
    return TYPE_MAP.get(base, SqlColumnType.UNKNOWN)


def parse_sql_schema(sql: str) -> RelationalSchema:
    """Parse ``CREATE TABLE`` statements into a RelationalSchema.

    Args:
        sql: DDL text

    Returns:
        RelationalSchema (empty for blank input)

    Raises:
        SchemaValidationError: If a parsed table is malformed (e.g. a primary
            key naming an undeclared column)

    Example:
        >>> schema = parse_sql_schema(
        ...     "CREATE TABLE artist (id integer PRIMARY KEY, name text);"
        ... )
        >>> schema.table_names
        ['artist']
    """
    cleaned = _strip_comments(sql).strip()
    if not cleaned:
        return RelationalSchema()

    tables: List[Table] = []
    foreign_keys: List[ForeignKey] = []

    for statement in cleaned.split(";"):
        statement = statement.strip()
        match = _CREATE_TABLE_RE.match(statement)
        if not match:
            if statement:
                logger.debug(f"Ignoring statement: {statement[:60]}")
            continue

        table_name = _unqualify(match.group(1))
        table, table_fks = _parse_table_body(table_name, match.group(2))
        tables.append(table)
        foreign_keys.extend(table_fks)

    foreign_keys = _drop_dangling_foreign_keys(tables, foreign_keys)
    logger.info(
        f"Parsed {len(tables)} tables and {len(foreign_keys)} foreign keys from DDL"
    )
    return RelationalSchema(tables=tables, foreign_keys=foreign_keys)


def _parse_table_body(table_name: str, body: str) -> Tuple[Table, List[ForeignKey]]:
    columns: List[Column] = []
    primary_key: List[str] = []
    inline_primary_key: List[str] = []
    unique_constraints: List[List[str]] = []
    foreign_keys: List[ForeignKey] = []

    for raw_line in _split_top_level(body):
        line = re.sub(r"\s+", " ", raw_line).strip()
        if not line:
            continue

        line = _CONSTRAINT_PREFIX_RE.sub("", line)
        upper = line.upper()

        if upper.startswith("PRIMARY KEY"):
            primary_key.extend(_extract_column_list(line))
            continue

        if upper.startswith("UNIQUE"):
            group = _extract_column_list(line)
            if group:
                unique_constraints.append(group)
            continue

        if upper.startswith("FOREIGN KEY"):
            fk = _parse_table_level_foreign_key(line, table_name)
            if fk:
                foreign_keys.append(fk)
            continue

        if upper.startswith(("CHECK", "EXCLUDE")):
            continue

        column, inline_fk = _parse_column_line(line, table_name)
        if column is None:
            continue
        columns.append(column)
        if column.is_primary_key:
            inline_primary_key.append(column.name)
        if inline_fk:
            foreign_keys.append(inline_fk)

    # Table-level PRIMARY KEY wins; inline markers are the fallback
    key = primary_key or inline_primary_key
    if key:
        columns = [
            Column(
                name=c.name,
                type=c.type,
                nullable=False if c.name in key else c.nullable,
                is_primary_key=c.name in key,
                is_unique=c.is_unique,
                has_default=c.has_default,
            )
            for c in columns
        ]

    table = Table(
        name=table_name,
        columns=columns,
        primary_key=key,
        unique_constraints=unique_constraints,
    )
    return table, foreign_keys


def _parse_column_line(
    line: str, table_name: str
) -> Tuple[Optional[Column], Optional[ForeignKey]]:
    tokens = line.split(" ")
    if len(tokens) < 2:
        return None, None

    name = _strip_quotes(tokens[0])
    rest_text = " ".join(tokens[1:])
    type_text, modifiers = _split_type(rest_text)
    upper = modifiers.upper()

    column = Column(
        name=name,
        type=map_type(type_text),
        nullable="NOT NULL" not in upper,
        is_primary_key="PRIMARY KEY" in upper,
        is_unique="UNIQUE" in upper,
        has_default="DEFAULT " in f"{upper} ",
    )

    inline_fk = None
    ref = _REFERENCES_RE.search(modifiers)
    if ref:
        to_columns = _split_names(ref.group(2))
        if len(to_columns) == 1:
            inline_fk = ForeignKey(
                name=f"{table_name}_{name}_fk",
                from_table=table_name,
                from_column=name,
                to_table=_unqualify(ref.group(1)),
                to_column=to_columns[0],
            )
    return column, inline_fk


def _split_type(text: str) -> Tuple[str, str]:
    """Split ``"varchar(20) NOT NULL"`` into type text and modifiers."""
    lower = text.lower()
    for multi in _MULTI_WORD_TYPES:
        if lower.startswith(multi):
            rest = text[len(multi):]
            # Keep a length argument attached, e.g. "character varying(20)"
            args = re.match(r"^\s*\([^)]*\)", rest)
            if args:
                return text[: len(multi) + args.end()], rest[args.end():].strip()
            return text[: len(multi)], rest.strip()

    match = re.match(r"^(\S+?(?:\([^)]*\))?)(?:\s+(.*))?$", text)
    if not match:
        return text, ""
    return match.group(1), (match.group(2) or "").strip()


def _parse_table_level_foreign_key(line: str, table_name: str) -> Optional[ForeignKey]:
    from_columns = _extract_column_list(line)
    ref = _REFERENCES_RE.search(line)
    if not from_columns or not ref:
        return None

    to_columns = _split_names(ref.group(2))
    if len(from_columns) != 1 or len(to_columns) != 1:
        logger.warning(
            f"Skipping composite foreign key on {table_name}({', '.join(from_columns)})"
        )
        return None

    return ForeignKey(
        name=f"{table_name}_{from_columns[0]}_fk",
        from_table=table_name,
        from_column=from_columns[0],
        to_table=_unqualify(ref.group(1)),
        to_column=to_columns[0],
    )


def _drop_dangling_foreign_keys(
    tables: List[Table], foreign_keys: List[ForeignKey]
) -> List[ForeignKey]:
    """Drop foreign keys whose target was not part of the parsed DDL."""
    by_name = {t.name: t for t in tables}
    kept = []
    for fk in foreign_keys:
        target = by_name.get(fk.to_table)
        if target is None or not target.has_column(fk.to_column):
            logger.warning(
                f"Dropping {fk}: referenced table or column not found in the DDL"
            )
            continue
        kept.append(fk)
    return kept


def _split_top_level(body: str) -> List[str]:
    """Split a table body on commas that are not nested in parentheses."""
    parts = []
    current = []
    depth = 0
    for ch in body:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    if "".join(current).strip():
        parts.append("".join(current))
    return parts


def _strip_comments(sql: str) -> str:
    sql = re.sub(r"/\*.*?\*/", " ", sql, flags=re.DOTALL)
    return re.sub(r"--[^\n]*", "", sql)


def _extract_column_list(line: str) -> List[str]:
    match = _COLUMN_LIST_RE.search(line)
    if not match:
        return []
    return _split_names(match.group(1))


def _split_names(text: str) -> List[str]:
    return [_strip_quotes(part) for part in text.split(",") if part.strip()]


def _strip_quotes(name: str) -> str:
    name = name.strip()
    if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
        return name[1:-1]
    return name


def _unqualify(name: str) -> str:
    """Drop a schema qualifier: ``public."Artist"`` -> ``Artist``."""
    return _strip_quotes(name.strip().split(".")[-1])
