"""Relational schema data types.

Values are constructed once per analysis run and never modified afterwards.
Shape errors (a key naming a missing column, a foreign key to a missing
table) are rejected here, at construction, so later stages can rely on them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from sql2nosql.core.errors import SchemaValidationError
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


class SqlColumnType(Enum):
    """Semantic column types understood by the mapper."""

    INTEGER = "integer"
    BIGINT = "bigint"
    SERIAL = "serial"
    BIGSERIAL = "bigserial"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    TIMESTAMPTZ = "timestamptz"
    DATE = "date"
    TEXT = "text"
    VARCHAR = "varchar"
    UUID = "uuid"
    JSON = "json"
    JSONB = "jsonb"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> SqlColumnType:
        """Parse a stored type name, degrading to UNKNOWN."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN


class Cardinality(Enum):
    """Relationship cardinality between two tables."""

    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"


@dataclass(frozen=True)
class Column:
    """A single table column."""

    name: str
    type: SqlColumnType = SqlColumnType.UNKNOWN
    nullable: bool = True
    is_primary_key: bool = False
    is_unique: bool = False
    has_default: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "nullable": self.nullable,
            "is_primary_key": self.is_primary_key,
            "is_unique": self.is_unique,
            "has_default": self.has_default,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Column:
        return cls(
            name=data["name"],
            type=SqlColumnType.parse(data.get("type", "unknown")),
            nullable=data.get("nullable", True),
            is_primary_key=data.get("is_primary_key", False),
            is_unique=data.get("is_unique", False),
            has_default=data.get("has_default", False),
        )


@dataclass(frozen=True)
class Table:
    """A table: ordered columns, primary key and unique constraint groups."""

    name: str
    columns: Tuple[Column, ...]
    primary_key: Tuple[str, ...] = ()
    unique_constraints: Tuple[Tuple[str, ...], ...] = ()

    def __post_init__(self):
        # Accept lists from callers but store tuples
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "primary_key", tuple(self.primary_key))
        object.__setattr__(
            self,
            "unique_constraints",
            tuple(tuple(group) for group in self.unique_constraints),
        )
        self._validate()

    def _validate(self) -> None:
        seen = set()
        for column in self.columns:
            if column.name in seen:
                raise SchemaValidationError(
                    f"Table '{self.name}' declares column '{column.name}' twice",
                    table=self.name,
                )
            seen.add(column.name)

        for name in self.primary_key:
            if name not in seen:
                raise SchemaValidationError(
                    f"Primary key of table '{self.name}' references missing column '{name}'",
                    table=self.name,
                )

        for group in self.unique_constraints:
            if not group:
                raise SchemaValidationError(
                    f"Table '{self.name}' declares an empty unique constraint",
                    table=self.name,
                )
            for name in group:
                if name not in seen:
                    raise SchemaValidationError(
                        f"Unique constraint {list(group)} of table '{self.name}' "
                        f"references missing column '{name}'",
                        table=self.name,
                    )

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def has_column(self, name: str) -> bool:
        return self.get_column(name) is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
            "primary_key": list(self.primary_key),
            "unique_constraints": [list(g) for g in self.unique_constraints],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Table:
        return cls(
            name=data["name"],
            columns=[Column.from_dict(c) for c in data.get("columns", [])],
            primary_key=data.get("primary_key", []),
            unique_constraints=data.get("unique_constraints", []),
        )

    def __repr__(self) -> str:
        return f"Table({self.name}, columns={len(self.columns)}, pk={list(self.primary_key)})"


@dataclass(frozen=True)
class ForeignKey:
    """Single-column foreign key relationship."""

    name: str
    from_table: str
    from_column: str
    to_table: str
    to_column: str
    cardinality: Cardinality = Cardinality.ONE_TO_MANY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "from_table": self.from_table,
            "from_column": self.from_column,
            "to_table": self.to_table,
            "to_column": self.to_column,
            "cardinality": self.cardinality.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ForeignKey:
        return cls(
            name=data.get("name")
            or f"{data['from_table']}_{data['from_column']}_fk",
            from_table=data["from_table"],
            from_column=data["from_column"],
            to_table=data["to_table"],
            to_column=data["to_column"],
            cardinality=Cardinality(data.get("cardinality", "one-to-many")),
        )

    def __repr__(self) -> str:
        return (
            f"FK({self.from_table}.{self.from_column} -> "
            f"{self.to_table}.{self.to_column})"
        )


@dataclass(frozen=True)
class RelationalSchema:
    """Complete relational schema: tables plus foreign keys."""

    tables: Tuple[Table, ...] = ()
    foreign_keys: Tuple[ForeignKey, ...] = ()
    _by_name: Dict[str, Table] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "tables", tuple(self.tables))
        object.__setattr__(self, "foreign_keys", tuple(self.foreign_keys))

        by_name: Dict[str, Table] = {}
        for table in self.tables:
            if table.name in by_name:
                raise SchemaValidationError(
                    f"Table '{table.name}' is declared twice", table=table.name
                )
            by_name[table.name] = table
        object.__setattr__(self, "_by_name", by_name)

        for fk in self.foreign_keys:
            self._validate_foreign_key(fk)

    def _validate_foreign_key(self, fk: ForeignKey) -> None:
        source = self._by_name.get(fk.from_table)
        if source is None:
            raise SchemaValidationError(
                f"Foreign key '{fk.name}' starts at missing table '{fk.from_table}'",
                table=fk.from_table,
            )
        if not source.has_column(fk.from_column):
            raise SchemaValidationError(
                f"Foreign key '{fk.name}' uses missing column "
                f"'{fk.from_table}.{fk.from_column}'",
                table=fk.from_table,
            )
        target = self._by_name.get(fk.to_table)
        if target is None:
            raise SchemaValidationError(
                f"Foreign key '{fk.name}' references missing table '{fk.to_table}'",
                table=fk.from_table,
            )
        if not target.has_column(fk.to_column):
            raise SchemaValidationError(
                f"Foreign key '{fk.name}' references missing column "
                f"'{fk.to_table}.{fk.to_column}'",
                table=fk.from_table,
            )

    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.tables]

    def get_table(self, name: str) -> Optional[Table]:
        return self._by_name.get(name)

    def find_foreign_key(self, table: str, column: str) -> Optional[ForeignKey]:
        """Return the foreign key declared on ``table.column``, if any."""
        for fk in self.foreign_keys:
            if fk.from_table == table and fk.from_column == column:
                return fk
        return None

    def get_foreign_keys_for_table(
        self, table_name: str, direction: str = "outgoing"
    ) -> List[ForeignKey]:
        """Get foreign keys involving a table.

        Args:
            table_name: Table name
            direction: 'outgoing' (declared on the table), 'incoming' or 'both'

        Returns:
            List of ForeignKey objects in declaration order
        """
        if direction == "outgoing":
            return [fk for fk in self.foreign_keys if fk.from_table == table_name]
        elif direction == "incoming":
            return [fk for fk in self.foreign_keys if fk.to_table == table_name]
        else:
            return [
                fk
                for fk in self.foreign_keys
                if fk.from_table == table_name or fk.to_table == table_name
            ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "tables": [t.to_dict() for t in self.tables],
            "foreign_keys": [fk.to_dict() for fk in self.foreign_keys],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RelationalSchema:
        """Create from dictionary.

        Args:
            data: Dictionary with ``tables`` and ``foreign_keys`` lists

        Returns:
            RelationalSchema instance

        Raises:
            SchemaValidationError: If the described schema is malformed
        """
        return cls(
            tables=[Table.from_dict(t) for t in data.get("tables", [])],
            foreign_keys=[ForeignKey.from_dict(fk) for fk in data.get("foreign_keys", [])],
        )

    def save(self, path: str | Path) -> None:
        """Save schema to JSON file.

        Args:
            path: Path to save JSON file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Saved relational schema to {path}")

    @classmethod
    def load(cls, path: str | Path) -> RelationalSchema:
        """Load schema from JSON file.

        Args:
            path: Path to JSON file

        Returns:
            RelationalSchema instance
        """
        with open(path, "r") as f:
            data = json.load(f)

        return cls.from_dict(data)

    def __repr__(self) -> str:
        return (
            f"RelationalSchema(tables={len(self.tables)}, "
            f"fks={len(self.foreign_keys)})"
        )
