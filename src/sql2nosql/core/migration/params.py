"""Migration configuration and per-collection script parameters."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from sql2nosql.core.document.types import DocumentField, field_from_dict
from sql2nosql.core.errors import InvalidConfigError
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


class ErrorPolicy(Enum):
    """What the runtime does when a single row fails."""

    SKIP_AND_LOG = "skip_and_log"
    FAIL_FAST = "fail_fast"


def _check_count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidConfigError(f"{name} must be >= 0, got {value}")
    return value


@dataclass(frozen=True)
class MigrationConfig:
    """Validated migration settings.

    Attributes:
        batch_size: Rows per page; 0 reads each table in a single scan
        dry_run: Build everything but never write to the destination
        skip_on_error: Log and skip failing rows instead of stopping
        progress_interval: Log progress every N rows; 0 logs only the summary
    """

    batch_size: int = 1000
    dry_run: bool = False
    skip_on_error: bool = True
    progress_interval: int = 1000

    def __post_init__(self):
        _check_count("batch_size", self.batch_size)
        _check_count("progress_interval", self.progress_interval)

    @property
    def error_policy(self) -> ErrorPolicy:
        return ErrorPolicy.SKIP_AND_LOG if self.skip_on_error else ErrorPolicy.FAIL_FAST

    @classmethod
    def from_config(cls, config, **overrides) -> MigrationConfig:
        """Build from the ``migration`` section of a Config; ``None`` overrides are ignored."""
        values = {
            "batch_size": config.get("migration.batch_size", 1000),
            "dry_run": bool(config.get("migration.dry_run", False)),
            "skip_on_error": bool(config.get("migration.skip_on_error", True)),
            "progress_interval": config.get("migration.progress_interval", 1000),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_size": self.batch_size,
            "dry_run": self.dry_run,
            "skip_on_error": self.skip_on_error,
            "progress_interval": self.progress_interval,
            "error_policy": self.error_policy.value,
        }


@dataclass(frozen=True)
class IdentityShape:
    """Columns that identify a document across re-runs.

    ``source`` is ``"primary_key"`` or ``"id_like"`` (fallback column).
    ``unique`` is False when the fallback column may repeat, so its values
    do not give a strict order to page by.
    """

    columns: Tuple[str, ...]
    source: str = "primary_key"
    unique: bool = True

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))

    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1

    def key_of(self, row: Mapping[str, Any]) -> Tuple[Any, ...]:
        return tuple(row[c] for c in self.columns)

    def filter_for(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Upsert filter for ``row``: one equality per identity column.

        Raises:
            KeyError: If the row lacks an identity column
            ValueError: If an identity value is NULL
        """
        upsert_filter = {}
        for column in self.columns:
            value = row[column]
            if value is None:
                raise ValueError(f"identity column '{column}' is NULL")
            upsert_filter[column] = value
        return upsert_filter

    def to_dict(self) -> Dict[str, Any]:
        return {"columns": list(self.columns), "source": self.source, "unique": self.unique}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> IdentityShape:
        return cls(
            columns=tuple(data["columns"]),
            source=data.get("source", "primary_key"),
            unique=data.get("unique", True),
        )


@dataclass(frozen=True)
class BatchPlan:
    """How source rows are read.

    ``batch_size == 0`` is a single scan ordered by ``order_by``. Otherwise
    rows are read in keyset pages: each page holds at most ``batch_size`` rows
    strictly after the previous page's last ``order_by`` tuple.
    """

    order_by: Tuple[str, ...]
    batch_size: int = 0

    def __post_init__(self):
        object.__setattr__(self, "order_by", tuple(self.order_by))

    @property
    def is_full_scan(self) -> bool:
        return self.batch_size == 0

    @property
    def mode(self) -> str:
        return "full_scan" if self.is_full_scan else "keyset"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "order_by": list(self.order_by),
            "batch_size": self.batch_size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BatchPlan:
        return cls(order_by=tuple(data["order_by"]), batch_size=data.get("batch_size", 0))


@dataclass(frozen=True)
class IndexSpec:
    """Destination index, created before any writes."""

    name: str
    columns: Tuple[str, ...]
    unique: bool = True

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "columns": list(self.columns), "unique": self.unique}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> IndexSpec:
        return cls(
            name=data["name"],
            columns=tuple(data["columns"]),
            unique=data.get("unique", True),
        )


@dataclass(frozen=True)
class EmbedSpec:
    """How an embedded object field is filled from a preloaded collection.

    The row's ``local_columns`` values are looked up against the preloaded
    documents keyed by ``source_columns``.
    """

    field: str
    source_collection: str
    local_columns: Tuple[str, ...]
    source_columns: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "local_columns", tuple(self.local_columns))
        object.__setattr__(self, "source_columns", tuple(self.source_columns))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "source_collection": self.source_collection,
            "local_columns": list(self.local_columns),
            "source_columns": list(self.source_columns),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EmbedSpec:
        return cls(
            field=data["field"],
            source_collection=data["source_collection"],
            local_columns=tuple(data["local_columns"]),
            source_columns=tuple(data["source_columns"]),
        )


@dataclass(frozen=True)
class ScriptParameters:
    """Everything needed to migrate one collection."""

    collection: str
    table: str
    identity: IdentityShape
    batch_plan: BatchPlan
    indexes: Tuple[IndexSpec, ...] = ()
    preload: Tuple[str, ...] = ()
    embeds: Tuple[EmbedSpec, ...] = ()
    fields: Tuple[DocumentField, ...] = ()
    error_policy: ErrorPolicy = ErrorPolicy.SKIP_AND_LOG
    dry_run: bool = False
    progress_interval: int = 1000

    def __post_init__(self):
        for name in ("indexes", "preload", "embeds", "fields"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def upsert_filter(self) -> Dict[str, str]:
        """Filter template: destination field -> source column it takes its value from."""
        return {column: column for column in self.identity.columns}

    def get_embed(self, field_name: str) -> Optional[EmbedSpec]:
        for embed in self.embeds:
            if embed.field == field_name:
                return embed
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection": self.collection,
            "table": self.table,
            "identity": self.identity.to_dict(),
            "upsert_filter": self.upsert_filter,
            "batch_plan": self.batch_plan.to_dict(),
            "indexes": [i.to_dict() for i in self.indexes],
            "preload": list(self.preload),
            "embeds": [e.to_dict() for e in self.embeds],
            "fields": [f.to_dict() for f in self.fields],
            "error_policy": self.error_policy.value,
            "dry_run": self.dry_run,
            "progress_interval": self.progress_interval,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScriptParameters:
        return cls(
            collection=data["collection"],
            table=data.get("table", data["collection"]),
            identity=IdentityShape.from_dict(data["identity"]),
            batch_plan=BatchPlan.from_dict(data["batch_plan"]),
            indexes=tuple(IndexSpec.from_dict(i) for i in data.get("indexes", [])),
            preload=tuple(data.get("preload", [])),
            embeds=tuple(EmbedSpec.from_dict(e) for e in data.get("embeds", [])),
            fields=tuple(field_from_dict(f) for f in data.get("fields", [])),
            error_policy=ErrorPolicy(data.get("error_policy", "skip_and_log")),
            dry_run=data.get("dry_run", False),
            progress_interval=_check_count(
                "progress_interval", data.get("progress_interval", 1000)
            ),
        )

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"Saved parameters for {self.collection} to {path}")

    @classmethod
    def load(cls, path: str | Path) -> ScriptParameters:
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))
