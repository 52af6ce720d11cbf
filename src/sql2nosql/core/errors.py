"""Structural errors raised by the mapping and synthesis pipeline.

All errors subclass ``ValueError`` so callers that already treat bad input as
an invalid value (the CLI does) handle them without special cases. Each error
carries the names needed to act on it without re-running with extra tracing.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class SchemaValidationError(ValueError):
    """Malformed relational schema (unknown key column, duplicate name, ...)."""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table


class InvalidRecommendationError(ValueError):
    """Advisory recommendation with an invalid shape."""


class InvalidConfigError(ValueError):
    """Migration configuration outside its allowed range."""


class MissingIdentityError(ValueError):
    """Collection has no primary key and no id-like column to upsert by."""

    def __init__(self, collection: str):
        super().__init__(
            f"Collection '{collection}' has no primary key and no id-like column; "
            "it cannot be upserted safely"
        )
        self.collection = collection


class DependencyCycleError(ValueError):
    """Embedding dependencies between collections form a cycle."""

    def __init__(self, collections: Sequence[str]):
        self.collections: List[str] = list(collections)
        super().__init__(
            "Embedding dependency cycle between collections: "
            f"{', '.join(self.collections)}. Break the cycle by replacing one of the "
            "embedded fields with a reference."
        )


class MigrationRowError(RuntimeError):
    """A row failed to migrate while the error policy is fail-fast."""

    def __init__(self, collection: str, identity: Dict[str, Any], cause: Exception):
        super().__init__(
            f"Failed to migrate row {identity} of collection '{collection}': {cause}"
        )
        self.collection = collection
        self.identity = identity
        self.cause = cause
