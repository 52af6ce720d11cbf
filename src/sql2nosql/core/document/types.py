"""Document (NoSQL) schema data types.

A document field is a tagged union of three shapes:

- ``ScalarField``: string, number, boolean, date, array or unknown
- ``ReferenceField``: points at another collection by identity
- ``ObjectField``: an object; ``fields`` is ``None`` for an opaque JSON value
  and a tuple of nested fields for an embedded copy of another table

All values are frozen. Transformations return new instances.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from sql2nosql.core.errors import SchemaValidationError
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


class ScalarType(Enum):
    """Scalar document value types."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ScalarField:
    name: str
    type: ScalarType = ScalarType.UNKNOWN
    optional: bool = True
    description: Optional[str] = None

    kind = "scalar"

    def to_dict(self) -> Dict[str, Any]:
        data = {"name": self.name, "type": self.type.value, "optional": self.optional}
        if self.description:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class ReferenceField:
    name: str
    ref_collection: str
    optional: bool = True
    description: Optional[str] = None

    kind = "reference"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": "reference",
            "optional": self.optional,
            "ref_collection": self.ref_collection,
        }
        if self.description:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class ObjectField:
    name: str
    fields: Optional[Tuple[DocumentField, ...]] = None
    optional: bool = True
    description: Optional[str] = None

    kind = "object"

    def __post_init__(self):
        if self.fields is not None:
            object.__setattr__(self, "fields", tuple(self.fields))

    @property
    def is_embedded(self) -> bool:
        """True when the object carries a nested shape (an embedded copy)."""
        return self.fields is not None

    @property
    def nested_names(self) -> List[str]:
        return [f.name for f in self.fields or ()]

    def with_nested(self, extra: List[DocumentField]) -> ObjectField:
        """Return a copy with ``extra`` nested fields appended, skipping known names."""
        known = set(self.nested_names)
        merged = list(self.fields or ())
        for nested in extra:
            if nested.name not in known:
                merged.append(nested)
                known.add(nested.name)
        return replace(self, fields=tuple(merged))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "type": "object",
            "optional": self.optional,
        }
        if self.description:
            data["description"] = self.description
        if self.fields is not None:
            data["fields"] = [f.to_dict() for f in self.fields]
        return data


DocumentField = Union[ScalarField, ReferenceField, ObjectField]


def field_from_dict(data: Dict[str, Any]) -> DocumentField:
    """Rebuild a document field from its ``to_dict`` form."""
    type_name = data.get("type", "unknown")
    optional = data.get("optional", True)
    description = data.get("description")

    if type_name == "reference":
        return ReferenceField(
            name=data["name"],
            ref_collection=data["ref_collection"],
            optional=optional,
            description=description,
        )
    if type_name == "object":
        nested = data.get("fields")
        return ObjectField(
            name=data["name"],
            fields=None if nested is None else tuple(field_from_dict(n) for n in nested),
            optional=optional,
            description=description,
        )
    try:
        scalar_type = ScalarType(type_name)
    except ValueError:
        scalar_type = ScalarType.UNKNOWN
    return ScalarField(
        name=data["name"], type=scalar_type, optional=optional, description=description
    )


@dataclass(frozen=True)
class DocumentCollection:
    """A collection: ordered fields with unique names."""

    name: str
    fields: Tuple[DocumentField, ...] = ()
    description: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            duplicates = sorted({n for n in names if names.count(n) > 1})
            raise SchemaValidationError(
                f"Collection '{self.name}' declares duplicate fields: {duplicates}",
                table=self.name,
            )

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[DocumentField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def embedded_fields(self) -> List[ObjectField]:
        """Object fields that carry a nested shape."""
        return [f for f in self.fields if isinstance(f, ObjectField) and f.is_embedded]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
        }
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DocumentCollection:
        return cls(
            name=data["name"],
            fields=tuple(field_from_dict(f) for f in data.get("fields", [])),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class DocumentSchema:
    """Ordered document collections."""

    collections: Tuple[DocumentCollection, ...] = ()
    _by_name: Dict[str, DocumentCollection] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "collections", tuple(self.collections))
        by_name: Dict[str, DocumentCollection] = {}
        for collection in self.collections:
            if collection.name in by_name:
                raise SchemaValidationError(
                    f"Collection '{collection.name}' is declared twice",
                    table=collection.name,
                )
            by_name[collection.name] = collection
        object.__setattr__(self, "_by_name", by_name)

    @property
    def collection_names(self) -> List[str]:
        return [c.name for c in self.collections]

    def get_collection(self, name: str) -> Optional[DocumentCollection]:
        return self._by_name.get(name)

    def replace_collection(self, collection: DocumentCollection) -> DocumentSchema:
        """Return a new schema with the same-named collection swapped in place."""
        if collection.name not in self._by_name:
            raise KeyError(f"Unknown collection: {collection.name}")
        return DocumentSchema(
            collections=tuple(
                collection if c.name == collection.name else c for c in self.collections
            )
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"collections": [c.to_dict() for c in self.collections]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DocumentSchema:
        return cls(
            collections=tuple(
                DocumentCollection.from_dict(c) for c in data.get("collections", [])
            )
        )

    def save(self, path: str | Path) -> None:
        """Save schema to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Saved document schema to {path}")

    @classmethod
    def load(cls, path: str | Path) -> DocumentSchema:
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def __repr__(self) -> str:
        return f"DocumentSchema(collections={len(self.collections)})"
