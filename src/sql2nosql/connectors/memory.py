"""In-memory row source and document sink.

Used for tests and for rehearsing a migration plan without databases. Both
record every call so callers can assert on what the runner did.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sql2nosql.core.migration.params import IndexSpec
from sql2nosql.core.migration.runtime import Document, DocumentSink, Row, RowSource


class InMemoryRowSource(RowSource):
    """Serve rows from ``{table: [row, ...]}``."""

    def __init__(self, tables: Dict[str, List[Row]]):
        self.tables = tables
        self.fetch_calls: List[Dict[str, Any]] = []

    def fetch_page(
        self,
        table: str,
        order_by: Sequence[str],
        after: Optional[Tuple[Any, ...]] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        self.fetch_calls.append(
            {"table": table, "order_by": tuple(order_by), "after": after, "limit": limit}
        )
        if table not in self.tables:
            raise KeyError(f"Unknown table: {table}")

        def key(row: Row) -> Tuple[Any, ...]:
            return tuple(row[c] for c in order_by)

        rows = sorted(self.tables[table], key=key)
        if after is not None:
            rows = [r for r in rows if key(r) > tuple(after)]
        if limit is not None:
            rows = rows[:limit]
        return [dict(r) for r in rows]


class InMemoryDocumentSink(DocumentSink):
    """Keep documents in ``{collection: [document, ...]}``."""

    def __init__(self, collections: Optional[Dict[str, List[Document]]] = None):
        self.collections: Dict[str, List[Document]] = collections or {}
        self.indexes: Dict[str, List[IndexSpec]] = {}
        self.write_calls: List[Tuple[str, str, Any]] = []

    def create_index(self, collection: str, index: IndexSpec) -> None:
        self.write_calls.append(("create_index", collection, index))
        existing = self.indexes.setdefault(collection, [])
        if index not in existing:
            existing.append(index)

    def upsert(self, collection: str, filter: Dict[str, Any], document: Document) -> None:
        self.write_calls.append(("upsert", collection, dict(filter)))
        documents = self.collections.setdefault(collection, [])
        for stored in documents:
            if all(stored.get(k) == v for k, v in filter.items()):
                stored.update(copy.deepcopy(document))
                return
        documents.append({**copy.deepcopy(filter), **copy.deepcopy(document)})

    def find_all(self, collection: str) -> List[Document]:
        return copy.deepcopy(self.collections.get(collection, []))
