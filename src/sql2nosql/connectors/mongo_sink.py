"""MongoDB document sink (pymongo)."""

from __future__ import annotations

import datetime
import decimal
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson.decimal128 import Decimal128
from pymongo import ASCENDING, MongoClient

from sql2nosql.core.migration.params import IndexSpec
from sql2nosql.core.migration.runtime import Document, DocumentSink
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


def to_bson_value(value: Any) -> Any:
    """Convert driver values BSON cannot store as-is.

    Decimal becomes Decimal128, a bare date becomes a midnight datetime,
    UUID and bytes-like memoryview become str/bytes. Containers are
    converted recursively.
    """
    if isinstance(value, decimal.Decimal):
        return Decimal128(value)
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, memoryview):
        return value.tobytes()
    if isinstance(value, dict):
        return {k: to_bson_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_bson_value(v) for v in value]
    return value


class MongoDocumentSink(DocumentSink):
    """Write migrated documents to MongoDB with idempotent upserts."""

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        database: str = "sql2nosql",
        client: Optional[MongoClient] = None,
    ):
        """Initialize the sink.

        Args:
            uri: MongoDB connection URI
            database: Destination database name
            client: Existing client (``uri`` is ignored when given)
        """
        self.client = client or MongoClient(uri)
        self.db = self.client[database]
        logger.info(f"Writing to MongoDB database '{database}'")

    def create_index(self, collection: str, index: IndexSpec) -> None:
        keys = [(column, ASCENDING) for column in index.columns]
        self.db[collection].create_index(keys, unique=index.unique, name=index.name)
        logger.debug(f"Ensured index {index.name} on {collection}")

    def upsert(self, collection: str, filter: Dict[str, Any], document: Document) -> None:
        self.db[collection].update_one(
            to_bson_value(filter), {"$set": to_bson_value(document)}, upsert=True
        )

    def find_all(self, collection: str) -> List[Document]:
        return list(self.db[collection].find({}, {"_id": 0}))

    def join_key(self, values: Iterable[Any]) -> Tuple[Any, ...]:
        """Key in stored form; Decimal128 is unhashable, so it goes back to Decimal."""
        key = []
        for value in to_bson_value(list(values)):
            if isinstance(value, Decimal128):
                value = value.to_decimal()
            key.append(value)
        return tuple(key)

    def close(self) -> None:
        self.client.close()
