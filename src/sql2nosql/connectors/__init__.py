"""Schema sources, row sources and document sinks."""

from sql2nosql.connectors.base import BaseConnector
from sql2nosql.connectors.db_connector import DBConnector, SQLAlchemyRowSource
from sql2nosql.connectors.ddl_loader import DDLLoader
from sql2nosql.connectors.memory import InMemoryDocumentSink, InMemoryRowSource
from sql2nosql.connectors.registry import CONNECTOR_REGISTRY, ConnectorFactory

__all__ = [
    "BaseConnector",
    "CONNECTOR_REGISTRY",
    "ConnectorFactory",
    "DBConnector",
    "DDLLoader",
    "InMemoryDocumentSink",
    "InMemoryRowSource",
    "SQLAlchemyRowSource",
]
