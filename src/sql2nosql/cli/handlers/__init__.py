"""CLI command handlers containing business logic."""

from sql2nosql.cli.handlers.migration_handler import MigrationHandler
from sql2nosql.cli.handlers.schema_handler import SchemaHandler

__all__ = [
    "MigrationHandler",
    "SchemaHandler",
]
