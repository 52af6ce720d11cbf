"""Connector registry and factory."""

from __future__ import annotations

from typing import Dict, List, Type

from sql2nosql.connectors.base import BaseConnector
from sql2nosql.connectors.db_connector import DBConnector
from sql2nosql.connectors.ddl_loader import DDLLoader
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)

# Registry of available schema sources
CONNECTOR_REGISTRY: Dict[str, Type[BaseConnector]] = {
    "database": DBConnector,
    "db": DBConnector,  # Alias
    "ddl": DDLLoader,
}


class ConnectorFactory:
    """Factory for creating connector instances."""

    @staticmethod
    def create_connector(connector_type: str, **kwargs) -> BaseConnector:
        """Create connector instance.

        Args:
            connector_type: Connector type ('database', 'db', 'ddl')
            **kwargs: Connector-specific configuration

        Returns:
            BaseConnector instance

        Raises:
            ValueError: If connector type is not supported

        Example:
            >>> connector = ConnectorFactory.create_connector(
            ...     "ddl", ddl_file="./schema.sql"
            ... )
        """
        connector_class = CONNECTOR_REGISTRY.get(connector_type.lower().strip())
        if connector_class is None:
            available = ", ".join(ConnectorFactory.list_connectors())
            raise ValueError(
                f"Unknown connector type: {connector_type}. Available: {available}"
            )

        logger.info(f"Creating {connector_class.__name__} connector")
        return connector_class(**kwargs)

    @staticmethod
    def from_config(config) -> BaseConnector:
        """Pick the schema source from the ``source`` config section.

        A DDL file wins over a connection string.

        Raises:
            ValueError: If the section names neither
        """
        ddl_file = config.get("source.ddl_file")
        if ddl_file:
            return ConnectorFactory.create_connector("ddl", ddl_file=ddl_file)

        connection = config.get("source.connection")
        if connection:
            return ConnectorFactory.create_connector(
                "database",
                connection_string=connection,
                schema=config.get("source.schema"),
                tables=config.get("source.tables"),
            )

        raise ValueError(
            "No schema source configured. Pass --connection or --ddl, "
            "or set source.connection / source.ddl_file in config.yml"
        )

    @staticmethod
    def list_connectors() -> List[str]:
        return sorted(CONNECTOR_REGISTRY.keys())
