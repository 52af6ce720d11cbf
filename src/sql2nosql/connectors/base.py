"""Base connector interface for relational schema sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from sql2nosql.core.schema.types import RelationalSchema
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


class BaseConnector(ABC):
    """Abstract base class for anything that can describe a relational schema."""

    def __init__(self, **kwargs):
        """Initialize connector.

        Args:
            **kwargs: Connector-specific configuration
        """
        self.config = kwargs
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def load_schema(self) -> RelationalSchema:
        """Describe the source as a RelationalSchema."""
        pass

    @abstractmethod
    def get_table_names(self) -> List[str]:
        """Names of the tables the connector can see."""
        pass

    def close(self) -> None:
        """Release resources held by the connector."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.config})"
