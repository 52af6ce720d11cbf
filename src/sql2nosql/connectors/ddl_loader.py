"""Schema source reading ``CREATE TABLE`` statements from a DDL file."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from sql2nosql.connectors.base import BaseConnector
from sql2nosql.core.schema.ddl_parser import parse_sql_schema
from sql2nosql.core.schema.types import RelationalSchema


class DDLLoader(BaseConnector):
    """Load a relational schema from a ``.sql`` file (or a DDL string)."""

    def __init__(self, ddl_file: Optional[str | Path] = None, ddl: Optional[str] = None):
        """Initialize DDL loader.

        Args:
            ddl_file: Path to a file with ``CREATE TABLE`` statements
            ddl: DDL text, used instead of ``ddl_file``

        Raises:
            ValueError: If neither is given
            FileNotFoundError: If ``ddl_file`` does not exist
        """
        super().__init__(ddl_file=str(ddl_file) if ddl_file else None)
        if ddl is None and ddl_file is None:
            raise ValueError("DDLLoader needs a ddl_file or ddl text")

        if ddl is None:
            path = Path(ddl_file)
            if not path.exists():
                raise FileNotFoundError(f"DDL file not found: {path}")
            self.logger.info(f"Reading DDL from {path}")
            ddl = path.read_text(encoding="utf-8")

        self.ddl = ddl
        self._schema: Optional[RelationalSchema] = None

    def load_schema(self) -> RelationalSchema:
        if self._schema is None:
            self._schema = parse_sql_schema(self.ddl)
        return self._schema

    def get_table_names(self) -> List[str]:
        return self.load_schema().table_names
