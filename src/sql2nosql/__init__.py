"""sql2nosql - Relational to document schema mapping and migration planning."""

__version__ = "0.1.0"

# Connectors
from sql2nosql.connectors import (
    BaseConnector,
    ConnectorFactory,
    DBConnector,
    DDLLoader,
    InMemoryDocumentSink,
    InMemoryRowSource,
    SQLAlchemyRowSource,
)

# Core modules
from sql2nosql.core import (
    AdvisoryRecommendation,
    AdvisoryReport,
    DocumentSchema,
    MigrationConfig,
    MigrationRunner,
    RelationalSchema,
    ScriptParameters,
    augment_schema,
    map_to_document_schema,
    parse_sql_schema,
    resolve_execution_order,
    synthesize_parameters,
)

# Utils
from sql2nosql.utils.config import Config, get_config, load_config


# Lazy import so the core API loads without touching the MongoDB driver
def __getattr__(name):
    """Lazy import for the MongoDB sink."""
    if name == "MongoDocumentSink":
        from sql2nosql.connectors.mongo_sink import MongoDocumentSink

        return MongoDocumentSink
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version
    "__version__",
    # Core
    "AdvisoryRecommendation",
    "AdvisoryReport",
    "DocumentSchema",
    "MigrationConfig",
    "MigrationRunner",
    "RelationalSchema",
    "ScriptParameters",
    "augment_schema",
    "map_to_document_schema",
    "parse_sql_schema",
    "resolve_execution_order",
    "synthesize_parameters",
    # Connectors
    "BaseConnector",
    "ConnectorFactory",
    "DBConnector",
    "DDLLoader",
    "InMemoryDocumentSink",
    "InMemoryRowSource",
    "MongoDocumentSink",
    "SQLAlchemyRowSource",
    # Config
    "Config",
    "get_config",
    "load_config",
]
