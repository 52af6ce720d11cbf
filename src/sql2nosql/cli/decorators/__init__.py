"""CLI decorators for common options and error handling."""

from sql2nosql.cli.decorators.error_handling import handle_errors
from sql2nosql.cli.decorators.options import (
    with_agent_config,
    with_migration_options,
    with_output_dir,
    with_source_options,
)

__all__ = [
    "handle_errors",
    "with_agent_config",
    "with_migration_options",
    "with_output_dir",
    "with_source_options",
]
