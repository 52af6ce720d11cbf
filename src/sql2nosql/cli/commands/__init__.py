"""CLI command modules."""

from . import advise, analyze, migrate_group

__all__ = ["advise", "analyze", "migrate_group"]
