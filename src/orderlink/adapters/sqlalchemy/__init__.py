"""SQLAlchemy adapter package for orderlink."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyConsumedTokenRepository,
    SqlAlchemyHierarchyRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyRepairNoteRepository,
    SqlAlchemySubscriptionRepository,
    build_write_payload,
)
from .unit_of_work import SqlAlchemyUnitOfWork, is_started, shutdown, startup

__all__ = [
    "SqlAlchemyConsumedTokenRepository",
    "SqlAlchemyHierarchyRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyRepairNoteRepository",
    "SqlAlchemySubscriptionRepository",
    "SqlAlchemyUnitOfWork",
    "build_write_payload",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
