"""SQLAlchemy adapter package for shelfwise."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCompletedBookRepository,
    SqlAlchemyLibraryBookRepository,
    SqlAlchemyRatingRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyCompletedBookRepository",
    "SqlAlchemyLibraryBookRepository",
    "SqlAlchemyRatingRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
