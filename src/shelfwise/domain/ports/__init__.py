"""Ports (Protocols) the domain depends on."""

from __future__ import annotations

from shelfwise.domain.ports.lookup import LookupProvider
from shelfwise.domain.ports.persistence import (
    CompletedBookRepository,
    LibraryBookRepository,
    RatingRepository,
    Repository,
)
from shelfwise.domain.ports.unit_of_work import BookRepositories, BookUnitOfWork, UnitOfWork

__all__ = [
    "BookRepositories",
    "BookUnitOfWork",
    "CompletedBookRepository",
    "LibraryBookRepository",
    "LookupProvider",
    "RatingRepository",
    "Repository",
    "UnitOfWork",
]
