"""SQLAlchemy-backed unit of work over the book repositories."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from shelfwise.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from shelfwise.adapters.sqlalchemy.repositories import (
    SqlAlchemyCompletedBookRepository,
    SqlAlchemyLibraryBookRepository,
    completed_rating_repository,
    library_rating_repository,
)
from shelfwise.config.storage import DatabaseConfig, get_database_config
from shelfwise.domain.ports.unit_of_work import BookRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call shelfwise.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, create missing tables and prepare the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        config = DatabaseConfig(uri=database_uri) if database_uri else get_database_config()
        engine = create_engine(config.uri, echo=config.echo)
    start_mappers()
    create_all_tables(engine)
    log.info("Database ready at %s", engine.url.render_as_string(hide_password=True))

    _STATE.engine = engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyUnitOfWork:
    """One session over both book tables and their rating stores.

    Leaving the block with an exception rolls back; nothing is committed
    unless :meth:`commit` is called.
    """

    def __init__(self) -> None:
        self._session_factory = _STATE.session_factory
        self._session: Session | None = None
        self._repositories: BookRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = self._session_factory()
        self._repositories = BookRepositories(
            library_books=SqlAlchemyLibraryBookRepository(self._session),
            completed_books=SqlAlchemyCompletedBookRepository(self._session),
            library_ratings=library_rating_repository(self._session),
            completed_ratings=completed_rating_repository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self._active_session()
        if exc_type is not None:
            session.rollback()
        session.close()
        self._session = None
        self._repositories = None
        return False

    def commit(self) -> None:
        self._active_session().commit()

    def rollback(self) -> None:
        self._active_session().rollback()

    @property
    def repositories(self) -> BookRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    def _active_session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session


if TYPE_CHECKING:
    from shelfwise.domain.ports.unit_of_work import BookUnitOfWork

    _uow_check: BookUnitOfWork = SqlAlchemyUnitOfWork()
