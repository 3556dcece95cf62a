"""SQLAlchemy unit of work — one AsyncSession per transaction."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.adapters.persistence.database import async_session_factory
from app.adapters.persistence.repositories import (
    SqlAssignmentRepository,
    SqlCompanyRepository,
    SqlRepresentativeRepository,
    SqlRotationCursorRepository,
)
from app.application.ports.unit_of_work import UnitOfWork
from app.domain.errors import ConcurrencyConflict, PersistenceError

logger = logging.getLogger(__name__)

# Failures of the store itself, as opposed to bugs in our code
_STORE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> SqlUnitOfWork:
        self._session = self._session_factory()
        self.companies = SqlCompanyRepository(self._session)
        self.representatives = SqlRepresentativeRepository(self._session)
        self.assignments = SqlAssignmentRepository(self._session)
        self.cursors = SqlRotationCursorRepository(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.rollback()
        finally:
            await self._session.close()
            self._session = None

        if isinstance(exc, _STORE_ERRORS):
            logger.error("Store error inside unit of work: %s", exc, exc_info=exc)
            raise PersistenceError(f"Store failure ({type(exc).__name__})") from exc

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except IntegrityError as e:
            raise ConcurrencyConflict("Commit rejected by a uniqueness constraint") from e

    async def rollback(self) -> None:
        if self._session is not None:
            await self._session.rollback()


def sql_uow_factory() -> SqlUnitOfWork:
    """Default UnitOfWorkFactory bound to the application's session factory."""
    return SqlUnitOfWork(async_session_factory)
