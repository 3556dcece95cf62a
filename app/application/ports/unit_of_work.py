"""Port interface for a transactional unit of work."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from app.application.ports.assignment_repo import AssignmentRepository
from app.application.ports.company_repo import CompanyRepository
from app.application.ports.representative_repo import RepresentativeRepository
from app.application.ports.rotation_cursor_repo import RotationCursorRepository


class UnitOfWork(ABC):
    """One transaction spanning all repositories.

    Leaving the ``async with`` block without ``commit()`` rolls back, so a
    failed or cancelled attempt leaves nothing behind.
    """

    companies: CompanyRepository
    representatives: RepresentativeRepository
    assignments: AssignmentRepository
    cursors: RotationCursorRepository

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...


UnitOfWorkFactory = Callable[[], UnitOfWork]
