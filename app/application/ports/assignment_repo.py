"""Port interface for company assignment persistence."""

from abc import ABC, abstractmethod

from app.domain.entities.assignment import CompanyAssignment


class AssignmentRepository(ABC):
    @abstractmethod
    async def add(self, assignment: CompanyAssignment) -> CompanyAssignment:
        """Insert a new assignment.

        Raises ConcurrencyConflict if the company or sequence is already taken.
        """
        ...

    @abstractmethod
    async def get_by_company(self, company_id: str) -> CompanyAssignment | None:
        ...

    @abstractmethod
    async def get_last_assigned(self) -> CompanyAssignment | None:
        """Return the latest rotation assignment, if any.

        Its ``sequence`` is raised to the highest sequence used by any
        assignment, manual ones included.
        """
        ...

    @abstractmethod
    async def get_by_representative(self, representative_id: str) -> list[CompanyAssignment]:
        ...

    @abstractmethod
    async def get_all(self) -> list[CompanyAssignment]:
        ...

    @abstractmethod
    async def count_by_representative(self) -> dict[str, int]:
        ...
