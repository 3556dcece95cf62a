"""Port interface for the sales representative directory."""

from abc import ABC, abstractmethod

from app.domain.entities.sales_representative import SalesRepresentative


class RepresentativeRepository(ABC):
    @abstractmethod
    async def save(self, representative: SalesRepresentative) -> SalesRepresentative:
        """Insert a representative.

        Raises DuplicateRepresentative if the email is already taken.
        """
        ...

    @abstractmethod
    async def get_by_id(self, representative_id: str) -> SalesRepresentative | None:
        ...

    @abstractmethod
    async def get_all(self) -> list[SalesRepresentative]:
        ...

    @abstractmethod
    async def get_eligible(self) -> list[SalesRepresentative]:
        """Active representatives with a sales role."""
        ...

    @abstractmethod
    async def set_active(self, representative_id: str, active: bool) -> SalesRepresentative | None:
        ...
