"""Port interface for rotation cursor persistence."""

from abc import ABC, abstractmethod

from app.domain.entities.rotation_cursor import RotationCursor


class RotationCursorRepository(ABC):
    @abstractmethod
    async def get(self, rr_key: str) -> RotationCursor | None:
        ...

    @abstractmethod
    async def create(self, cursor: RotationCursor) -> RotationCursor:
        """Insert the cursor row. Raises ConcurrencyConflict if it already exists."""
        ...

    @abstractmethod
    async def compare_and_swap(self, expected: RotationCursor, new: RotationCursor) -> None:
        """Replace *expected* with *new* only if the stored version still matches.

        Raises ConcurrencyConflict when another writer advanced the cursor first.
        """
        ...
