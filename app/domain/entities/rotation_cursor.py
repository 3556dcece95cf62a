"""RotationCursor entity — durable pointer to the last rotation pick."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RotationCursor:
    rr_key: str
    last_representative_id: str | None
    sequence: int = 0
    version: int = 0

    def advance(self, representative_id: str | None) -> "RotationCursor":
        """Return the cursor state after recording one more assignment.

        Passing ``None`` keeps the last-assigned representative unchanged and
        only consumes a sequence number (manual assignments).
        """
        last = representative_id if representative_id is not None else self.last_representative_id
        return RotationCursor(
            rr_key=self.rr_key,
            last_representative_id=last,
            sequence=self.sequence + 1,
            version=self.version + 1,
        )
