"""RoundRobinPolicy — deterministic rotation over eligible representatives."""

from __future__ import annotations

from app.domain.entities.sales_representative import SalesRepresentative
from app.domain.errors import NoEligibleRepresentatives


def rotation_order(candidates: list[SalesRepresentative]) -> list[SalesRepresentative]:
    """Sort candidates by id so the rotation ignores fetch order."""
    return sorted(candidates, key=lambda r: r.id)


def pick_next_representative(
    candidates: list[SalesRepresentative],
    last_representative_id: str | None,
) -> SalesRepresentative:
    """Pick the representative that follows the last-assigned one.

    1. Sort candidates by id for a stable rotation order.
    2. Find the last-assigned representative in that order.
    3. Return the next one, wrapping around at the end.

    If there is no previous assignment, or the last-assigned representative
    is no longer in the pool (deactivated, role changed), the first
    representative in order is returned.

    Raises:
        NoEligibleRepresentatives: if candidates is empty.
    """
    if not candidates:
        raise NoEligibleRepresentatives()

    ordered = rotation_order(candidates)
    ids = [r.id for r in ordered]

    if last_representative_id is None or last_representative_id not in ids:
        return ordered[0]

    index = (ids.index(last_representative_id) + 1) % len(ordered)
    return ordered[index]
