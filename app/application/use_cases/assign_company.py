"""AssignmentBalancer — fair, concurrency-safe sales representative rotation."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone

from app.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from app.domain.entities.assignment import CompanyAssignment
from app.domain.entities.rotation_cursor import RotationCursor
from app.domain.errors import (
    AlreadyAssigned,
    AssignmentError,
    CompanyNotFound,
    ConcurrencyConflict,
    NoEligibleRepresentatives,
    PersistenceError,
    RepresentativeNotEligible,
)
from app.domain.policies.round_robin import pick_next_representative
from app.domain.value_objects.enums import AssignmentMethod, AssignmentStatus

logger = logging.getLogger(__name__)

DEFAULT_ROTATION_KEY = "sales-rotation"


@dataclass
class AssignmentResult:
    """Typed outcome of one assignment attempt."""

    company_id: str
    status: AssignmentStatus
    sales_representative_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (AssignmentStatus.ASSIGNED, AssignmentStatus.ALREADY_ASSIGNED)


class AssignmentBalancer:
    """Picks and records the owner of a new company.

    The rotation cursor row is advanced with a compare-and-swap on its
    version inside the same transaction that inserts the assignment, so
    concurrent calls (across processes too) linearize on the cursor. A lost
    race rolls back and retries the whole read-pick-write attempt.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        rotation_key: str = DEFAULT_ROTATION_KEY,
        max_attempts: int = 5,
        retry_backoff_ms: int = 20,
        attempt_timeout_s: float | None = 10.0,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._uow_factory = uow_factory
        self._rotation_key = rotation_key
        self._max_attempts = max_attempts
        self._backoff_ms = retry_backoff_ms
        self._timeout = attempt_timeout_s

    async def assign(self, company_id: str) -> str:
        """Assign the next representative in rotation and return their id.

        Raises:
            CompanyNotFound: the company does not exist.
            AlreadyAssigned: the company already has an owner.
            NoEligibleRepresentatives: the pool is empty.
            PersistenceError: the store failed, timed out, or stayed
                contended for every attempt.
        """
        return await self._with_retries(company_id, lambda: self._assign_once(company_id))

    async def assign_manually(
        self,
        company_id: str,
        representative_id: str,
        assigned_by: str | None = None,
    ) -> str:
        """Record an operator's choice without moving the rotation.

        Raises the same errors as ``assign``, plus RepresentativeNotEligible.
        """
        return await self._with_retries(
            company_id,
            lambda: self._assign_manually_once(company_id, representative_id, assigned_by),
        )

    # ─── Attempts ────────────────────────────────────────────────────

    async def _assign_once(self, company_id: str) -> str:
        async with self._uow_factory() as uow:
            await self._check_assignable(uow, company_id)

            pool = await uow.representatives.get_eligible()
            if not pool:
                raise NoEligibleRepresentatives()

            cursor = await self._load_cursor(uow)
            chosen = pick_next_representative(pool, cursor.last_representative_id)

            await self._record(
                uow, cursor, company_id, chosen.id,
                advance_rotation=True,
                method=AssignmentMethod.ROTATION,
                assigned_by=None,
            )
            await uow.commit()

        logger.info(
            "Company %s → sales rep %s (rotation, previous: %s)",
            company_id, chosen.id, cursor.last_representative_id,
        )
        return chosen.id

    async def _assign_manually_once(
        self, company_id: str, representative_id: str, assigned_by: str | None,
    ) -> str:
        async with self._uow_factory() as uow:
            await self._check_assignable(uow, company_id)

            rep = await uow.representatives.get_by_id(representative_id)
            if rep is None or not rep.eligible:
                raise RepresentativeNotEligible(representative_id)

            cursor = await self._load_cursor(uow)
            await self._record(
                uow, cursor, company_id, rep.id,
                advance_rotation=False,
                method=AssignmentMethod.MANUAL,
                assigned_by=assigned_by,
            )
            await uow.commit()

        logger.info(
            "Company %s → sales rep %s (manual, by %s)",
            company_id, rep.id, assigned_by or "unknown",
        )
        return rep.id

    # ─── Helpers ─────────────────────────────────────────────────────

    async def _with_retries(self, company_id: str, attempt_fn) -> str:
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await self._run_attempt(attempt_fn())
            except ConcurrencyConflict:
                logger.warning(
                    "Rotation conflict for company %s (attempt %d/%d)",
                    company_id, attempt, self._max_attempts,
                )
                if attempt < self._max_attempts:
                    await asyncio.sleep(self._backoff_delay(attempt))

        raise PersistenceError(
            f"Rotation cursor still contended after {self._max_attempts} attempts "
            f"for company {company_id}"
        )

    async def _run_attempt(self, coro) -> str:
        if self._timeout is None:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise PersistenceError(f"Assignment attempt timed out after {self._timeout}s") from e

    def _backoff_delay(self, attempt: int) -> float:
        if self._backoff_ms <= 0:
            return 0
        base = self._backoff_ms * attempt
        return (base + random.uniform(0, self._backoff_ms)) / 1000

    async def _check_assignable(self, uow: UnitOfWork, company_id: str) -> None:
        company = await uow.companies.get_by_id(company_id)
        if company is None:
            raise CompanyNotFound(company_id)

        existing = await uow.assignments.get_by_company(company_id)
        if existing is not None:
            raise AlreadyAssigned(company_id, existing.sales_representative_id)

    async def _load_cursor(self, uow: UnitOfWork) -> RotationCursor:
        """Read the cursor, creating it from the assignment log on first use."""
        cursor = await uow.cursors.get(self._rotation_key)
        if cursor is not None:
            return cursor

        last = await uow.assignments.get_last_assigned()
        cursor = RotationCursor(
            rr_key=self._rotation_key,
            last_representative_id=last.sales_representative_id if last else None,
            sequence=last.sequence if last else 0,
            version=0,
        )
        logger.info(
            "Initialising rotation cursor '%s' (last=%s, sequence=%d)",
            cursor.rr_key, cursor.last_representative_id, cursor.sequence,
        )
        return await uow.cursors.create(cursor)

    async def _record(
        self,
        uow: UnitOfWork,
        cursor: RotationCursor,
        company_id: str,
        representative_id: str,
        *,
        advance_rotation: bool,
        method: AssignmentMethod,
        assigned_by: str | None,
    ) -> None:
        new_cursor = cursor.advance(representative_id if advance_rotation else None)
        await uow.cursors.compare_and_swap(cursor, new_cursor)
        await uow.assignments.add(
            CompanyAssignment(
                id=None,
                company_id=company_id,
                sales_representative_id=representative_id,
                sequence=new_cursor.sequence,
                assigned_at=datetime.now(timezone.utc),
                method=method,
                assigned_by=assigned_by,
            )
        )


def result_from_error(company_id: str, error: AssignmentError) -> AssignmentResult:
    """Map an assignment error onto a typed result."""
    if isinstance(error, AlreadyAssigned):
        return AssignmentResult(
            company_id=company_id,
            status=AssignmentStatus.ALREADY_ASSIGNED,
            sales_representative_id=error.representative_id,
        )
    if isinstance(error, NoEligibleRepresentatives):
        status = AssignmentStatus.NO_ELIGIBLE_REPRESENTATIVES
    elif isinstance(error, CompanyNotFound):
        status = AssignmentStatus.COMPANY_NOT_FOUND
    elif isinstance(error, RepresentativeNotEligible):
        status = AssignmentStatus.REPRESENTATIVE_NOT_ELIGIBLE
    else:
        status = AssignmentStatus.PERSISTENCE_ERROR
    return AssignmentResult(company_id=company_id, status=status, error=str(error))


class AssignCompanyUseCase:
    """Assign a company through the rotation and report a typed result."""

    def __init__(self, balancer: AssignmentBalancer):
        self._balancer = balancer

    async def execute(self, company_id: str) -> AssignmentResult:
        try:
            rep_id = await self._balancer.assign(company_id)
        except AlreadyAssigned as e:
            logger.info("Company %s already assigned to %s, nothing to do", company_id, e.representative_id)
            return result_from_error(company_id, e)
        except NoEligibleRepresentatives as e:
            # Needs an operator: the company stays in the unassigned queue
            logger.error("Company %s left unassigned: %s", company_id, e)
            return result_from_error(company_id, e)
        except AssignmentError as e:
            logger.warning("Company %s not assigned: %s", company_id, e)
            return result_from_error(company_id, e)

        return AssignmentResult(
            company_id=company_id,
            status=AssignmentStatus.ASSIGNED,
            sales_representative_id=rep_id,
        )


class ManualAssignUseCase:
    """Operator assignment for companies the rotation could not place."""

    def __init__(self, balancer: AssignmentBalancer):
        self._balancer = balancer

    async def execute(
        self, company_id: str, representative_id: str, assigned_by: str | None = None,
    ) -> AssignmentResult:
        try:
            rep_id = await self._balancer.assign_manually(company_id, representative_id, assigned_by)
        except AssignmentError as e:
            logger.warning("Manual assignment of company %s failed: %s", company_id, e)
            return result_from_error(company_id, e)

        return AssignmentResult(
            company_id=company_id,
            status=AssignmentStatus.ASSIGNED,
            sales_representative_id=rep_id,
        )


class AssignUnassignedCompaniesUseCase:
    """Retry the rotation for every company that has no owner yet."""

    def __init__(self, assign_company: AssignCompanyUseCase, uow_factory: UnitOfWorkFactory):
        self._assign = assign_company
        self._uow_factory = uow_factory

    async def execute(self) -> list[AssignmentResult]:
        async with self._uow_factory() as uow:
            companies = await uow.companies.get_unassigned()
        logger.info("Retrying assignment for %d unassigned companies", len(companies))

        results = []
        for company in companies:
            results.append(await self._assign.execute(company.id))

        assigned = sum(1 for r in results if r.status == AssignmentStatus.ASSIGNED)
        logger.info("Unassigned sweep complete: %d/%d assigned", assigned, len(results))
        return results
