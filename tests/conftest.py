"""Pytest configuration and shared in-memory fakes."""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.application.ports.assignment_repo import AssignmentRepository
from app.application.ports.company_repo import CompanyRepository
from app.application.ports.representative_repo import RepresentativeRepository
from app.application.ports.rotation_cursor_repo import RotationCursorRepository
from app.application.ports.unit_of_work import UnitOfWork
from app.domain.entities.assignment import CompanyAssignment
from app.domain.entities.company import Company
from app.domain.entities.rotation_cursor import RotationCursor
from app.domain.entities.sales_representative import SalesRepresentative
from app.domain.errors import ConcurrencyConflict, DuplicateRepresentative
from app.domain.value_objects.enums import AssignmentMethod, RepresentativeRole

# ─── In-memory store ────────────────────────────────────────────────


class InMemoryStore:
    """Committed state shared by every FakeUnitOfWork, like a database."""

    def __init__(self):
        self.representatives: dict[str, SalesRepresentative] = {}
        self.companies: dict[str, Company] = {}
        self.assignments: list[CompanyAssignment] = []
        self.cursors: dict[str, RotationCursor] = {}
        self.commits = 0
        self.commit_attempts = 0
        # failure injection
        self.forced_conflicts = 0
        self.read_delay = 0.0
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def add_representative(
        self,
        rep_id: str,
        role: RepresentativeRole = RepresentativeRole.SALES,
        is_active: bool = True,
        email_notifications: bool = True,
    ) -> SalesRepresentative:
        rep = SalesRepresentative(
            id=rep_id, email=f"{rep_id.lower()}@example.com", role=role,
            first_name=rep_id, is_active=is_active,
            email_notifications=email_notifications,
        )
        self.representatives[rep_id] = rep
        return rep

    def add_company(self, company_id: str, name: str | None = None) -> Company:
        company = Company(id=company_id, name=name or f"Company {company_id}", created_at=self._tick())
        self.companies[company_id] = company
        return company

    def assigned_to(self, company_id: str) -> str | None:
        return next(
            (a.sales_representative_id for a in self.assignments if a.company_id == company_id),
            None,
        )

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock


async def _yield(store: InMemoryStore) -> None:
    # Let other tasks interleave between reads and the commit
    await asyncio.sleep(store.read_delay)


# ─── Fake repositories ──────────────────────────────────────────────


class FakeRepresentativeRepo(RepresentativeRepository):
    def __init__(self, uow: FakeUnitOfWork):
        self._uow = uow
        self._store = uow.store

    async def save(self, representative):
        if representative.id is None:
            representative.id = str(uuid.uuid4())
        taken = {r.email for r in self._store.representatives.values()}
        taken.update(r.email for r in self._uow.staged_representatives)
        if representative.email in taken:
            raise DuplicateRepresentative(representative.email)
        self._uow.staged_representatives.append(representative)
        return representative

    async def get_by_id(self, representative_id):
        await _yield(self._store)
        return self._store.representatives.get(representative_id)

    async def get_all(self):
        await _yield(self._store)
        return sorted(self._store.representatives.values(), key=lambda r: r.id)

    async def get_eligible(self):
        await _yield(self._store)
        return [r for r in await self.get_all() if r.eligible]

    async def set_active(self, representative_id, active):
        rep = self._store.representatives.get(representative_id)
        if rep is None:
            return None
        updated = SalesRepresentative(**{**rep.__dict__, "is_active": active})
        self._uow.staged_representatives.append(updated)
        return updated


class FakeCompanyRepo(CompanyRepository):
    def __init__(self, uow: FakeUnitOfWork):
        self._uow = uow
        self._store = uow.store

    async def save(self, company):
        if company.id is None:
            company.id = str(uuid.uuid4())
        company.created_at = self._store._tick()
        self._uow.staged_companies.append(company)
        return company

    async def get_by_id(self, company_id):
        await _yield(self._store)
        return self._store.companies.get(company_id)

    async def get_all(self):
        await _yield(self._store)
        return list(self._store.companies.values())

    async def get_unassigned(self):
        await _yield(self._store)
        assigned = {a.company_id for a in self._store.assignments}
        return [c for c in self._store.companies.values() if c.id not in assigned]


class FakeAssignmentRepo(AssignmentRepository):
    def __init__(self, uow: FakeUnitOfWork):
        self._uow = uow
        self._store = uow.store

    async def add(self, assignment):
        self._uow.staged_assignments.append(assignment)
        return assignment

    async def get_by_company(self, company_id):
        await _yield(self._store)
        return next((a for a in self._store.assignments if a.company_id == company_id), None)

    async def get_last_assigned(self):
        await _yield(self._store)
        rotation = [a for a in self._store.assignments if a.method == AssignmentMethod.ROTATION]
        if not rotation:
            return None
        last = max(rotation, key=lambda a: a.sequence)
        top = max(a.sequence for a in self._store.assignments)
        return CompanyAssignment(**{**last.__dict__, "sequence": top})

    async def get_by_representative(self, representative_id):
        await _yield(self._store)
        return sorted(
            (a for a in self._store.assignments if a.sales_representative_id == representative_id),
            key=lambda a: a.sequence,
        )

    async def get_all(self):
        await _yield(self._store)
        return sorted(self._store.assignments, key=lambda a: a.sequence)

    async def count_by_representative(self):
        counts: dict[str, int] = {}
        for a in await self.get_all():
            counts[a.sales_representative_id] = counts.get(a.sales_representative_id, 0) + 1
        return counts


class FakeCursorRepo(RotationCursorRepository):
    def __init__(self, uow: FakeUnitOfWork):
        self._uow = uow
        self._store = uow.store

    async def get(self, rr_key):
        await _yield(self._store)
        return self._store.cursors.get(rr_key)

    async def create(self, cursor):
        self._uow.created_cursors[cursor.rr_key] = cursor
        return cursor

    async def compare_and_swap(self, expected, new):
        self._uow.swaps.append((expected, new))


class FakeUnitOfWork(UnitOfWork):
    """Stages writes; commit validates versions and uniqueness atomically."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.companies = FakeCompanyRepo(self)
        self.representatives = FakeRepresentativeRepo(self)
        self.assignments = FakeAssignmentRepo(self)
        self.cursors = FakeCursorRepo(self)
        self._clear()

    def _clear(self):
        self.staged_companies: list[Company] = []
        self.staged_representatives: list[SalesRepresentative] = []
        self.staged_assignments: list[CompanyAssignment] = []
        self.created_cursors: dict[str, RotationCursor] = {}
        self.swaps: list[tuple[RotationCursor, RotationCursor]] = []

    async def commit(self):
        store = self.store
        store.commit_attempts += 1
        if store.forced_conflicts > 0:
            store.forced_conflicts -= 1
            raise ConcurrencyConflict("forced conflict")

        # validate everything first (no awaits: commit is atomic)
        for key in self.created_cursors:
            if key in store.cursors:
                raise ConcurrencyConflict(f"cursor {key} already exists")
        for expected, _ in self.swaps:
            current = self.created_cursors.get(expected.rr_key) or store.cursors.get(expected.rr_key)
            if current is None or current.version != expected.version:
                raise ConcurrencyConflict(f"cursor {expected.rr_key} moved")
        taken_companies = {a.company_id for a in store.assignments}
        taken_sequences = {a.sequence for a in store.assignments}
        for a in self.staged_assignments:
            if a.company_id in taken_companies or a.sequence in taken_sequences:
                raise ConcurrencyConflict(f"duplicate assignment for {a.company_id}")

        # apply
        store.cursors.update(self.created_cursors)
        for _, new in self.swaps:
            store.cursors[new.rr_key] = new
        for a in self.staged_assignments:
            a.id = len(store.assignments) + 1
            store.assignments.append(a)
        for c in self.staged_companies:
            store.companies[c.id] = c
        for r in self.staged_representatives:
            store.representatives[r.id] = r
        store.commits += 1
        self._clear()

    async def rollback(self):
        self._clear()


# ─── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store):
    return lambda: FakeUnitOfWork(store)


@pytest.fixture
def abc_store(store) -> InMemoryStore:
    """Pool of three sales reps A, B, C (added out of order on purpose)."""
    for rep_id in ("C", "A", "B"):
        store.add_representative(rep_id)
    return store
