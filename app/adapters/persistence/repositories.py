"""SQLAlchemy repository implementations."""

from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.persistence.models import (
    CompanyAssignmentModel,
    CompanyModel,
    RotationCursorModel,
    SalesRepresentativeModel,
)
from app.application.ports.assignment_repo import AssignmentRepository
from app.application.ports.company_repo import CompanyRepository
from app.application.ports.representative_repo import RepresentativeRepository
from app.application.ports.rotation_cursor_repo import RotationCursorRepository
from app.domain.entities.assignment import CompanyAssignment
from app.domain.entities.company import Company
from app.domain.entities.rotation_cursor import RotationCursor
from app.domain.entities.sales_representative import SalesRepresentative
from app.domain.errors import ConcurrencyConflict, DuplicateRepresentative
from app.domain.value_objects.enums import (
    SALES_ROLES,
    AssignmentMethod,
    RepresentativeRole,
)

# ─── Mappers ─────────────────────────────────────────────────────────


def _representative_to_domain(m: SalesRepresentativeModel) -> SalesRepresentative:
    return SalesRepresentative(
        id=m.id,
        email=m.email,
        role=RepresentativeRole(m.role),
        first_name=m.first_name,
        last_name=m.last_name,
        is_active=m.is_active,
        email_notifications=m.email_notifications,
    )


def _company_to_domain(m: CompanyModel) -> Company:
    return Company(id=m.id, name=m.name, industry=m.industry, created_at=m.created_at)


def _assignment_to_domain(m: CompanyAssignmentModel) -> CompanyAssignment:
    return CompanyAssignment(
        id=m.id,
        company_id=m.company_id,
        sales_representative_id=m.sales_representative_id,
        sequence=m.sequence,
        assigned_at=m.assigned_at,
        method=AssignmentMethod(m.method),
        assigned_by=m.assigned_by,
    )


def _cursor_to_domain(m: RotationCursorModel) -> RotationCursor:
    return RotationCursor(
        rr_key=m.rr_key,
        last_representative_id=m.last_representative_id,
        sequence=m.sequence,
        version=m.version,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlRepresentativeRepository(RepresentativeRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, representative: SalesRepresentative) -> SalesRepresentative:
        m = SalesRepresentativeModel(
            email=representative.email,
            first_name=representative.first_name,
            last_name=representative.last_name,
            role=representative.role.value,
            is_active=representative.is_active,
            email_notifications=representative.email_notifications,
        )
        if representative.id is not None:
            m.id = representative.id
        self._s.add(m)
        try:
            await self._s.flush()
        except IntegrityError as e:
            raise DuplicateRepresentative(representative.email) from e
        representative.id = m.id
        return representative

    async def get_by_id(self, representative_id: str) -> SalesRepresentative | None:
        m = await self._s.get(SalesRepresentativeModel, representative_id)
        return _representative_to_domain(m) if m else None

    async def get_all(self) -> list[SalesRepresentative]:
        result = await self._s.execute(
            select(SalesRepresentativeModel).order_by(SalesRepresentativeModel.id)
        )
        return [_representative_to_domain(m) for m in result.scalars()]

    async def get_eligible(self) -> list[SalesRepresentative]:
        result = await self._s.execute(
            select(SalesRepresentativeModel)
            .where(
                SalesRepresentativeModel.is_active.is_(True),
                SalesRepresentativeModel.role.in_([r.value for r in SALES_ROLES]),
            )
            .order_by(SalesRepresentativeModel.id)
        )
        return [_representative_to_domain(m) for m in result.scalars()]

    async def set_active(self, representative_id: str, active: bool) -> SalesRepresentative | None:
        m = await self._s.get(SalesRepresentativeModel, representative_id)
        if m is None:
            return None
        m.is_active = active
        await self._s.flush()
        return _representative_to_domain(m)


class SqlCompanyRepository(CompanyRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, company: Company) -> Company:
        m = CompanyModel(name=company.name, industry=company.industry)
        if company.id is not None:
            m.id = company.id
        self._s.add(m)
        await self._s.flush()
        await self._s.refresh(m)
        company.id = m.id
        company.created_at = m.created_at
        return company

    async def get_by_id(self, company_id: str) -> Company | None:
        m = await self._s.get(CompanyModel, company_id)
        return _company_to_domain(m) if m else None

    async def get_all(self) -> list[Company]:
        result = await self._s.execute(
            select(CompanyModel).order_by(CompanyModel.created_at, CompanyModel.id)
        )
        return [_company_to_domain(m) for m in result.scalars()]

    async def get_unassigned(self) -> list[Company]:
        result = await self._s.execute(
            select(CompanyModel)
            .outerjoin(CompanyAssignmentModel)
            .where(CompanyAssignmentModel.id.is_(None))
            .order_by(CompanyModel.created_at, CompanyModel.id)
        )
        return [_company_to_domain(m) for m in result.scalars()]


class SqlAssignmentRepository(AssignmentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def add(self, assignment: CompanyAssignment) -> CompanyAssignment:
        m = CompanyAssignmentModel(
            company_id=assignment.company_id,
            sales_representative_id=assignment.sales_representative_id,
            sequence=assignment.sequence,
            method=assignment.method.value,
            assigned_by=assignment.assigned_by,
        )
        if assignment.assigned_at is not None:
            m.assigned_at = assignment.assigned_at
        self._s.add(m)
        try:
            await self._s.flush()
        except IntegrityError as e:
            # unique company_id or sequence: someone else got there first
            raise ConcurrencyConflict(
                f"Assignment insert for company {assignment.company_id} collided"
            ) from e
        assignment.id = m.id
        return assignment

    async def get_by_company(self, company_id: str) -> CompanyAssignment | None:
        result = await self._s.execute(
            select(CompanyAssignmentModel).where(CompanyAssignmentModel.company_id == company_id)
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def get_last_assigned(self) -> CompanyAssignment | None:
        result = await self._s.execute(
            select(CompanyAssignmentModel)
            .where(CompanyAssignmentModel.method == AssignmentMethod.ROTATION.value)
            .order_by(CompanyAssignmentModel.sequence.desc())
            .limit(1)
        )
        m = result.scalar_one_or_none()
        if m is None:
            return None
        last = _assignment_to_domain(m)
        # sequence must cover manual rows too
        max_seq = (
            await self._s.execute(select(func.max(CompanyAssignmentModel.sequence)))
        ).scalar() or 0
        last.sequence = max(last.sequence, max_seq)
        return last

    async def get_by_representative(self, representative_id: str) -> list[CompanyAssignment]:
        result = await self._s.execute(
            select(CompanyAssignmentModel)
            .where(CompanyAssignmentModel.sales_representative_id == representative_id)
            .order_by(CompanyAssignmentModel.sequence)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def get_all(self) -> list[CompanyAssignment]:
        result = await self._s.execute(
            select(CompanyAssignmentModel).order_by(CompanyAssignmentModel.sequence)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def count_by_representative(self) -> dict[str, int]:
        rows = (
            await self._s.execute(
                select(
                    CompanyAssignmentModel.sales_representative_id,
                    func.count(CompanyAssignmentModel.id),
                ).group_by(CompanyAssignmentModel.sales_representative_id)
            )
        ).all()
        return {row[0]: row[1] for row in rows}


class SqlRotationCursorRepository(RotationCursorRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get(self, rr_key: str) -> RotationCursor | None:
        result = await self._s.execute(
            select(RotationCursorModel).where(RotationCursorModel.rr_key == rr_key)
        )
        m = result.scalar_one_or_none()
        return _cursor_to_domain(m) if m else None

    async def create(self, cursor: RotationCursor) -> RotationCursor:
        m = RotationCursorModel(
            rr_key=cursor.rr_key,
            last_representative_id=cursor.last_representative_id,
            sequence=cursor.sequence,
            version=cursor.version,
        )
        self._s.add(m)
        try:
            await self._s.flush()
        except IntegrityError as e:
            raise ConcurrencyConflict(f"Rotation cursor '{cursor.rr_key}' created concurrently") from e
        return cursor

    async def compare_and_swap(self, expected: RotationCursor, new: RotationCursor) -> None:
        # Blocks on the row lock of a concurrent writer, then re-checks version
        result = await self._s.execute(
            update(RotationCursorModel)
            .where(
                RotationCursorModel.rr_key == expected.rr_key,
                RotationCursorModel.version == expected.version,
            )
            .values(
                last_representative_id=new.last_representative_id,
                sequence=new.sequence,
                version=new.version,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConcurrencyConflict(
                f"Rotation cursor '{expected.rr_key}' moved past version {expected.version}"
            )
