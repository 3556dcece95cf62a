"""Sales representative directory endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.application.ports.unit_of_work import UnitOfWorkFactory
from app.domain.entities.sales_representative import SalesRepresentative
from app.domain.errors import DuplicateRepresentative
from app.domain.value_objects.enums import RepresentativeRole
from app.infrastructure.api.dependencies import get_uow_factory
from app.infrastructure.api.serializers import (
    assignment_to_dict,
    company_to_dict,
    representative_to_dict,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/representatives", tags=["representatives"])


class CreateRepresentativeRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    first_name: str | None = None
    last_name: str | None = None
    role: RepresentativeRole = RepresentativeRole.SALES
    is_active: bool = True
    email_notifications: bool = True


class SetActiveRequest(BaseModel):
    is_active: bool


@router.get("")
async def list_representatives(
    eligible_only: bool = False,
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
):
    """All representatives, or only those in the rotation pool."""
    async with uow_factory() as uow:
        if eligible_only:
            reps = await uow.representatives.get_eligible()
        else:
            reps = await uow.representatives.get_all()
    return {"total": len(reps), "representatives": [representative_to_dict(r) for r in reps]}


@router.post("", status_code=201)
async def create_representative(
    body: CreateRepresentativeRequest,
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
):
    try:
        async with uow_factory() as uow:
            rep = await uow.representatives.save(
                SalesRepresentative(
                    id=None,
                    email=body.email.strip().lower(),
                    role=body.role,
                    first_name=body.first_name,
                    last_name=body.last_name,
                    is_active=body.is_active,
                    email_notifications=body.email_notifications,
                )
            )
            await uow.commit()
    except DuplicateRepresentative as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    logger.info("Created representative %s (%s, role=%s)", rep.id, rep.email, rep.role.value)
    return representative_to_dict(rep)


@router.patch("/{representative_id}/active")
async def set_active(
    representative_id: str,
    body: SetActiveRequest,
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
):
    """Activate or deactivate; inactive reps drop out of the rotation."""
    async with uow_factory() as uow:
        rep = await uow.representatives.set_active(representative_id, body.is_active)
        if not rep:
            raise HTTPException(status_code=404, detail="Representative not found")
        await uow.commit()
    logger.info("Representative %s is_active=%s", representative_id, body.is_active)
    return representative_to_dict(rep)


@router.get("/{representative_id}/companies")
async def list_companies_for_representative(
    representative_id: str,
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
):
    """Companies owned by a representative, in assignment order."""
    async with uow_factory() as uow:
        rep = await uow.representatives.get_by_id(representative_id)
        if not rep:
            raise HTTPException(status_code=404, detail="Representative not found")
        assignments = await uow.assignments.get_by_representative(representative_id)
        companies = [await uow.companies.get_by_id(a.company_id) for a in assignments]

    return {
        "representative": representative_to_dict(rep),
        "total": len(assignments),
        "companies": [
            {**company_to_dict(c), "assignment": assignment_to_dict(a)}
            for a, c in zip(assignments, companies)
            if c is not None
        ],
    }


@router.get("/{representative_id}/companies/{company_id}/access")
async def validate_access(
    representative_id: str,
    company_id: str,
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
):
    """Whether the representative owns the company."""
    async with uow_factory() as uow:
        assignment = await uow.assignments.get_by_company(company_id)
    allowed = assignment is not None and assignment.sales_representative_id == representative_id
    return {"representative_id": representative_id, "company_id": company_id, "allowed": allowed}
