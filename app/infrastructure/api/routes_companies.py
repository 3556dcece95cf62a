"""Company endpoints — signup registration and lookups."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.application.ports.unit_of_work import UnitOfWorkFactory
from app.application.use_cases.register_company import RegisterCompanyUseCase
from app.infrastructure.api.dependencies import get_register_company_uc, get_uow_factory
from app.infrastructure.api.serializers import (
    assignment_to_dict,
    company_to_dict,
    result_to_dict,
)

router = APIRouter(prefix="/companies", tags=["companies"])


class RegisterCompanyRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    industry: str | None = None


@router.post("", status_code=201)
async def register_company(
    body: RegisterCompanyRequest,
    register_uc: RegisterCompanyUseCase = Depends(get_register_company_uc),
):
    """Create a company and try to give it a sales rep.

    The company is created even if no sales rep could be assigned.
    """
    registration = await register_uc.execute(body.name, body.industry)
    return {
        **company_to_dict(registration.company),
        "assignment": result_to_dict(registration.assignment),
    }


@router.get("/unassigned")
async def list_unassigned(uow_factory: UnitOfWorkFactory = Depends(get_uow_factory)):
    """Companies waiting for a sales rep (retry sweep / operator queue)."""
    async with uow_factory() as uow:
        companies = await uow.companies.get_unassigned()
    return {
        "total": len(companies),
        "companies": [company_to_dict(c) for c in companies],
    }


@router.get("/{company_id}")
async def get_company(company_id: str, uow_factory: UnitOfWorkFactory = Depends(get_uow_factory)):
    """A single company with its assignment, if any."""
    async with uow_factory() as uow:
        company = await uow.companies.get_by_id(company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
        assignment = await uow.assignments.get_by_company(company_id)

    return {
        **company_to_dict(company),
        "assignment": assignment_to_dict(assignment) if assignment else None,
    }
