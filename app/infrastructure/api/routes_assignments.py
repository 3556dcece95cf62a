"""Assignment endpoints — rotation, manual placement, retry sweep, reports."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from app.application.ports.unit_of_work import UnitOfWorkFactory
from app.application.use_cases.assign_company import (
    AssignCompanyUseCase,
    AssignmentResult,
    AssignUnassignedCompaniesUseCase,
    ManualAssignUseCase,
)
from app.config import settings
from app.domain.value_objects.enums import AssignmentStatus
from app.infrastructure.api.dependencies import (
    get_assign_company_uc,
    get_manual_assign_uc,
    get_sweep_uc,
    get_uow_factory,
)
from app.infrastructure.api.serializers import (
    assignment_to_dict,
    representative_to_dict,
    result_to_dict,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assignments", tags=["assignments"])

_ERROR_STATUS = {
    AssignmentStatus.COMPANY_NOT_FOUND: 404,
    AssignmentStatus.NO_ELIGIBLE_REPRESENTATIVES: 409,
    AssignmentStatus.REPRESENTATIVE_NOT_ELIGIBLE: 422,
    AssignmentStatus.PERSISTENCE_ERROR: 503,
}


class ManualAssignRequest(BaseModel):
    sales_representative_id: str
    assigned_by: str | None = None


def _respond(result: AssignmentResult, response: Response) -> dict:
    """201 for a new assignment, 200 for an idempotent hit, error codes otherwise."""
    if result.status == AssignmentStatus.ASSIGNED:
        response.status_code = 201
    elif result.status != AssignmentStatus.ALREADY_ASSIGNED:
        raise HTTPException(status_code=_ERROR_STATUS[result.status], detail=result_to_dict(result))
    return result_to_dict(result)


@router.post("/retry-unassigned")
async def retry_unassigned(sweep_uc: AssignUnassignedCompaniesUseCase = Depends(get_sweep_uc)):
    """Run the rotation for every company still waiting for a sales rep."""
    results = await sweep_uc.execute()
    assigned = [r for r in results if r.status == AssignmentStatus.ASSIGNED]
    failed = [r for r in results if not r.ok]
    return {
        "status": "ok",
        "total": len(results),
        "assigned": len(assigned),
        "failed": len(failed),
        "results": [result_to_dict(r) for r in results],
    }


@router.get("/summary")
async def assignment_summary(uow_factory: UnitOfWorkFactory = Depends(get_uow_factory)):
    """Per-representative counts, unassigned backlog and rotation cursor state."""
    async with uow_factory() as uow:
        counts = await uow.assignments.count_by_representative()
        reps = await uow.representatives.get_all()
        unassigned = await uow.companies.get_unassigned()
        cursor = await uow.cursors.get(settings.rotation_key)

    return {
        "total_assigned": sum(counts.values()),
        "unassigned": len(unassigned),
        "by_representative": [
            {**representative_to_dict(r), "companies": counts.get(r.id, 0)} for r in reps
        ],
        "cursor": {
            "rr_key": cursor.rr_key,
            "last_representative_id": cursor.last_representative_id,
            "sequence": cursor.sequence,
            "version": cursor.version,
        } if cursor else None,
    }


@router.get("/company/{company_id}")
async def get_company_assignment(
    company_id: str,
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
):
    """The sales representative that owns a company."""
    async with uow_factory() as uow:
        assignment = await uow.assignments.get_by_company(company_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Company has no assignment")
        rep = await uow.representatives.get_by_id(assignment.sales_representative_id)
    return assignment_to_dict(assignment, rep)


@router.get("/company/{company_id}/recipients")
async def notification_recipients(
    company_id: str,
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
):
    """Assigned representatives that want email notifications for this company."""
    async with uow_factory() as uow:
        assignment = await uow.assignments.get_by_company(company_id)
        rep = (
            await uow.representatives.get_by_id(assignment.sales_representative_id)
            if assignment else None
        )
    recipients = [rep] if rep and rep.email_notifications else []
    return {
        "company_id": company_id,
        "recipients": [representative_to_dict(r) for r in recipients],
    }


@router.post("/{company_id}")
async def assign_company(
    company_id: str,
    response: Response,
    assign_uc: AssignCompanyUseCase = Depends(get_assign_company_uc),
):
    """Assign the next sales rep in rotation (idempotent per company)."""
    return _respond(await assign_uc.execute(company_id), response)


@router.post("/{company_id}/manual")
async def assign_company_manually(
    company_id: str,
    body: ManualAssignRequest,
    response: Response,
    manual_uc: ManualAssignUseCase = Depends(get_manual_assign_uc),
):
    """Operator placement for a company the rotation could not assign."""
    result = await manual_uc.execute(company_id, body.sales_representative_id, body.assigned_by)
    return _respond(result, response)
