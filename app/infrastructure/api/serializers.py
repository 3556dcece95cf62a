"""Domain entity → API response dict conversion."""

from __future__ import annotations

from app.application.use_cases.assign_company import AssignmentResult
from app.domain.entities.assignment import CompanyAssignment
from app.domain.entities.company import Company
from app.domain.entities.sales_representative import SalesRepresentative


def representative_to_dict(r: SalesRepresentative) -> dict:
    return {
        "id": r.id,
        "email": r.email,
        "first_name": r.first_name,
        "last_name": r.last_name,
        "name": r.display_name,
        "role": r.role.value,
        "is_active": r.is_active,
        "eligible": r.eligible,
        "email_notifications": r.email_notifications,
    }


def company_to_dict(c: Company) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "industry": c.industry,
        "created_at": c.created_at.isoformat() if c.created_at else None,
    }


def assignment_to_dict(a: CompanyAssignment, rep: SalesRepresentative | None = None) -> dict:
    return {
        "company_id": a.company_id,
        "sales_representative_id": a.sales_representative_id,
        "sales_representative": representative_to_dict(rep) if rep else None,
        "sequence": a.sequence,
        "method": a.method.value,
        "assigned_by": a.assigned_by,
        "assigned_at": a.assigned_at.isoformat() if a.assigned_at else None,
    }


def result_to_dict(r: AssignmentResult) -> dict:
    return {
        "company_id": r.company_id,
        "status": r.status.value,
        "sales_representative_id": r.sales_representative_id,
        "error": r.error,
    }
