"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from fastapi import Depends

from app.adapters.persistence.unit_of_work import sql_uow_factory
from app.application.ports.unit_of_work import UnitOfWorkFactory
from app.application.use_cases.assign_company import (
    AssignCompanyUseCase,
    AssignmentBalancer,
    AssignUnassignedCompaniesUseCase,
    ManualAssignUseCase,
)
from app.application.use_cases.register_company import RegisterCompanyUseCase
from app.config import settings


def get_uow_factory() -> UnitOfWorkFactory:
    return sql_uow_factory


def make_balancer(uow_factory: UnitOfWorkFactory) -> AssignmentBalancer:
    return AssignmentBalancer(
        uow_factory,
        rotation_key=settings.rotation_key,
        max_attempts=settings.assignment_max_attempts,
        retry_backoff_ms=settings.assignment_retry_backoff_ms,
        attempt_timeout_s=settings.assignment_timeout_s,
    )


def get_balancer(uow_factory: UnitOfWorkFactory = Depends(get_uow_factory)) -> AssignmentBalancer:
    return make_balancer(uow_factory)


def get_assign_company_uc(
    balancer: AssignmentBalancer = Depends(get_balancer),
) -> AssignCompanyUseCase:
    return AssignCompanyUseCase(balancer)


def get_manual_assign_uc(
    balancer: AssignmentBalancer = Depends(get_balancer),
) -> ManualAssignUseCase:
    return ManualAssignUseCase(balancer)


def get_sweep_uc(
    assign_uc: AssignCompanyUseCase = Depends(get_assign_company_uc),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> AssignUnassignedCompaniesUseCase:
    return AssignUnassignedCompaniesUseCase(assign_uc, uow_factory)


def get_register_company_uc(
    assign_uc: AssignCompanyUseCase = Depends(get_assign_company_uc),
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> RegisterCompanyUseCase:
    return RegisterCompanyUseCase(uow_factory, assign_uc)
