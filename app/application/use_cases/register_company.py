"""RegisterCompanyUseCase — create a company, then hand it to the rotation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.application.ports.unit_of_work import UnitOfWorkFactory
from app.application.use_cases.assign_company import AssignCompanyUseCase, AssignmentResult
from app.domain.entities.company import Company

logger = logging.getLogger(__name__)


@dataclass
class CompanyRegistration:
    company: Company
    assignment: AssignmentResult


class RegisterCompanyUseCase:
    """Company creation never fails because of the sales assignment.

    The company is committed first. If the rotation cannot place it, the
    company stays in the unassigned queue for the retry sweep or an operator.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, assign_company: AssignCompanyUseCase):
        self._uow_factory = uow_factory
        self._assign = assign_company

    async def execute(self, name: str, industry: str | None = None) -> CompanyRegistration:
        async with self._uow_factory() as uow:
            company = await uow.companies.save(Company(id=None, name=name, industry=industry))
            await uow.commit()
        logger.info("Registered company %s (%s)", company.id, company.name)

        assignment = await self._assign.execute(company.id)
        if not assignment.ok:
            logger.warning(
                "Company %s created without a sales rep (%s); queued for retry",
                company.id, assignment.status.value,
            )
        return CompanyRegistration(company=company, assignment=assignment)
