"""CompanyAssignment entity — the sales representative that owns a company."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.value_objects.enums import AssignmentMethod


@dataclass
class CompanyAssignment:
    id: int | None
    company_id: str
    sales_representative_id: str
    sequence: int
    assigned_at: datetime | None = None
    method: AssignmentMethod = AssignmentMethod.ROTATION
    assigned_by: str | None = None  # operator id for manual assignments
