"""Assignment error taxonomy."""

from __future__ import annotations


class AssignmentError(Exception):
    """Base class for every failure of the assignment flow."""


class NoEligibleRepresentatives(AssignmentError):
    def __init__(self) -> None:
        super().__init__("No eligible sales representatives available")


class AlreadyAssigned(AssignmentError):
    def __init__(self, company_id: str, representative_id: str | None = None) -> None:
        self.company_id = company_id
        self.representative_id = representative_id
        super().__init__(f"Company {company_id} is already assigned")


class CompanyNotFound(AssignmentError):
    def __init__(self, company_id: str) -> None:
        self.company_id = company_id
        super().__init__(f"Company {company_id} not found")


class RepresentativeNotEligible(AssignmentError):
    def __init__(self, representative_id: str) -> None:
        self.representative_id = representative_id
        super().__init__(
            f"Sales representative {representative_id} is missing or not eligible"
        )


class ConcurrencyConflict(AssignmentError):
    """The rotation cursor moved underneath us; the attempt must be retried."""


class PersistenceError(AssignmentError):
    """The backing store failed or stayed contended past the retry budget."""


class DuplicateRepresentative(AssignmentError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"A sales representative with email {email} already exists")
