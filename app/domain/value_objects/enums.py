"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class RepresentativeRole(str, Enum):
    SALES = "sales"
    BROKER = "broker"  # legacy name for a sales rep
    MANAGER = "manager"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
    SUPPORT = "support"
    SHIPPER = "shipper"  # customer-side user, never in the rotation


# Roles that receive companies from the rotation
SALES_ROLES = frozenset({RepresentativeRole.SALES, RepresentativeRole.BROKER})


class AssignmentMethod(str, Enum):
    ROTATION = "rotation"
    MANUAL = "manual"


class AssignmentStatus(str, Enum):
    ASSIGNED = "assigned"
    ALREADY_ASSIGNED = "already_assigned"
    NO_ELIGIBLE_REPRESENTATIVES = "no_eligible_representatives"
    COMPANY_NOT_FOUND = "company_not_found"
    REPRESENTATIVE_NOT_ELIGIBLE = "representative_not_eligible"
    PERSISTENCE_ERROR = "persistence_error"
