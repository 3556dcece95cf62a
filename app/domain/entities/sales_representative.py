"""SalesRepresentative entity — an account that can own shipper companies."""

from dataclasses import dataclass

from app.domain.value_objects.enums import SALES_ROLES, RepresentativeRole


@dataclass
class SalesRepresentative:
    id: str | None
    email: str
    role: RepresentativeRole
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool = True
    email_notifications: bool = True

    @property
    def eligible(self) -> bool:
        """True if the representative takes part in the company rotation."""
        return self.is_active and self.role in SALES_ROLES

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.email
