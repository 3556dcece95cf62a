"""Company entity — a shipper organisation created by the signup flow."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Company:
    id: str | None
    name: str
    industry: str | None = None
    created_at: datetime | None = None
