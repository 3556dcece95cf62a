"""CSV column normalization — handles BOM, trailing spaces, encoding quirks."""

from __future__ import annotations

import re

from app.domain.value_objects.enums import RepresentativeRole

_TRUE_VALUES = {"1", "true", "yes", "y", "t", "active", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "f", "inactive", "off"}
_ROLE_CODES = {r.value for r in RepresentativeRole}


def normalize_column_name(name: str) -> str:
    """Normalize a CSV column name.

    - Strips leading/trailing whitespace
    - Removes BOM characters (\\ufeff)
    - Replaces runs of spaces, dashes and non-breaking spaces with one underscore
    - Lowercases
    - Strips non-alphanumeric characters (except underscore)
    """
    name = name.replace("\ufeff", "")
    name = name.strip()
    name = re.sub(r"[\s\u00a0\-]+", "_", name)
    name = name.lower()
    name = re.sub(r"[^\w]", "", name, flags=re.UNICODE)
    return name


def clean_string(value: str | None) -> str | None:
    """Strip whitespace and return None for empty strings."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def parse_bool(raw: str | None, default: bool = True) -> bool:
    """Parse spreadsheet-style booleans ('yes', 'TRUE', '0', ...)."""
    value = clean_string(raw)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


_ROLE_ALIASES = {
    "sales_rep": "sales",
    "sales_representative": "sales",
    "salesperson": "sales",
    "administrator": "admin",
    "superadmin": "super_admin",
    "customer_support": "support",
}


def normalize_role(raw: str | None) -> str | None:
    """Map free-text role labels onto role codes ('Sales Rep' → 'sales').

    Returns None for labels that are not a known role.
    """
    value = (clean_string(raw) or "sales").lower()
    value = re.sub(r"[\s\-]+", "_", value)
    value = _ROLE_ALIASES.get(value, value)
    return value if value in _ROLE_CODES else None
