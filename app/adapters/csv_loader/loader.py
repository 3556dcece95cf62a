"""CSV loader — reads and normalizes CSV data files."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from app.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_column_name,
    normalize_role,
    parse_bool,
)

logger = logging.getLogger(__name__)


def _sniff_dialect(sample: str) -> type[csv.Dialect]:
    """Detect the delimiter (comma/semicolon/tab) to support Excel exports."""
    if not sample:
        return csv.excel

    first_line = sample.splitlines()[0]
    delims = [";", ",", "\t"]
    counts = {d: first_line.count(d) for d in delims}
    best_delim = max(counts, key=counts.get)

    if counts[best_delim] > 0:
        class DynamicDialect(csv.excel):
            delimiter = best_delim
        return DynamicDialect

    return csv.excel


def _read_csv(file_path: Path, encoding: str = "utf-8-sig") -> list[dict[str, str | None]]:
    """Read a CSV file with BOM handling and column normalization.

    Args:
        file_path: path to the CSV file.
        encoding: file encoding (utf-8-sig strips BOM automatically).

    Returns:
        List of dicts with normalized column names.
    """
    with open(file_path, encoding=encoding, newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        reader = csv.DictReader(f, dialect=_sniff_dialect(sample))
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        col_map = {col: normalize_column_name(col) for col in reader.fieldnames}
        rows = []
        for raw_row in reader:
            row = {col_map[k]: clean_string(v) for k, v in raw_row.items() if k is not None}
            rows.append(row)

    logger.info("Loaded %d rows from %s (columns: %s)", len(rows), file_path.name, list(col_map.values()))
    return rows


def load_representatives(file_path: Path) -> list[dict]:
    """Load and normalize the sales representatives CSV.

    Expected columns (after normalization):
        id (optional), email, first_name, last_name, role, active, email_notifications
    """
    representatives = []
    for row in _read_csv(file_path):
        email = row.get("email") or row.get("e_mail") or row.get("email_address")
        if not email:
            logger.warning("Skipping representative row without email: %s", row)
            continue
        role = normalize_role(row.get("role"))
        if role is None:
            logger.warning("Skipping representative %s with unknown role %r", email, row.get("role"))
            continue
        representatives.append({
            "id": row.get("id") or row.get("user_id"),
            "email": email.lower(),
            "first_name": row.get("first_name") or row.get("firstname"),
            "last_name": row.get("last_name") or row.get("lastname") or row.get("surname"),
            "role": role,
            "is_active": parse_bool(row.get("active") or row.get("is_active")),
            "email_notifications": parse_bool(row.get("email_notifications")),
        })
    logger.info("Parsed %d representatives", len(representatives))
    return representatives


def load_companies(file_path: Path) -> list[dict]:
    """Load and normalize the companies CSV.

    Expected columns (after normalization):
        id (optional), name / company_name, industry
    """
    companies = []
    for row in _read_csv(file_path):
        name = row.get("name") or row.get("company_name") or row.get("company")
        if not name:
            logger.warning("Skipping company row without name: %s", row)
            continue
        companies.append({
            "id": row.get("id") or row.get("company_id"),
            "name": name,
            "industry": row.get("industry"),
        })
    logger.info("Parsed %d companies", len(companies))
    return companies
