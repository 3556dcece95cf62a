"""Seed database from CSV files.

Usage:
    python -m app.tools.seed_db
    python -m app.tools.seed_db --data-dir data
    python -m app.tools.seed_db --drop      # drop existing data first
    python -m app.tools.seed_db --assign    # run the rotation for unassigned companies
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.csv_loader.loader import load_companies, load_representatives
from app.adapters.persistence.database import async_session_factory
from app.adapters.persistence.models import (
    CompanyAssignmentModel,
    CompanyModel,
    RotationCursorModel,
    SalesRepresentativeModel,
)
from app.adapters.persistence.unit_of_work import sql_uow_factory
from app.application.use_cases.assign_company import (
    AssignCompanyUseCase,
    AssignUnassignedCompaniesUseCase,
)
from app.config import settings
from app.infrastructure.api.dependencies import make_balancer

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


async def _drop_data(session: AsyncSession) -> None:
    """Delete all data in correct order (respecting FK constraints)."""
    for model in [
        CompanyAssignmentModel,
        RotationCursorModel,
        CompanyModel,
        SalesRepresentativeModel,
    ]:
        await session.execute(delete(model))
    await session.commit()
    logger.info("Dropped all existing data")


async def seed(data_dir: Path, drop: bool = False) -> dict[str, int]:
    """Main seed function. Returns counts of seeded records."""
    counts = {"representatives": 0, "companies": 0}

    rep_csv = _find_csv(data_dir, ["representatives", "sales_reps", "sales", "nts_users", "users"])
    company_csv = _find_csv(data_dir, ["companies", "company", "shippers"])

    if not rep_csv:
        raise FileNotFoundError(
            f"No representatives CSV found in {data_dir}. Expected something like sales_reps.csv"
        )

    async with async_session_factory() as session:
        if drop:
            await _drop_data(session)

        # 1. Seed representatives
        for rd in load_representatives(rep_csv):
            existing = await session.execute(
                select(SalesRepresentativeModel).where(SalesRepresentativeModel.email == rd["email"])
            )
            if existing.scalar_one_or_none():
                logger.debug("Representative '%s' already exists, skipping", rd["email"])
                continue

            rep = SalesRepresentativeModel(
                email=rd["email"],
                first_name=rd["first_name"],
                last_name=rd["last_name"],
                role=rd["role"],
                is_active=rd["is_active"],
                email_notifications=rd["email_notifications"],
            )
            if rd["id"]:
                rep.id = rd["id"]
            session.add(rep)
            counts["representatives"] += 1

        await session.commit()

        # 2. Seed companies (if CSV exists)
        if company_csv:
            for cd in load_companies(company_csv):
                if cd["id"] and await session.get(CompanyModel, cd["id"]):
                    logger.debug("Company '%s' already exists, skipping", cd["id"])
                    continue

                company = CompanyModel(name=cd["name"], industry=cd["industry"])
                if cd["id"]:
                    company.id = cd["id"]
                session.add(company)
                counts["companies"] += 1

            await session.commit()
        else:
            logger.info("No companies CSV found — skipping company import")

    logger.info(
        "Seed complete: %d representatives, %d companies",
        counts["representatives"], counts["companies"],
    )
    return counts


async def assign_unassigned() -> int:
    """Run the rotation over every unassigned company. Returns how many got an owner."""
    balancer = make_balancer(sql_uow_factory)
    sweep = AssignUnassignedCompaniesUseCase(AssignCompanyUseCase(balancer), sql_uow_factory)
    results = await sweep.execute()
    return sum(1 for r in results if r.ok)


def _find_csv(data_dir: Path, name_hints: list[str]) -> Path | None:
    """Find a CSV file matching any of the name hints."""
    for hint in name_hints:
        for f in sorted(data_dir.glob("*.csv")):
            if hint in f.stem.lower():
                logger.info("Found CSV: %s (matched hint '%s')", f.name, hint)
                return f
    return None


async def _verify_data() -> None:
    """Print sanity checks after seeding."""
    async with async_session_factory() as session:
        reps = (await session.execute(select(SalesRepresentativeModel))).scalars().all()
        companies = (await session.execute(select(func.count(CompanyModel.id)))).scalar() or 0
        assigned = (await session.execute(select(func.count(CompanyAssignmentModel.id)))).scalar() or 0

        print(f"\n{'='*50}")
        print("SEED VERIFICATION")
        print(f"{'='*50}")
        print(f"Representatives: {len(reps)}")
        print(f"Companies:       {companies}")
        print(f"Assigned:        {assigned}/{companies}")

        roles: dict[str, int] = {}
        for r in reps:
            roles[r.role] = roles.get(r.role, 0) + 1
        print(f"Role distribution: {roles}")
        print(f"Active representatives: {sum(1 for r in reps if r.is_active)}/{len(reps)}")
        print(f"{'='*50}\n")


def main():
    parser = argparse.ArgumentParser(description="Seed the sales assignment database from CSV files")
    parser.add_argument(
        "--data-dir", type=str, default=settings.csv_data_path,
        help="Directory containing CSV files (default: CSV_DATA_PATH or data)",
    )
    parser.add_argument(
        "--drop", action="store_true",
        help="Drop existing data before seeding",
    )
    parser.add_argument(
        "--assign", action="store_true",
        help="Assign sales reps to unassigned companies after seeding",
    )
    parser.add_argument(
        "--verify-only", action="store_true",
        help="Only run verification, don't seed",
    )
    args = parser.parse_args()

    data_dir = Path(args.data_dir)
    if not args.verify_only and not data_dir.exists():
        logger.error("Data directory not found: %s", data_dir)
        sys.exit(1)

    if args.verify_only:
        asyncio.run(_verify_data())
    else:
        async def run_all():
            await seed(data_dir, drop=args.drop)
            if args.assign:
                assigned = await assign_unassigned()
                logger.info("Assigned %d companies", assigned)
            await _verify_data()
        asyncio.run(run_all())


if __name__ == "__main__":
    main()
