"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.persistence.database import get_session
from app.adapters.persistence.models import RotationCursorModel
from app.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    """Database connectivity and whether the rotation has started."""
    try:
        cursor = (
            await session.execute(
                select(RotationCursorModel).where(RotationCursorModel.rr_key == settings.rotation_key)
            )
        ).scalar_one_or_none()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check failed: %s", e)
        return {
            "status": "degraded",
            "database": "unreachable",
            "rotation": None,
            "service": "Freight sales assignment service",
        }

    return {
        "status": "ok",
        "database": "connected",
        "rotation": {
            "rr_key": settings.rotation_key,
            "initialised": cursor is not None,
            "last_representative_id": cursor.last_representative_id if cursor else None,
            "sequence": cursor.sequence if cursor else 0,
        },
        "service": "Freight sales assignment service",
    }
