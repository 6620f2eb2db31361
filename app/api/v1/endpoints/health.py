"""
Health check endpoints
"""

from typing import Any
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import get_session
from app.config import settings
from app.schemas.response import HealthResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/live")
async def liveness() -> Any:
    """
    Liveness probe
    """
    return {"status": "alive", "service": "bts-explorer-api"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Readiness probe - checks the database
    """
    checks = {
        "database": False,
        "api": True
    }

    try:
        result = await db.execute(text("SELECT 1"))
        checks["database"] = result.scalar() == 1
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")

    all_healthy = all(checks.values())

    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content=HealthResponse(
            status="ready" if all_healthy else "not ready",
            checks=checks,
            version=settings.APP_VERSION
        ).model_dump()
    )
