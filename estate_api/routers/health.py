"""
Health check endpoint used by load balancers and container probes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from estate_api.database import get_db, ping_database, utcnow
from estate_api.schemas.health import HealthResponse
from estate_api.schemas.error import get_error_responses
from estate_api.utils.exceptions import StoreUnavailableError
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Probe the database with `SELECT 1`",
    responses=get_error_responses(503)
)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    try:
        await ping_database(db)
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Health check failed: {e}")
        raise StoreUnavailableError()

    return HealthResponse(status="OK", database="Connected", timestamp=utcnow())
