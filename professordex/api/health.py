"""
Liveness and readiness checks.

Only the database gates readiness. A catalog outage leaves stored
ownership readable, so the catalog is not checked here.
"""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from professordex.api.deps import SessionDep

router = APIRouter(tags=["health"])

NOT_READY = status.HTTP_503_SERVICE_UNAVAILABLE


class HealthStatus(BaseModel):
    status: str
    database: str | None = None


@router.get("/health", response_model=HealthStatus)
async def liveness() -> HealthStatus:
    return HealthStatus(status="healthy")


@router.get("/ready", response_model=HealthStatus, responses={NOT_READY: {"model": HealthStatus}})
async def readiness(response: Response, session: SessionDep) -> HealthStatus:
    """Answer 503 when `SELECT 1` fails against the configured database."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        response.status_code = NOT_READY
        return HealthStatus(status="not ready", database="disconnected")
    return HealthStatus(status="ready", database="connected")
