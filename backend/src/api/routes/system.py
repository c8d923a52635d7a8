"""System routes for health and readiness checks."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies import Services, get_services


router = APIRouter(prefix="/api", tags=["system"])


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    database: str
    cacheLoading: bool
    cacheError: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(services: Services = Depends(get_services)):
    """Readiness check that verifies database connectivity."""
    cache = services.cache
    try:
        with services.store.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return {
            "status": "not_ready",
            "database": "disconnected",
            "cacheLoading": cache.loading,
            "cacheError": cache.last_error,
        }
    return {
        "status": "ready",
        "database": "connected",
        "cacheLoading": cache.loading,
        "cacheError": cache.last_error,
    }
