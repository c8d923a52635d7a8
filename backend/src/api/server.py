"""FastAPI application factory for the DentX radiography scheduler API."""
from __future__ import annotations

import logging
import os
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from logging_config import configure_logging
from operators.service import OperatorDirectory
from records.errors import RecordStoreError
from records.store import RecordStore
from stats import StatsSettings

from api.dependencies import build_services

configure_logging()
logger = logging.getLogger(__name__)


def parse_cors_origins() -> List[str]:
    """Parse DENTX_CORS_ORIGINS (comma separated) with local dev defaults."""
    raw = os.getenv("DENTX_CORS_ORIGINS")
    if not raw:
        return ["http://localhost:5173", "http://localhost:3000"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


async def _record_store_error_handler(request: Request, exc: RecordStoreError) -> JSONResponse:
    logger.error("event=request_failed path=%s action=%s message=%s", request.url.path, exc.action, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app(
    store: Optional[RecordStore] = None,
    operators: Optional[OperatorDirectory] = None,
    stats_settings: Optional[StatsSettings] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="DentX API",
        description="Scheduling and record keeping for dental radiography",
        version="0.1.0",
    )

    services = build_services(store, operators, stats_settings)
    app.state.services = services

    # Subscribe the read cache; a failing feed leaves it settled with last_error set.
    services.cache.start()
    if services.cache.last_error:
        logger.warning("Record cache started with an error: %s", services.cache.last_error)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_exception_handler(RecordStoreError, _record_store_error_handler)

    from api.routes import (
        system_router,
        reference_router,
        patients_router,
        requests_router,
        history_router,
        operators_router,
    )

    app.include_router(system_router)
    app.include_router(reference_router)
    app.include_router(patients_router)
    app.include_router(requests_router)
    app.include_router(history_router)
    app.include_router(operators_router)

    return app


def main():
    """Run the API server."""
    import uvicorn
    app = create_app()
    uvicorn.run(app, host=os.getenv("DENTX_HOST", "0.0.0.0"), port=int(os.getenv("DENTX_PORT", "8000")))


if __name__ == "__main__":
    main()
