"""FastAPI app factory.

Endpoints are intentionally thin wrappers over the orchestrator services.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from medical_mirror_orchestrator import __version__
from medical_mirror_orchestrator.orchestrator.config import OrchestratorSettings
from medical_mirror_orchestrator.orchestrator.runtime import Orchestrator
from medical_mirror_orchestrator.server.config import ServerSettings
from medical_mirror_orchestrator.server.orchestrator_router import (
    request_validation_error_handler,
    router as orchestrator_router,
)

logger = logging.getLogger(__name__)


def create_app(
    *,
    settings: OrchestratorSettings | None = None,
    server_settings: ServerSettings | None = None,
    orchestrator: Orchestrator | None = None,
) -> FastAPI:
    """Build the API.

    When `orchestrator` is given it is used as-is and its lifecycle stays with the
    caller; otherwise one is created from settings on startup and closed on
    shutdown.
    """

    server_settings = server_settings or ServerSettings()
    started_at = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if orchestrator is not None:
            yield
            return

        owned = Orchestrator(settings or OrchestratorSettings())
        await owned.start()
        app.state.orchestrator = owned
        try:
            yield
        finally:
            await owned.close()

    app = FastAPI(
        title="Medical Mirror Orchestrator",
        version=__version__,
        description="Multi-agent workflow orchestration across the Medical Mirror services.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.state.server_settings = server_settings
    if orchestrator is not None:
        app.state.orchestrator = orchestrator

    # The Chrome extension and LAN dashboards call the API directly.
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=server_settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.include_router(orchestrator_router, prefix="/api/orchestrator")

    @app.get("/health")
    def health() -> dict[str, object]:
        return {
            "status": "ok",
            "version": __version__,
            "uptime": int(time.monotonic() - started_at),
            "timestamp": datetime.now(tz=UTC).isoformat(),
        }

    return app
