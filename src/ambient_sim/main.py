from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.ambient_sim.api.v1.routes_events import router as events_router_v1
from src.ambient_sim.api.v1.routes_listening import router as listening_router_v1
from src.ambient_sim.api.v1.routes_notes import router as notes_router_v1
from src.ambient_sim.api.v1.routes_system import router as system_router_v1
from src.ambient_sim.config import Settings, settings as default_settings
from src.ambient_sim.services.simulator import AmbientSimulator


def create_app(
    *,
    settings: Optional[Settings] = None,
    simulator: Optional[AmbientSimulator] = None,
) -> FastAPI:
    """Build the API application around one simulator instance.

    This is the single wiring point for the simulator: routes reach it through
    ``app.state`` rather than a module-level global. Pending scheduled work is
    cancelled when the application shuts down.
    """

    settings = settings or default_settings
    simulator = simulator or AmbientSimulator(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logging.basicConfig(level=settings.log_level.upper())
        yield
        await simulator.shutdown()

    app = FastAPI(title="Ambient Scribe Simulator API", lifespan=lifespan)
    app.state.simulator = simulator

    # CORS configuration – permissive by default for development. Tighten via
    # CORS_ALLOW_ORIGINS in production deployments.
    allow_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()] or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["system"])
    async def health_check() -> dict:
        """Basic liveness probe for the API root."""
        return {"status": "ok"}

    # Versioned API routers
    app.include_router(system_router_v1, prefix="/api/v1")
    app.include_router(listening_router_v1, prefix="/api/v1")
    app.include_router(notes_router_v1, prefix="/api/v1")
    app.include_router(events_router_v1, prefix="/api/v1")

    return app


app = create_app()
