"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from birdsim import __version__
from birdsim.api.routes import api_router
from birdsim.api.schemas import MessageResponse
from birdsim.config import AppSettings
from birdsim.engine.coordinator import Coordinator
from birdsim.storage.snapshot_store import SnapshotStore
from birdsim.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    if settings is None:
        settings = AppSettings.from_env()

    _settings = settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_settings.log_level)
        store = SnapshotStore(_settings.db_path)
        # A store that cannot be created is fatal: the server does not come up
        store.initialize()

        coordinator = Coordinator(
            config=_settings.simulation,
            factors=_settings.environment,
            rules=_settings.rules,
            store=store,
            seed=_settings.seed,
        )
        coordinator.launch()
        app.state.coordinator = coordinator
        logger.info("API server started, simulation running (%s rules).", _settings.rules.rule_set.value)
        yield
        coordinator.shutdown()
        app.state.coordinator = None
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Bird Migration Simulation",
        description=(
            "Deterministic flocking simulation — real-time control API.\n\n"
            "## API Groups\n\n"
            "- **State** — Live world state: birds, obstacles, resources, predators, zones\n"
            "- **Control** — Start, stop, restart, advance and the time-step multiplier\n"
            "- **Config** — Simulation configuration (changing it regenerates the world)\n"
            "- **Environment** — Environmental factors and climate zones\n"
            "- **Snapshots** — Save to and load from the SQLite snapshot store\n"
        ),
        version=__version__,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Live simulation state polled by the dashboard."},
            {"name": "Control", "description": "Simulation lifecycle controls and the time-step multiplier."},
            {"name": "Config", "description": "World size, population, obstacle and resource counts, tick interval."},
            {"name": "Environment", "description": "Temperature, food availability, predator presence and zones."},
            {"name": "Snapshots", "description": "Append-only persistence; loads always restore the newest save."},
        ],
    )

    # CORS — allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/ping", response_model=MessageResponse, tags=["State"])
    def ping() -> MessageResponse:
        return MessageResponse(message="pong")

    app.include_router(api_router)

    return app
