"""FastAPI dependency injection — resolves the app's Coordinator per request."""

from __future__ import annotations

from fastapi import HTTPException, Request

from birdsim.engine.coordinator import Coordinator


def get_coordinator(request: Request) -> Coordinator:
    """The coordinator the lifespan attached to ``app.state``.

    503 while the app is not started or after the coordinator thread died.
    """
    coordinator: Coordinator | None = getattr(request.app.state, "coordinator", None)
    if coordinator is None or not coordinator.alive:
        raise HTTPException(status_code=503, detail="Simulation coordinator is not running.")
    return coordinator
