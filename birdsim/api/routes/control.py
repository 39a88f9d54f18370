"""POST /simulation/{start,stop,restart,advance} and the time-step multiplier."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from birdsim.api.dependencies import get_coordinator
from birdsim.api.schemas import ControlResponse, TimeStepSchema
from birdsim.engine.coordinator import Coordinator

router = APIRouter()


def _respond(coordinator: Coordinator, ok: bool, message: str) -> ControlResponse:
    snap = coordinator.get_state()
    return ControlResponse(
        status="ok" if ok else "error",
        message=message,
        tick=snap.tick,
        running=snap.running,
    )


@router.post("/simulation/start", response_model=ControlResponse)
def start(coordinator: Coordinator = Depends(get_coordinator)) -> ControlResponse:
    return _respond(coordinator, coordinator.start(), "Simulation started")


@router.post("/simulation/stop", response_model=ControlResponse)
def stop(coordinator: Coordinator = Depends(get_coordinator)) -> ControlResponse:
    return _respond(coordinator, coordinator.stop(), "Simulation stopped")


@router.post("/simulation/restart", response_model=ControlResponse)
def restart(coordinator: Coordinator = Depends(get_coordinator)) -> ControlResponse:
    """Throw the current world away and generate a fresh one, running."""
    return _respond(coordinator, coordinator.restart(), "Simulation restarted")


@router.post("/simulation/advance", response_model=ControlResponse)
def advance(
    ticks: int = Query(1, ge=1, le=10_000, description="Ticks to run immediately"),
    coordinator: Coordinator = Depends(get_coordinator),
) -> ControlResponse:
    """Run ticks right now, whether or not the simulation is running."""
    snap = coordinator.advance(ticks)
    return ControlResponse(
        status="ok", message=f"Advanced {ticks} ticks", tick=snap.tick, running=snap.running,
    )


@router.get("/simulation/time-step", response_model=TimeStepSchema)
def get_time_step(
    coordinator: Coordinator = Depends(get_coordinator),
) -> TimeStepSchema:
    return TimeStepSchema(time_step=coordinator.get_time_step())


@router.post("/simulation/time-step", response_model=TimeStepSchema)
def set_time_step(
    body: TimeStepSchema,
    coordinator: Coordinator = Depends(get_coordinator),
) -> TimeStepSchema:
    return TimeStepSchema(time_step=coordinator.set_time_step(body.time_step))
