"""GET/POST /simulation/config — read or replace the simulation config."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from birdsim.api.dependencies import get_coordinator
from birdsim.api.schemas import SimulationConfigSchema
from birdsim.engine.coordinator import Coordinator

router = APIRouter()


@router.get("/simulation/config", response_model=SimulationConfigSchema)
def get_config(
    coordinator: Coordinator = Depends(get_coordinator),
) -> SimulationConfigSchema:
    return SimulationConfigSchema.from_config(coordinator.get_config())


@router.post("/simulation/config", response_model=SimulationConfigSchema)
def set_config(
    body: SimulationConfigSchema,
    coordinator: Coordinator = Depends(get_coordinator),
) -> SimulationConfigSchema:
    """Replace the config. The world is regenerated from scratch."""
    return SimulationConfigSchema.from_config(coordinator.set_config(body.to_config()))
