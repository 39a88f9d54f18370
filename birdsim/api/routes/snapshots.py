"""POST /simulation/save and GET /simulation/load — snapshot persistence."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from birdsim.api.dependencies import get_coordinator
from birdsim.api.routes.state import serialize_snapshot
from birdsim.api.schemas import LoadResponse, SaveResponse, SimulationConfigSchema
from birdsim.engine.coordinator import Coordinator
from birdsim.storage.snapshot_store import PersistenceError, SnapshotNotFoundError

router = APIRouter()


@router.post("/simulation/save", response_model=SaveResponse)
def save(
    coordinator: Coordinator = Depends(get_coordinator),
) -> SaveResponse:
    try:
        snapshot_id = coordinator.save_snapshot()
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return SaveResponse(message="Simulation state saved", snapshot_id=snapshot_id)


@router.get("/simulation/load", response_model=LoadResponse)
def load(
    coordinator: Coordinator = Depends(get_coordinator),
) -> LoadResponse:
    """Restore the newest snapshot. The simulation is left stopped."""
    try:
        loaded = coordinator.load_snapshot()
    except SnapshotNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return LoadResponse(
        state=serialize_snapshot(loaded.snapshot),
        config=SimulationConfigSchema.from_config(loaded.config),
        time_step=loaded.time_step,
        created_at=loaded.created_at,
    )
