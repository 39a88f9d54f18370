"""GET /simulation — the live world state (polled by the dashboard)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from birdsim.api.dependencies import get_coordinator
from birdsim.api.schemas import (
    AgentSchema,
    ObstacleSchema,
    PredatorSchema,
    ResourceSchema,
    WorldStateResponse,
    ZoneSchema,
)
from birdsim.core.snapshot import Snapshot
from birdsim.engine.coordinator import Coordinator

router = APIRouter()


def serialize_snapshot(snap: Snapshot) -> WorldStateResponse:
    return WorldStateResponse(
        agents=[
            AgentSchema(
                id=a.id, position=a.position.as_list(), velocity=a.velocity.as_list(),
                state=a.state.value, target=a.target.as_list(), group=a.group,
                collision_tick=a.collision_tick,
            )
            for a in snap.agents
        ],
        tick=snap.tick,
        running=snap.running,
        world_size=snap.world_size,
        obstacles=[
            ObstacleSchema(id=o.id, position=o.position.as_list(), radius=o.radius)
            for o in snap.obstacles
        ],
        resources=[
            ResourceSchema(
                id=r.id, position=r.position.as_list(), type=r.type.value,
                capacity=r.capacity, current=r.current,
            )
            for r in snap.resources
        ],
        collision_count=snap.collision_count,
        predators=[
            PredatorSchema(id=p.id, position=p.position.as_list(), velocity=p.velocity.as_list())
            for p in snap.predators
        ],
        zones=[ZoneSchema.from_zone(z) for z in snap.zones],
        seed=snap.seed,
    )


@router.get("/simulation", response_model=WorldStateResponse)
def get_state(
    coordinator: Coordinator = Depends(get_coordinator),
) -> WorldStateResponse:
    return serialize_snapshot(coordinator.get_state())
