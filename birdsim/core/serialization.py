"""Plain-dict codec for world state, config and environmental factors.

The dicts are JSON-safe and are what the snapshot store persists.
"""

from __future__ import annotations

from typing import Any

from birdsim.config import SimulationConfig
from birdsim.core.enums import AgentState, ResourceType
from birdsim.core.models import Agent, Obstacle, Predator, Resource, Vector2, Zone
from birdsim.core.snapshot import Snapshot
from birdsim.core.world_state import WorldState


def _vec(raw: Any) -> Vector2:
    x, y = raw
    return Vector2(float(x), float(y))


def zone_to_dict(zone: Zone) -> dict[str, Any]:
    return {
        "id": zone.id,
        "position": zone.position.as_list(),
        "temperature": zone.temperature,
        "food_availability": zone.food_availability,
        "predator_presence": zone.predator_presence,
    }


def zone_from_dict(raw: dict[str, Any]) -> Zone:
    return Zone(
        id=int(raw["id"]),
        position=_vec(raw["position"]),
        temperature=float(raw["temperature"]),
        food_availability=float(raw["food_availability"]),
        predator_presence=float(raw["predator_presence"]),
    )


def world_to_dict(world: WorldState | Snapshot) -> dict[str, Any]:
    """Serialize a live world or a snapshot of one."""
    return {
        "tick": world.tick,
        "seed": world.seed,
        "running": world.running,
        "world_size": world.world_size,
        "collision_count": world.collision_count,
        "agents": [
            {
                "id": a.id,
                "position": a.position.as_list(),
                "velocity": a.velocity.as_list(),
                "state": a.state.value,
                "target": a.target.as_list(),
                "group": a.group,
                "collision_tick": a.collision_tick,
            }
            for a in world.agents
        ],
        "obstacles": [
            {"id": o.id, "position": o.position.as_list(), "radius": o.radius}
            for o in world.obstacles
        ],
        "resources": [
            {
                "id": r.id,
                "position": r.position.as_list(),
                "type": r.type.value,
                "capacity": r.capacity,
                "current": r.current,
            }
            for r in world.resources
        ],
        "predators": [
            {"id": p.id, "position": p.position.as_list(), "velocity": p.velocity.as_list()}
            for p in world.predators
        ],
        "zones": [zone_to_dict(z) for z in world.zones],
    }


def world_from_dict(raw: dict[str, Any]) -> WorldState:
    """Rebuild a WorldState. Raises KeyError/ValueError/TypeError on malformed input."""
    world = WorldState(seed=int(raw["seed"]), world_size=int(raw["world_size"]))
    world.tick = int(raw["tick"])
    world.running = bool(raw["running"])
    world.collision_count = int(raw["collision_count"])
    world.agents = [
        Agent(
            id=int(a["id"]),
            position=_vec(a["position"]),
            velocity=_vec(a["velocity"]),
            state=AgentState(a["state"]),
            target=_vec(a["target"]),
            group=int(a["group"]),
            collision_tick=int(a["collision_tick"]),
        )
        for a in raw["agents"]
    ]
    world.obstacles = [
        Obstacle(id=int(o["id"]), position=_vec(o["position"]), radius=float(o["radius"]))
        for o in raw["obstacles"]
    ]
    world.resources = [
        Resource(
            id=int(r["id"]),
            position=_vec(r["position"]),
            type=ResourceType(r["type"]),
            capacity=int(r["capacity"]),
            current=int(r["current"]),
        )
        for r in raw["resources"]
    ]
    world.predators = [
        Predator(id=int(p["id"]), position=_vec(p["position"]), velocity=_vec(p["velocity"]))
        for p in raw["predators"]
    ]
    world.zones = [zone_from_dict(z) for z in raw["zones"]]
    return world


def config_to_dict(config: SimulationConfig) -> dict[str, Any]:
    return {
        "speed": config.speed,
        "world_size": config.world_size,
        "initial_agents": config.initial_agents,
        "obstacle_count": config.obstacle_count,
        "resource_count": config.resource_count,
    }


def config_from_dict(raw: dict[str, Any]) -> SimulationConfig:
    return SimulationConfig(
        speed=int(raw["speed"]),
        world_size=int(raw["world_size"]),
        initial_agents=int(raw["initial_agents"]),
        obstacle_count=int(raw["obstacle_count"]),
        resource_count=int(raw["resource_count"]),
    )
