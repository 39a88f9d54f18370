"""Immutable snapshot of the world state handed to readers."""

from __future__ import annotations

from dataclasses import dataclass

from birdsim.core.models import Agent, Obstacle, Predator, Resource, Zone
from birdsim.core.world_state import WorldState


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Read-only view of the world, safe to share across threads.

    Mutable entities are copied so later ticks never leak into a snapshot
    that has already been handed out.
    """

    tick: int
    seed: int
    running: bool
    world_size: int
    collision_count: int
    agents: tuple[Agent, ...]
    obstacles: tuple[Obstacle, ...]
    resources: tuple[Resource, ...]
    predators: tuple[Predator, ...]
    zones: tuple[Zone, ...]

    @classmethod
    def from_world(cls, world: WorldState) -> Snapshot:
        return cls(
            tick=world.tick,
            seed=world.seed,
            running=world.running,
            world_size=world.world_size,
            collision_count=world.collision_count,
            agents=tuple(a.copy() for a in world.agents),
            obstacles=tuple(world.obstacles),
            resources=tuple(r.copy() for r in world.resources),
            predators=tuple(p.copy() for p in world.predators),
            zones=tuple(world.zones),
        )
