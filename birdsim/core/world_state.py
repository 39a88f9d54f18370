"""Mutable authoritative world state — only mutated on the coordinator thread."""

from __future__ import annotations

from collections import defaultdict
from typing import Callable

from birdsim.core.enums import ResourceType
from birdsim.core.models import Agent, Obstacle, Predator, Resource, Vector2, Zone


class WorldState:
    """The single source of truth for the simulation."""

    __slots__ = (
        "tick",
        "seed",
        "world_size",
        "running",
        "agents",
        "obstacles",
        "resources",
        "predators",
        "zones",
        "collision_count",
    )

    def __init__(self, seed: int, world_size: int) -> None:
        self.tick: int = 0
        self.seed: int = seed
        self.world_size: int = world_size
        self.running: bool = False
        self.agents: list[Agent] = []
        self.obstacles: list[Obstacle] = []
        self.resources: list[Resource] = []
        self.predators: list[Predator] = []
        self.zones: list[Zone] = []
        self.collision_count: int = 0

    # -- invariants --

    def clamp(self, pos: Vector2) -> Vector2:
        """Clamp *pos* into [0, world_size]²."""
        return pos.clamped(0.0, float(self.world_size))

    def in_bounds(self, pos: Vector2) -> bool:
        return 0.0 <= pos.x <= self.world_size and 0.0 <= pos.y <= self.world_size

    def record_collision(self) -> None:
        self.collision_count += 1

    # -- queries --

    @property
    def shared_food(self) -> Resource | None:
        """The designated shared food resource (always index 0)."""
        if self.resources and self.resources[0].type is ResourceType.FOOD:
            return self.resources[0]
        return None

    def nearest_resource(
        self,
        pos: Vector2,
        kind: ResourceType,
        predicate: Callable[[Resource], bool] | None = None,
    ) -> Resource | None:
        """Closest resource of *kind* (earliest wins on ties)."""
        best: Resource | None = None
        best_dist = float("inf")
        for res in self.resources:
            if res.type is not kind:
                continue
            if predicate is not None and not predicate(res):
                continue
            dist = pos.distance_to(res.position)
            if dist < best_dist:
                best_dist = dist
                best = res
        return best

    def nearest_zone(self, pos: Vector2) -> Zone | None:
        best: Zone | None = None
        best_dist = float("inf")
        for zone in self.zones:
            dist = pos.distance_to(zone.position)
            if dist < best_dist:
                best_dist = dist
                best = zone
        return best

    def groups(self) -> dict[int, list[Agent]]:
        """Agents partitioned by group id, in ascending group order."""
        buckets: dict[int, list[Agent]] = defaultdict(list)
        for agent in self.agents:
            buckets[agent.group].append(agent)
        return {gid: buckets[gid] for gid in sorted(buckets)}
