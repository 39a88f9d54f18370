"""World generator — builds a fresh, seeded WorldState from config."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from birdsim.core.enums import AgentState, Domain, ResourceType, RuleSet
from birdsim.core.models import Agent, Obstacle, Predator, Resource, Vector2, Zone
from birdsim.core.world_state import WorldState
from birdsim.systems.rng import DeterministicRNG

if TYPE_CHECKING:
    from birdsim.config import BehaviorRules, EnvironmentalFactors, SimulationConfig

logger = logging.getLogger(__name__)

# Zone layout as fractions of the world size:
# (x, y, temperature, food_availability, predator_presence)
_ZONE_LAYOUT: tuple[tuple[float, float, float, float, float], ...] = (
    (0.25, 0.25, 15.0, 1.0, 0.1),
    (0.75, 0.25, 25.0, 0.8, 0.2),
    (0.25, 0.75, 10.0, 0.5, 0.3),
    (0.75, 0.75, 20.0, 0.9, 0.1),
)

# Field indices fed to the RNG as the "tick" of a spawn draw
_POS, _TARGET, _VELOCITY, _GROUP, _RADIUS = range(5)


def default_zones(world_size: float) -> list[Zone]:
    return [
        Zone(
            id=i,
            position=Vector2(fx * world_size, fy * world_size),
            temperature=temp,
            food_availability=food,
            predator_presence=pred,
        )
        for i, (fx, fy, temp, food, pred) in enumerate(_ZONE_LAYOUT)
    ]


def best_food_zone(zones: list[Zone], rules: BehaviorRules) -> Zone | None:
    """First zone with a mild temperature that maximizes food availability.

    Falls back to the first zone when none is mild, None when there are no zones.
    """
    best: Zone | None = None
    for zone in zones:
        if not rules.food_zone_min_temperature < zone.temperature < rules.food_zone_max_temperature:
            continue
        if best is None or zone.food_availability > best.food_availability:
            best = zone
    if best is None and zones:
        return zones[0]
    return best


def food_site(
    rng: DeterministicRNG, zone: Zone | None, world_size: float, tick: int, salt: int = 0,
) -> Vector2:
    """Uniform point inside the world quadrant that contains *zone*.

    Without a zone the whole world is eligible.
    """
    if zone is None:
        return rng.next_point(Domain.FOOD_SITE, salt, tick, world_size)
    half = world_size / 2
    origin = Vector2(
        0.0 if zone.position.x < half else half,
        0.0 if zone.position.y < half else half,
    )
    return rng.next_point(Domain.FOOD_SITE, salt, tick, half, origin=origin)


class WorldGenerator:
    """Regenerates the whole world from config, environment and a seed."""

    __slots__ = ("_rules",)

    def __init__(self, rules: BehaviorRules) -> None:
        self._rules = rules

    def generate(self, seed: int, config: SimulationConfig, factors: EnvironmentalFactors) -> WorldState:
        rng = DeterministicRNG(seed)
        world = WorldState(seed=seed, world_size=config.world_size)
        size = float(config.world_size)
        zoned = self._rules.rule_set is RuleSet.ZONED

        world.zones = default_zones(size) if zoned else []
        world.obstacles = self._obstacles(rng, config.obstacle_count, size)
        world.resources = self._resources(rng, config, world.zones, size)
        world.agents = self._agents(rng, config.initial_agents, size)
        world.predators = self._predators(rng, factors.predator_count, size) if zoned else []

        logger.info(
            "Generated world (seed=%d, size=%d): %d agents, %d obstacles, %d resources, %d predators",
            seed, config.world_size, len(world.agents), len(world.obstacles),
            len(world.resources), len(world.predators),
        )
        return world

    # -- internals --

    def _obstacles(self, rng: DeterministicRNG, count: int, size: float) -> list[Obstacle]:
        rules = self._rules
        return [
            Obstacle(
                id=i,
                position=rng.next_point(Domain.OBSTACLE, i, _POS, size),
                radius=rng.next_range(
                    Domain.OBSTACLE, i, _RADIUS,
                    rules.obstacle_min_radius, rules.obstacle_min_radius + rules.obstacle_radius_spread,
                ),
            )
            for i in range(count)
        ]

    def _resources(
        self, rng: DeterministicRNG, config: SimulationConfig, zones: list[Zone], size: float,
    ) -> list[Resource]:
        """Resource 0 is the shared food site; the rest alternate rest/food."""
        capacity = self._rules.resource_capacity
        count = max(config.resource_count, config.initial_agents // 3, 1)
        shared = Resource(
            id=0,
            position=food_site(rng, best_food_zone(zones, self._rules), size, tick=0),
            type=ResourceType.FOOD,
            capacity=capacity,
            current=capacity,
        )
        resources = [shared]
        for i in range(1, count):
            kind = ResourceType.REST if i % 2 == 0 else ResourceType.FOOD
            resources.append(Resource(
                id=i,
                position=rng.next_point(Domain.RESOURCE, i, _POS, size),
                type=kind,
                capacity=capacity,
                current=capacity if kind is ResourceType.FOOD else 0,
            ))
        return resources

    def _agents(self, rng: DeterministicRNG, count: int, size: float) -> list[Agent]:
        num_groups = max(1, count // self._rules.agents_per_group)
        agents: list[Agent] = []
        for i in range(count):
            state = AgentState.SEARCHING_FOOD if i < count // 3 else AgentState.MIGRATING
            agents.append(Agent(
                id=i,
                position=rng.next_point(Domain.SPAWN, i, _POS, size),
                velocity=Vector2(
                    rng.next_range(Domain.SPAWN, i, _VELOCITY, -0.5, 0.5, salt=1),
                    rng.next_range(Domain.SPAWN, i, _VELOCITY, -1.0, 1.0, salt=2),
                ),
                state=state,
                target=rng.next_point(Domain.SPAWN, i, _TARGET, size),
                group=rng.next_int(Domain.SPAWN, i, _GROUP, 0, num_groups - 1),
            ))
        return agents

    @staticmethod
    def _predators(rng: DeterministicRNG, count: int, size: float) -> list[Predator]:
        return [
            Predator(
                id=i,
                position=rng.next_point(Domain.PREDATOR, i, _POS, size),
                velocity=Vector2(
                    rng.next_range(Domain.PREDATOR, i, _VELOCITY, -0.5, 0.5, salt=1),
                    rng.next_range(Domain.PREDATOR, i, _VELOCITY, -0.5, 0.5, salt=2),
                ),
            )
            for i in range(count)
        ]
