"""BehaviorEngine — the per-tick agent and predator state machine.

Phase order (each tick):
  1. Environmental override — nearest zone forces a state
  2. Group steering — migrating agents fly toward their group's centroid
  3. Obstacle evasion — velocity override near an obstacle
  4. Migrating checks — periodic rest / food claims
  5. Resting check — periodic wake-up
  6. Searching check — steer to food, eat on arrival
  7. Global depletion — move the shared food site to the best zone
  8. Probabilistic transitions
  9. Predator step — predators move, nearby agents flee to a flock
The collision pass runs afterwards in :mod:`birdsim.engine.collisions`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from birdsim.core.enums import AgentState, Domain, ResourceType, RuleSet
from birdsim.core.models import Agent, Resource, Vector2, centroid
from birdsim.systems.generator import best_food_zone, food_site

if TYPE_CHECKING:
    from birdsim.config import BehaviorRules
    from birdsim.core.world_state import WorldState
    from birdsim.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

_MIGRATING = AgentState.MIGRATING
_SEARCHING = AgentState.SEARCHING_FOOD
_RESTING = AgentState.RESTING

ORIGIN = Vector2(0.0, 0.0)


class BehaviorEngine:
    """Advances every agent and predator by one tick.

    Mutates the WorldState in place; must only be called from the thread
    that owns the world. Does not touch the tick counter.
    """

    __slots__ = ("_rules", "_rng")

    def __init__(self, rules: BehaviorRules, rng: DeterministicRNG) -> None:
        self._rules = rules
        self._rng = rng

    def step(self, world: WorldState, time_step: int = 1) -> None:
        zoned = self._rules.rule_set is RuleSet.ZONED

        if zoned:
            self.apply_environment(world)
        self.steer_groups(world, time_step, use_groups=zoned)
        self.evade_obstacles(world)
        self.check_migrating(world)
        self.check_resting(world)
        self.check_searching(world, time_step)
        self.handle_food_depletion(world)
        self.random_transitions(world)
        if zoned:
            self.move_predators(world, time_step)

    # -- movement --

    @staticmethod
    def _fly_towards(world: WorldState, agent: Agent, target: Vector2, time_step: int) -> None:
        agent.velocity = (target - agent.position).normalized()
        agent.position = world.clamp(agent.position + agent.velocity * time_step)

    def _random_point(self, world: WorldState, domain: Domain, entity_id: int) -> Vector2:
        return self._rng.next_point(domain, entity_id, world.tick, float(world.world_size))

    # -- phase 1 --

    def apply_environment(self, world: WorldState) -> None:
        """Nearest zone forces a state; the first matching rule wins."""
        rules = self._rules
        for agent in world.agents:
            zone = world.nearest_zone(agent.position)
            if zone is None:
                return
            if zone.temperature < rules.cold_temperature:
                agent.state = _MIGRATING
            elif zone.food_availability < rules.scarce_food:
                agent.state = _SEARCHING
            elif zone.predator_presence > rules.dangerous_predators:
                agent.state = _RESTING

    # -- phase 2 --

    def group_targets(self, world: WorldState) -> dict[int, Vector2]:
        """Centroid of each group's migrating members, or a random fallback point."""
        targets: dict[int, Vector2] = {}
        for gid, members in world.groups().items():
            migrating = [a.position for a in members if a.state is _MIGRATING]
            if migrating:
                targets[gid] = centroid(migrating)
            else:
                targets[gid] = self._random_point(world, Domain.GROUP_TARGET, gid)
        return targets

    def steer_groups(self, world: WorldState, time_step: int, use_groups: bool = True) -> None:
        if not use_groups:
            for agent in world.agents:
                if agent.state is _MIGRATING:
                    self._fly_towards(world, agent, agent.target, time_step)
            return

        # Targets are computed from positions before anyone moves
        targets = self.group_targets(world)
        for agent in world.agents:
            if agent.state is _MIGRATING:
                self._fly_towards(world, agent, targets[agent.group], time_step)

    # -- phase 3 --

    def evade_obstacles(self, world: WorldState) -> None:
        rules = self._rules
        for agent in world.agents:
            if agent.state is _RESTING:
                continue
            for obstacle in world.obstacles:
                if agent.position.distance_to(obstacle.position) < obstacle.radius + rules.obstacle_margin:
                    away = (agent.position - obstacle.position).normalized()
                    agent.velocity = away * rules.obstacle_evade_speed
                    break

    # -- phase 4 --

    def check_migrating(self, world: WorldState) -> None:
        """Periodic rest and food claims for migrating agents."""
        rules = self._rules
        rest_due = world.tick % rules.rest_check_interval == 0
        food_due = world.tick % rules.food_check_interval == 0
        if not (rest_due or food_due):
            return

        for agent in world.agents:
            if agent.state is not _MIGRATING:
                continue

            if rest_due and not agent.on_cooldown:
                spot = world.nearest_resource(agent.position, ResourceType.REST)
                if spot is not None and agent.position.distance_to(spot.position) < rules.resource_claim_radius:
                    agent.state = _RESTING
                    spot.increment()
                    continue

            if food_due:
                food = world.nearest_resource(agent.position, ResourceType.FOOD, _has_space)
                if food is not None and agent.position.distance_to(food.position) < rules.resource_claim_radius:
                    agent.state = _SEARCHING
                    agent.target = food.position
                    food.increment()

    # -- phase 5 --

    def check_resting(self, world: WorldState) -> None:
        """Every ``separation_delay`` ticks all resting agents take off again."""
        rules = self._rules
        if world.tick % rules.separation_delay != 0:
            return
        for agent in world.agents:
            if agent.state is not _RESTING:
                continue
            agent.state = _MIGRATING
            spot = world.nearest_resource(agent.position, ResourceType.REST)
            if spot is not None:
                spot.decrement()
            agent.target = self._rng.next_in_disc(
                Domain.REST_TARGET, agent.id, world.tick, agent.position, rules.rest_wander_radius,
            )

    # -- phase 6 --

    def check_searching(self, world: WorldState, time_step: int) -> None:
        rules = self._rules
        size = float(world.world_size)
        for agent in world.agents:
            if agent.state is not _SEARCHING:
                continue

            food = world.nearest_resource(agent.position, ResourceType.FOOD, _has_food)
            if food is None:
                # Nothing to eat anywhere: wander somewhere else
                agent.target = self._random_point(world, Domain.WANDER, agent.id)
                continue

            agent.target = food.position
            self._fly_towards(world, agent, food.position, time_step)
            if agent.position.distance_to(food.position) >= rules.arrival_radius:
                continue

            food.decrement()
            if food.depleted:
                food.position = self._rng.next_point(Domain.RELOCATE, agent.id, world.tick, size)
                food.refill()
                logger.debug("Tick %d: food #%d depleted, moved to %s", world.tick, food.id, food.position)
            agent.state = _MIGRATING
            agent.target = self._random_point(world, Domain.WANDER, agent.id)

    # -- phase 7 --

    def handle_food_depletion(self, world: WorldState) -> None:
        """Move the shared food site to the best zone once it runs dry."""
        shared = world.shared_food
        if world.resources and (shared is None or not shared.depleted):
            return

        rules = self._rules
        site = food_site(
            self._rng, best_food_zone(world.zones, rules), float(world.world_size), world.tick,
        )
        if shared is None:
            shared = Resource(
                id=0, position=site, type=ResourceType.FOOD,
                capacity=rules.resource_capacity, current=0,
            )
            world.resources.insert(0, shared)
        shared.position = site
        shared.refill()

        for agent in world.agents:
            agent.state = _MIGRATING
            agent.target = site
        logger.info("Tick %d: shared food site moved to %s", world.tick, site)

    # -- phase 8 --

    def random_transitions(self, world: WorldState) -> None:
        rules = self._rules
        rng = self._rng
        tick = world.tick
        limit = len(world.resources) // rules.searching_limit_divisor
        searching = sum(1 for a in world.agents if a.state is _SEARCHING)
        shared = world.shared_food

        for agent in world.agents:
            roll = rng.next_float(Domain.TRANSITION, agent.id, tick)
            if agent.state is _MIGRATING:
                if roll < rules.start_searching_chance and searching < limit:
                    agent.state = _SEARCHING
                    if shared is not None:
                        agent.target = shared.position
                    searching += 1
            elif agent.state is _SEARCHING:
                if agent.position.distance_to(agent.target) >= rules.arrival_radius:
                    continue
                searching -= 1
                if roll < rules.resume_migrating_after_eating_chance:
                    agent.state = _MIGRATING
                    agent.target = self._random_point(world, Domain.TRANSITION_TARGET, agent.id)
                else:
                    agent.state = _RESTING
            elif agent.state is _RESTING and roll < rules.stop_resting_chance:
                agent.state = _MIGRATING
                agent.target = self._random_point(world, Domain.TRANSITION_TARGET, agent.id)

    # -- phase 9 --

    def move_predators(self, world: WorldState, time_step: int) -> None:
        for predator in world.predators:
            predator.position = world.clamp(predator.position + predator.velocity * time_step)
        if not world.predators:
            return

        radius = self._rules.predator_alarm_radius
        flocks = {
            gid: centroid([a.position for a in members])
            for gid, members in world.groups().items()
            if len(members) > 1
        }
        for agent in world.agents:
            if any(agent.position.distance_to(p.position) < radius for p in world.predators):
                agent.state = _MIGRATING
                agent.target = escape_target(agent, flocks)


def escape_target(agent: Agent, flocks: dict[int, Vector2]) -> Vector2:
    """Centroid of the nearest flock with more than one member.

    The agent's own flock is ignored when it is the only one; with no flock
    left the agent heads for the origin.
    """
    if set(flocks) == {agent.group}:
        return ORIGIN
    best = ORIGIN
    best_dist = float("inf")
    for center in flocks.values():
        dist = agent.position.distance_to(center)
        if dist < best_dist:
            best_dist = dist
            best = center
    return best


def _has_space(resource: Resource) -> bool:
    return resource.has_space


def _has_food(resource: Resource) -> bool:
    return resource.current > 0
