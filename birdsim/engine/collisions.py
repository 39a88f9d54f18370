"""Collision detection and response between agents."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from birdsim.core.models import Agent
    from birdsim.core.world_state import WorldState

logger = logging.getLogger(__name__)


class CollisionResolver:
    """Pairwise O(n²) collision pass, run once per tick after all movement.

    Policies:
    - A pair closer than the threshold collides only if neither agent is on
      cooldown; it counts once and both agents are pushed one threshold
      apart along the line between them.
    - Both agents are then stamped with the current tick as their cooldown.
    - A cooldown from an earlier tick is cleared once the agent has no other
      agent within the threshold.

    Must run after the tick counter has advanced so the stamp is never 0.
    """

    __slots__ = ("_threshold",)

    def __init__(self, threshold: float) -> None:
        self._threshold = threshold

    def resolve(self, world: WorldState) -> int:
        """Run the pass. Returns the number of newly detected collisions."""
        agents = world.agents
        tick = world.tick
        detected = 0

        for i, first in enumerate(agents):
            for second in agents[i + 1:]:
                if first.position.distance_to(second.position) >= self._threshold:
                    continue
                if first.on_cooldown or second.on_cooldown:
                    continue
                world.record_collision()
                detected += 1
                self._push_apart(world, first, second)
                first.collision_tick = tick
                second.collision_tick = tick

        for agent in agents:
            if agent.on_cooldown and agent.collision_tick != tick and not self._crowded(agent, agents):
                agent.collision_tick = 0

        if detected:
            logger.debug("Tick %d: %d new collisions (total %d)", tick, detected, world.collision_count)
        return detected

    def _push_apart(self, world: WorldState, first: Agent, second: Agent) -> None:
        direction = (first.position - second.position).normalized()
        first.position = world.clamp(first.position + direction * self._threshold)
        second.position = world.clamp(second.position - direction * self._threshold)

    def _crowded(self, agent: Agent, agents: list[Agent]) -> bool:
        return any(
            other is not agent and agent.position.distance_to(other.position) < self._threshold
            for other in agents
        )
