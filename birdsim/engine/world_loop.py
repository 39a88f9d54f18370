"""WorldLoop — one authoritative tick of the simulation.

Tick cycle:
  1. Behaviour — the BehaviorEngine phases (environment → predators)
  2. Advancement — the tick counter moves forward
  3. Collisions — pairwise detection and response
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from birdsim.core.snapshot import Snapshot
from birdsim.engine.behavior import BehaviorEngine
from birdsim.engine.collisions import CollisionResolver
from birdsim.systems.rng import DeterministicRNG

if TYPE_CHECKING:
    from birdsim.config import BehaviorRules
    from birdsim.core.world_state import WorldState
    from birdsim.utils.replay import RunRecorder

logger = logging.getLogger(__name__)

_PROGRESS_EVERY = 500


class WorldLoop:
    """Single-threaded mutation of one WorldState.

    The RNG is keyed on the world's own seed, so a world restored from a
    snapshot keeps producing the same sequence it would have produced.
    """

    __slots__ = ("_world", "_rules", "_behavior", "_collisions")

    def __init__(self, world: WorldState, rules: BehaviorRules) -> None:
        self._world = world
        self._rules = rules
        self._behavior = BehaviorEngine(rules, DeterministicRNG(world.seed))
        self._collisions = CollisionResolver(rules.collision_threshold)

    @property
    def world(self) -> WorldState:
        return self._world

    def tick_once(self, time_step: int = 1) -> int:
        """Execute a single tick. Returns the number of new collisions."""
        world = self._world
        t0 = time.perf_counter()

        self._behavior.step(world, time_step)
        world.tick += 1
        detected = self._collisions.resolve(world)

        if world.tick % _PROGRESS_EVERY == 0:
            logger.debug(
                "Tick %d: %.4fs, collisions=%d",
                world.tick, time.perf_counter() - t0, world.collision_count,
            )
        return detected

    def run(self, ticks: int, time_step: int = 1, recorder: RunRecorder | None = None) -> None:
        """Execute *ticks* ticks back to back, optionally recording each one."""
        logger.info("=== Running %d ticks from tick %d (seed=%d) ===", ticks, self._world.tick, self._world.seed)
        for _ in range(ticks):
            self.tick_once(time_step)
            if recorder is not None:
                recorder.record_tick(self._world)
        if recorder is not None:
            recorder.finish(self._world)
            recorder.flush()
        logger.info("=== Finished at tick %d (collisions=%d) ===", self._world.tick, self._world.collision_count)

    def create_snapshot(self) -> Snapshot:
        """Create an immutable snapshot of the current world state."""
        return Snapshot.from_world(self._world)
