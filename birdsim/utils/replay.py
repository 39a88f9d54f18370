"""Run recording — per-tick agent summaries written to JSON for offline replay."""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING, Any

from birdsim.core.serialization import world_to_dict

if TYPE_CHECKING:
    from birdsim.core.world_state import WorldState

logger = logging.getLogger(__name__)


class RunRecorder:
    """Accumulates tick records and flushes them, plus the final world, to a JSON file.

    Only every *every*-th tick is kept so long headless runs stay small.
    """

    __slots__ = ("_path", "_seed", "_every", "_ticks", "_final")

    def __init__(self, path: str | Path, seed: int, every: int = 1) -> None:
        self._path = Path(path)
        self._seed = seed
        self._every = max(1, every)
        self._ticks: list[dict[str, Any]] = []
        self._final: dict[str, Any] | None = None

    def record_tick(self, world: WorldState) -> None:
        if world.tick % self._every:
            return
        states = Counter(a.state.value for a in world.agents)
        self._ticks.append(
            {
                "tick": world.tick,
                "collision_count": world.collision_count,
                "states": dict(sorted(states.items())),
                "agents": [
                    {
                        "id": a.id,
                        "pos": a.position.as_list(),
                        "state": a.state.value,
                        "group": a.group,
                    }
                    for a in world.agents
                ],
            }
        )

    def finish(self, world: WorldState) -> None:
        self._final = world_to_dict(world)

    def flush(self) -> None:
        """Write accumulated data to disk."""
        replay = {
            "version": "1.0",
            "seed": self._seed,
            "total_ticks": len(self._ticks),
            "ticks": self._ticks,
            "final": self._final,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(replay, indent=2), encoding="utf-8")
        logger.info("Replay saved to %s (%d ticks)", self._path, len(self._ticks))
