"""Coordinator — the single owner of the world, running on its own thread.

Every read and write of the world, the config, the environmental factors
and the time-step goes through the mailbox and is serviced by one thread,
interleaved with the tick timer. Nothing else ever touches them, so no
locks guard the world (Single-Writer).
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from birdsim.config import BehaviorRules, EnvironmentalFactors, SimulationConfig
from birdsim.core.serialization import config_from_dict, config_to_dict, world_from_dict, world_to_dict
from birdsim.core.snapshot import Snapshot
from birdsim.engine.mailbox import Mailbox, Operation, Request
from birdsim.engine.world_loop import WorldLoop
from birdsim.storage.snapshot_store import PersistenceError
from birdsim.systems.generator import WorldGenerator

if TYPE_CHECKING:
    from birdsim.core.models import Zone
    from birdsim.storage.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoadedSimulation:
    """What a snapshot load restored."""

    snapshot: Snapshot
    config: SimulationConfig
    time_step: int
    created_at: str


class CoordinatorStoppedError(RuntimeError):
    """The coordinator thread is not running, so the request cannot be served."""


class Coordinator:
    """Owns the WorldState and serializes all access to it.

    Public methods are safe to call from any thread; each posts one request
    and blocks until the coordinator thread replies. Errors raised while
    servicing a request are re-raised in the caller; the thread keeps going.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        factors: EnvironmentalFactors | None = None,
        rules: BehaviorRules | None = None,
        store: SnapshotStore | None = None,
        seed: int = 42,
        time_step: int = 1,
        autostart: bool = True,
    ) -> None:
        # Owned by the coordinator thread once launched
        self._config = config or SimulationConfig()
        self._factors = factors or EnvironmentalFactors()
        self._rules = rules or BehaviorRules()
        self._time_step = time_step
        self._store = store
        self._seed = seed
        self._generation = 0
        self._generator = WorldGenerator(self._rules)
        self._loop = self._build(running=autostart)

        self._mailbox = Mailbox()
        self._thread: threading.Thread | None = None
        self._deadline = 0.0
        # Guards posting against the mailbox being closed at shutdown
        self._post_lock = threading.Lock()
        self._closed = False
        self._handlers: dict[Operation, Callable[[Any], Any]] = {
            Operation.START: self._on_start,
            Operation.STOP: self._on_stop,
            Operation.RESTART: self._on_restart,
            Operation.ADVANCE: self._on_advance,
            Operation.GET_STATE: self._on_get_state,
            Operation.GET_CONFIG: self._on_get_config,
            Operation.SET_CONFIG: self._on_set_config,
            Operation.GET_TIME_STEP: self._on_get_time_step,
            Operation.SET_TIME_STEP: self._on_set_time_step,
            Operation.GET_ENVIRONMENT: self._on_get_environment,
            Operation.SET_ENVIRONMENT: self._on_set_environment,
            Operation.GET_ZONES: self._on_get_zones,
            Operation.SET_ZONES: self._on_set_zones,
            Operation.SAVE_SNAPSHOT: self._on_save,
            Operation.LOAD_SNAPSHOT: self._on_load,
        }

    # -- thread lifecycle --

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def launch(self) -> None:
        """Start the coordinator thread (idempotent)."""
        if self.alive:
            return
        self._closed = False
        self._thread = threading.Thread(target=self._run, name="sim-coordinator", daemon=True)
        self._thread.start()
        logger.info("Coordinator launched (tick interval=%.3fs)", self._config.tick_interval)

    def shutdown(self, timeout: float = 5.0) -> None:
        """Stop the coordinator thread after it drains earlier requests."""
        if not self.alive:
            return
        try:
            self._call(Operation.SHUTDOWN)
        except CoordinatorStoppedError:
            # Another caller already shut the thread down
            pass
        assert self._thread is not None
        self._thread.join(timeout=timeout)
        logger.info("Coordinator stopped.")

    # -- public operations (blocking) --

    def start(self) -> bool:
        return self._call(Operation.START)

    def stop(self) -> bool:
        return self._call(Operation.STOP)

    def restart(self) -> bool:
        return self._call(Operation.RESTART)

    def advance(self, ticks: int = 1) -> Snapshot:
        """Run *ticks* ticks right now, running or not."""
        return self._call(Operation.ADVANCE, ticks)

    def get_state(self) -> Snapshot:
        return self._call(Operation.GET_STATE)

    def get_config(self) -> SimulationConfig:
        return self._call(Operation.GET_CONFIG)

    def set_config(self, config: SimulationConfig) -> SimulationConfig:
        """Replace the config and regenerate the world in one step."""
        return self._call(Operation.SET_CONFIG, config)

    def get_time_step(self) -> int:
        return self._call(Operation.GET_TIME_STEP)

    def set_time_step(self, time_step: int) -> int:
        return self._call(Operation.SET_TIME_STEP, time_step)

    def get_environmental_factors(self) -> EnvironmentalFactors:
        return self._call(Operation.GET_ENVIRONMENT)

    def set_environmental_factors(self, factors: EnvironmentalFactors) -> EnvironmentalFactors:
        """Replace the factors and regenerate the world in one step."""
        return self._call(Operation.SET_ENVIRONMENT, factors)

    def get_zones(self) -> tuple[Zone, ...]:
        return self._call(Operation.GET_ZONES)

    def set_zones(self, zones: list[Zone]) -> tuple[Zone, ...]:
        return self._call(Operation.SET_ZONES, list(zones))

    def save_snapshot(self) -> int:
        """Persist the current world. Returns the snapshot id."""
        return self._call(Operation.SAVE_SNAPSHOT)

    def load_snapshot(self) -> LoadedSimulation:
        """Restore the newest snapshot; the simulation is left stopped."""
        return self._call(Operation.LOAD_SNAPSHOT)

    def _call(self, op: Operation, payload: Any = None) -> Any:
        if not self.alive:
            raise CoordinatorStoppedError(f"Coordinator is not running; cannot {op.value}.")
        request = Request(op, payload)
        with self._post_lock:
            if self._closed:
                raise CoordinatorStoppedError(f"Coordinator is shutting down; cannot {op.value}.")
            self._mailbox.post(request)
        return request.reply.result()

    # -- coordinator thread --

    def _run(self) -> None:
        logger.info("Coordinator thread started.")
        self._reset_deadline()

        while True:
            request = self._mailbox.take(timeout=max(0.0, self._deadline - time.monotonic()))

            if request is None:
                self._on_timer()
                now = time.monotonic()
                self._deadline += self._config.tick_interval
                if self._deadline < now:
                    # Fell behind: drop missed ticks instead of bursting
                    self._deadline = now + self._config.tick_interval
                continue

            if not request.reply.set_running_or_notify_cancel():
                continue
            if request.op is Operation.SHUTDOWN:
                request.reply.set_result(True)
                break
            self._dispatch(request)

        with self._post_lock:
            self._closed = True
        rejected = self._mailbox.fail_pending(CoordinatorStoppedError("Coordinator shut down."))
        if rejected:
            logger.warning("Rejected %d requests queued after shutdown.", rejected)
        logger.info("Coordinator thread exited.")

    def _dispatch(self, request: Request) -> None:
        handler = self._handlers[request.op]
        try:
            result = handler(request.payload)
        except Exception as exc:  # re-raised in the caller's thread
            logger.debug("Request %s failed: %s", request.op.value, exc)
            request.reply.set_exception(exc)
            return
        request.reply.set_result(result)

    def _reset_deadline(self) -> None:
        """Next tick is one full interval of the current config from now."""
        self._deadline = time.monotonic() + self._config.tick_interval

    def _on_timer(self) -> None:
        if self._loop.world.running:
            self._loop.tick_once(self._time_step)

    def _build(self, running: bool) -> WorldLoop:
        """Regenerate the world from the current config and factors."""
        seed = self._seed + self._generation
        self._generation += 1
        world = self._generator.generate(seed, self._config, self._factors)
        world.running = running
        return WorldLoop(world, self._rules)

    # -- handlers (coordinator thread only) --

    def _on_start(self, _: Any) -> bool:
        self._loop.world.running = True
        logger.info("Simulation started at tick %d", self._loop.world.tick)
        return True

    def _on_stop(self, _: Any) -> bool:
        self._loop.world.running = False
        logger.info("Simulation stopped at tick %d", self._loop.world.tick)
        return True

    def _on_restart(self, _: Any) -> bool:
        self._loop = self._build(running=True)
        self._reset_deadline()
        logger.info("Simulation restarted.")
        return True

    def _on_advance(self, ticks: int) -> Snapshot:
        for _ in range(ticks):
            self._loop.tick_once(self._time_step)
        return self._loop.create_snapshot()

    def _on_get_state(self, _: Any) -> Snapshot:
        return self._loop.create_snapshot()

    def _on_get_config(self, _: Any) -> SimulationConfig:
        return self._config

    def _on_set_config(self, config: SimulationConfig) -> SimulationConfig:
        self._config = config
        self._loop = self._build(running=True)
        self._reset_deadline()
        logger.info("Config updated: %s", config)
        return self._config

    def _on_get_time_step(self, _: Any) -> int:
        return self._time_step

    def _on_set_time_step(self, time_step: int) -> int:
        self._time_step = int(time_step)
        logger.info("Time step set to %d", self._time_step)
        return self._time_step

    def _on_get_environment(self, _: Any) -> EnvironmentalFactors:
        return self._factors

    def _on_set_environment(self, factors: EnvironmentalFactors) -> EnvironmentalFactors:
        self._factors = factors
        self._loop = self._build(running=True)
        logger.info("Environmental factors updated: %s (%d predators)", factors, factors.predator_count)
        return self._factors

    def _on_get_zones(self, _: Any) -> tuple[Zone, ...]:
        return tuple(self._loop.world.zones)

    def _on_set_zones(self, zones: list[Zone]) -> tuple[Zone, ...]:
        self._loop.world.zones = zones
        logger.info("Zones replaced (%d zones)", len(zones))
        return tuple(zones)

    def _on_save(self, _: Any) -> int:
        if self._store is None:
            raise PersistenceError("no snapshot store configured")
        world = self._loop.world
        try:
            return self._store.append(world_to_dict(world), config_to_dict(self._config), self._time_step)
        except PersistenceError as exc:
            logger.warning("Snapshot save failed: %s", exc)
            raise

    def _on_load(self, _: Any) -> LoadedSimulation:
        if self._store is None:
            raise PersistenceError("no snapshot store configured")
        record = self._store.latest()
        try:
            world = world_from_dict(record.state)
            config = config_from_dict(record.config)
        except (KeyError, ValueError, TypeError) as exc:
            logger.warning("Snapshot #%d is malformed: %s", record.id, exc)
            raise PersistenceError(f"error decoding snapshot #{record.id}: {exc}") from exc

        world.running = False
        self._config = config
        self._time_step = record.time_step
        self._loop = WorldLoop(world, self._rules)
        self._reset_deadline()
        logger.info("Loaded snapshot #%d (tick=%d), simulation stopped.", record.id, world.tick)
        return LoadedSimulation(
            snapshot=self._loop.create_snapshot(),
            config=config,
            time_step=record.time_step,
            created_at=record.created_at,
        )
