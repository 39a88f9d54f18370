"""Simulation configuration with sensible defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Mapping

from birdsim.core.enums import RuleSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationConfig:
    """The externally settable part of the configuration.

    Changing any of these regenerates the whole world.
    """

    speed: int = 100               # Tick interval in milliseconds
    world_size: int = 1000
    initial_agents: int = 50
    obstacle_count: int = 5
    resource_count: int = 5

    @property
    def tick_interval(self) -> float:
        """Seconds between ticks."""
        return max(self.speed, 1) / 1000.0

    def with_overrides(self, **overrides) -> SimulationConfig:
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass(frozen=True)
class EnvironmentalFactors:
    """Global environment knobs. Predator presence drives the predator count."""

    temperature: float = 20.0
    food_availability: float = 1.0
    predator_presence: float = 0.0

    @property
    def predator_count(self) -> int:
        return max(1, int(self.predator_presence * 10))


@dataclass(frozen=True)
class BehaviorRules:
    """Thresholds of the behaviour engine."""

    rule_set: RuleSet = RuleSet.ZONED

    # Periodic state checks (tick moduli)
    rest_check_interval: int = 500
    food_check_interval: int = 300
    separation_delay: int = 3000

    # Proximity radii
    resource_claim_radius: float = 50.0
    arrival_radius: float = 10.0
    rest_wander_radius: float = 10.0
    obstacle_margin: float = 10.0
    obstacle_evade_speed: float = 0.5
    predator_alarm_radius: float = 10.0

    # Collisions
    collision_threshold: float = 2.0

    # Probabilistic transitions (per tick)
    start_searching_chance: float = 0.05
    resume_migrating_after_eating_chance: float = 0.5
    stop_resting_chance: float = 0.1
    searching_limit_divisor: int = 4

    # Environmental override thresholds
    cold_temperature: float = 10.0
    scarce_food: float = 0.5
    dangerous_predators: float = 0.5

    # Best food zone temperature window (exclusive)
    food_zone_min_temperature: float = 10.0
    food_zone_max_temperature: float = 25.0

    # Resources
    resource_capacity: int = 5
    obstacle_min_radius: float = 5.0
    obstacle_radius_spread: float = 15.0
    agents_per_group: int = 10

    @classmethod
    def classic(cls) -> BehaviorRules:
        """The simpler historical rule set without zones, predators and groups."""
        return cls(rule_set=RuleSet.CLASSIC)


@dataclass(frozen=True)
class AppSettings:
    """Process-level settings read once at startup."""

    host: str = "127.0.0.1"
    port: int = 8080
    db_path: str = "simulation.db"
    seed: int = 42
    log_level: str = "INFO"
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    environment: EnvironmentalFactors = field(default_factory=EnvironmentalFactors)
    rules: BehaviorRules = field(default_factory=BehaviorRules)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppSettings:
        """Build settings from environment variables.

        A malformed numeric value falls back to its default with a warning.
        """
        env = os.environ if environ is None else environ
        sim = SimulationConfig()
        factors = EnvironmentalFactors()
        base = cls()

        simulation = SimulationConfig(
            speed=_env_int(env, "SIMULATION_SPEED", sim.speed),
            world_size=_env_int(env, "WORLD_SIZE", sim.world_size),
            initial_agents=_env_int(env, "INITIAL_BIRDS", sim.initial_agents),
            obstacle_count=_env_int(env, "OBSTACLE_COUNT", sim.obstacle_count),
            resource_count=_env_int(env, "RESOURCE_COUNT", sim.resource_count),
        )
        environment = EnvironmentalFactors(
            temperature=_env_float(env, "TEMPERATURE", factors.temperature),
            food_availability=_env_float(env, "FOOD_AVAILABILITY", factors.food_availability),
            predator_presence=_env_float(env, "PREDATOR_PRESENCE", factors.predator_presence),
        )
        rules = BehaviorRules.classic() if env.get("RULE_SET", "").lower() == "classic" else BehaviorRules()
        return cls(
            host=env.get("HOST", base.host),
            port=_env_int(env, "PORT", base.port),
            db_path=env.get("DB_PATH", base.db_path),
            seed=_env_int(env, "SEED", base.seed),
            log_level=env.get("LOG_LEVEL", base.log_level).upper(),
            simulation=simulation,
            environment=environment,
            rules=rules,
        )

    def with_overrides(self, **overrides) -> AppSettings:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %d", key, raw, default)
        return default


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %s", key, raw, default)
        return default
