"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import Enum, IntEnum, unique


@unique
class AgentState(str, Enum):
    """Finite-state-machine states for agents."""

    MIGRATING = "migrating"
    SEARCHING_FOOD = "searchingFood"
    RESTING = "resting"


@unique
class ResourceType(str, Enum):
    FOOD = "food"
    REST = "rest"


@unique
class RuleSet(str, Enum):
    """Which historical behaviour rule set drives the agents."""

    ZONED = "zoned"       # Zones, predators and group steering
    CLASSIC = "classic"   # No zones, no predators, agents steer to their own target


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    SPAWN = 0
    OBSTACLE = 1
    RESOURCE = 2
    PREDATOR = 3
    GROUP_TARGET = 4
    REST_TARGET = 5
    WANDER = 6
    RELOCATE = 7
    FOOD_SITE = 8
    TRANSITION = 9
    TRANSITION_TARGET = 10
