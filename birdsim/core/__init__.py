"""Core data models and world representation."""

from birdsim.core.enums import AgentState, Domain, ResourceType, RuleSet
from birdsim.core.models import Agent, Obstacle, Predator, Resource, Vector2, Zone
from birdsim.core.world_state import WorldState
from birdsim.core.snapshot import Snapshot

__all__ = [
    "Agent",
    "AgentState",
    "Domain",
    "Obstacle",
    "Predator",
    "Resource",
    "ResourceType",
    "RuleSet",
    "Snapshot",
    "Vector2",
    "WorldState",
    "Zone",
]
