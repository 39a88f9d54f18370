"""Engine layer: behaviour, collisions, world loop, mailbox, coordinator."""

from birdsim.engine.behavior import BehaviorEngine
from birdsim.engine.collisions import CollisionResolver
from birdsim.engine.coordinator import Coordinator, LoadedSimulation
from birdsim.engine.mailbox import Mailbox, Operation, Request
from birdsim.engine.world_loop import WorldLoop

__all__ = [
    "BehaviorEngine",
    "CollisionResolver",
    "Coordinator",
    "LoadedSimulation",
    "Mailbox",
    "Operation",
    "Request",
    "WorldLoop",
]
