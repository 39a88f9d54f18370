"""Core data models: Vector2, Agent, Obstacle, Resource, Predator, Zone."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from birdsim.core.enums import AgentState, ResourceType


@dataclass(frozen=True, slots=True)
class Vector2:
    """Immutable 2D float vector."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector2:
        return Vector2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalized(self) -> Vector2:
        """Unit vector in the same direction. The zero vector stays zero."""
        mag = self.length()
        if mag > 0:
            return Vector2(self.x / mag, self.y / mag)
        return self

    def distance_to(self, other: Vector2) -> float:
        """Euclidean distance over both axes."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def clamped(self, low: float, high: float) -> Vector2:
        return Vector2(min(max(self.x, low), high), min(max(self.y, low), high))

    def as_list(self) -> list[float]:
        return [self.x, self.y]

    def __repr__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f})"


def centroid(points: list[Vector2]) -> Vector2:
    total_x = sum(p.x for p in points)
    total_y = sum(p.y for p in points)
    return Vector2(total_x / len(points), total_y / len(points))


@dataclass(slots=True)
class Agent:
    """A bird."""

    id: int
    position: Vector2
    velocity: Vector2
    state: AgentState
    target: Vector2
    group: int = 0
    collision_tick: int = 0          # Tick the last collision was detected; 0 = no cooldown

    @property
    def on_cooldown(self) -> bool:
        return self.collision_tick != 0

    def copy(self) -> Agent:
        return replace(self)


@dataclass(frozen=True, slots=True)
class Obstacle:
    id: int
    position: Vector2
    radius: float


@dataclass(slots=True)
class Resource:
    """A food or rest site.

    ``current`` is a saturating counter in [0, capacity]: food resources
    count remaining portions and start full, rest resources count
    occupants and start empty.
    """

    id: int
    position: Vector2
    type: ResourceType
    capacity: int
    current: int

    @property
    def has_space(self) -> bool:
        return self.current < self.capacity

    @property
    def depleted(self) -> bool:
        return self.current <= 0

    def increment(self) -> bool:
        """Add one unit unless full. Returns whether the counter changed."""
        if self.current >= self.capacity:
            return False
        self.current += 1
        return True

    def decrement(self) -> bool:
        """Remove one unit unless empty. Returns whether the counter changed."""
        if self.current <= 0:
            return False
        self.current -= 1
        return True

    def refill(self) -> None:
        self.current = self.capacity

    def copy(self) -> Resource:
        return replace(self)


@dataclass(slots=True)
class Predator:
    id: int
    position: Vector2
    velocity: Vector2

    def copy(self) -> Predator:
        return replace(self)


@dataclass(frozen=True, slots=True)
class Zone:
    """A static region exerting environmental pressure on nearby agents."""

    id: int
    position: Vector2
    temperature: float
    food_availability: float
    predator_presence: float
