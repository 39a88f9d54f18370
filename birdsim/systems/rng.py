"""Domain-separated deterministic RNG using xxhash.

The outcome of tick T depends only on the seed and the state at T-1.
Request interleaving and the order in which agents are visited never
change which random values an agent sees.

Formula: RNG_Value = Hash(Seed, Domain, EntityID, Tick, Salt)
"""

from __future__ import annotations

import math
import struct

import xxhash

from birdsim.core.enums import Domain
from birdsim.core.models import Vector2


class DeterministicRNG:
    """Stateless domain-separated pseudo-random number generator.

    Each call is a pure function of (seed, domain, entity_id, tick, salt),
    so there is no internal state to save with a snapshot.
    """

    __slots__ = ("_seed",)

    _MAX_UINT64 = (1 << 64) - 1

    def __init__(self, seed: int) -> None:
        self._seed = seed

    def _hash(self, domain: Domain, entity_id: int, tick: int, salt: int) -> int:
        payload = struct.pack("<qiqqi", self._seed, domain.value, entity_id, tick, salt)
        return xxhash.xxh64(payload).intdigest()

    def next_float(self, domain: Domain, entity_id: int, tick: int, salt: int = 0) -> float:
        """Return a deterministic float in [0.0, 1.0)."""
        return self._hash(domain, entity_id, tick, salt) / (self._MAX_UINT64 + 1)

    def next_range(
        self, domain: Domain, entity_id: int, tick: int, low: float, high: float, salt: int = 0,
    ) -> float:
        """Return a deterministic float in [low, high)."""
        return low + self.next_float(domain, entity_id, tick, salt) * (high - low)

    def next_int(self, domain: Domain, entity_id: int, tick: int, low: int, high: int, salt: int = 0) -> int:
        """Return a deterministic integer in [low, high] inclusive."""
        f = self.next_float(domain, entity_id, tick, salt)
        return low + int(f * (high - low + 1))

    def next_point(
        self, domain: Domain, entity_id: int, tick: int, size: float, origin: Vector2 = Vector2(),
    ) -> Vector2:
        """Uniform point in the square [origin, origin + size)²."""
        return Vector2(
            origin.x + self.next_float(domain, entity_id, tick, salt=1) * size,
            origin.y + self.next_float(domain, entity_id, tick, salt=2) * size,
        )

    def next_in_disc(self, domain: Domain, entity_id: int, tick: int, center: Vector2, radius: float) -> Vector2:
        """Point at a uniform angle and a uniform distance in [0, radius) from *center*."""
        angle = self.next_float(domain, entity_id, tick, salt=1) * 2 * math.pi
        dist = self.next_float(domain, entity_id, tick, salt=2) * radius
        return Vector2(center.x + dist * math.cos(angle), center.y + dist * math.sin(angle))
