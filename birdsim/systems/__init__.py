"""World generation and deterministic randomness."""

from birdsim.systems.generator import WorldGenerator
from birdsim.systems.rng import DeterministicRNG

__all__ = ["DeterministicRNG", "WorldGenerator"]
