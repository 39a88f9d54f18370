"""birdsim — a single-writer bird migration simulation engine."""

__version__ = "0.1.0"
