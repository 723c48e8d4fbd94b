"""Pantry-aware weekly meal planner."""

__version__ = "0.1.0"
