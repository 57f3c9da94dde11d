"""HillRoute package initialisation helpers."""

from __future__ import annotations

from .settings import settings  # noqa: F401
from .core.astar import find_path
from .core.grid import HeightGrid
from .core.multisource import default_candidates, find_shortest_path

__all__ = ["settings", "HeightGrid", "find_path", "find_shortest_path", "default_candidates"]
