from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class HillRouteError(Exception):
    """Business-level exception carrying a stable error code for callers."""

    code: str
    message: str
    detail: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.__str__())

    def __str__(self) -> str:  # pragma: no cover - trivial
        base = f"[{self.code}] {self.message}"
        if self.detail:
            return f"{base}: {self.detail}"
        return base

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class MalformedGrid(HillRouteError):
    """Grid input rejected at construction time."""

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        super().__init__("HR-GRID-001", message, detail)


class NoPathFound(HillRouteError):
    """The frontier ran dry before the goal was reached."""

    def __init__(self, message: str = "no path found", detail: Optional[str] = None) -> None:
        super().__init__("HR-PATH-001", message, detail)


class SearchBudgetExceeded(HillRouteError):
    def __init__(self, message: str = "max expansions reached", detail: Optional[str] = None) -> None:
        super().__init__("HR-PATH-002", message, detail)


class ConfigError(HillRouteError):
    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        super().__init__("HR-CFG-001", message, detail)


class InvalidPosition(AssertionError):
    """Out-of-bounds lookup; indicates a bug in neighbour generation, not bad input."""

    def __init__(self, pos, shape) -> None:
        super().__init__(f"position {pos} outside grid of shape {shape}")
        self.pos = pos
        self.shape = shape


class BrokenPredecessorChain(AssertionError):
    """came_from does not lead back to the start; the goal was never reached."""


__all__ = [
    "HillRouteError",
    "MalformedGrid",
    "NoPathFound",
    "SearchBudgetExceeded",
    "ConfigError",
    "InvalidPosition",
    "BrokenPredecessorChain",
]
