"""
通行规则模块。

一步从 a 走到相邻的 b 合法，当且仅当 height(b) <= height(a) + max_climb：
下坡不限，上坡每步最多升 max_climb 级（默认 1）。合法步代价为 1，
非法步代价为无穷，且不会作为边提供给搜索。
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterator

from hillroute.exceptions import ConfigError

from .grid import HeightGrid, Position

STEP_COST = 1.0


@dataclass(frozen=True)
class ClimbPolicy:
    """
    爬升受限的四邻接通行规则。

    Attributes:
        max_climb: 每步允许上升的最大高程等级
        reverse: True 时给出反向图的边（a -> b 合法当且仅当正向 b -> a 合法），
                 用于从终点出发的多源反向搜索
    """

    max_climb: int = 1
    reverse: bool = False

    def __post_init__(self) -> None:
        if self.max_climb < 0:
            raise ConfigError("max_climb must be >= 0", detail=str(self.max_climb))

    def is_legal(self, grid: HeightGrid, a: Position, b: Position) -> bool:
        if self.reverse:
            a, b = b, a
        return grid.height_at(b) <= grid.height_at(a) + self.max_climb

    def step_cost(self, grid: HeightGrid, a: Position, b: Position) -> float:
        return STEP_COST if self.is_legal(grid, a, b) else math.inf

    def edges(self, grid: HeightGrid, pos: Position) -> Iterator[tuple[Position, float]]:
        """逐个给出 pos 的合法出边 (neighbor, cost)。"""
        here = grid.height_at(pos)
        for nb in grid.neighbors(pos):
            there = grid.height_at(nb)
            if self.reverse:
                legal = here <= there + self.max_climb
            else:
                legal = there <= here + self.max_climb
            if legal:
                yield nb, STEP_COST

    def reversed(self) -> "ClimbPolicy":
        return replace(self, reverse=not self.reverse)


DEFAULT_POLICY = ClimbPolicy()

__all__ = ["ClimbPolicy", "DEFAULT_POLICY", "STEP_COST"]
