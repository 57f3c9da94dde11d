"""
高程网格模块。

提供不可变的二维高程网格 HeightGrid：
  - 每个格点保存 0..25 的高程等级（由字母 'a'..'z' 换算）；
  - 起点 'S' 按 'a' 计，终点 'E' 按 'z' 计；
  - 支持标记查询、按高程条件筛选格点、四邻接邻居生成。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Literal, Optional, Sequence

import numpy as np

from hillroute.exceptions import InvalidPosition, MalformedGrid

Position = tuple[int, int]
MarkerKind = Literal["start", "end"]

START_CHAR = "S"
END_CHAR = "E"
MIN_RANK = 0
MAX_RANK = 25

# 上、左、下、右
_DIRECTIONS: list[tuple[int, int]] = [(-1, 0), (0, -1), (1, 0), (0, 1)]

_ARROWS = {(-1, 0): "^", (1, 0): "v", (0, -1): "<", (0, 1): ">"}

DEMO_ROWS: list[str] = [
    "Sabqponm",
    "abcryxxl",
    "accszExk",
    "acctuvwj",
    "abdefghi",
]


def rank_of(ch: str) -> int:
    """高程字符 -> 等级；未知字符抛出 MalformedGrid。"""
    if ch == START_CHAR:
        return MIN_RANK
    if ch == END_CHAR:
        return MAX_RANK
    if len(ch) == 1 and "a" <= ch <= "z":
        return ord(ch) - ord("a")
    raise MalformedGrid("unknown elevation character", detail=repr(ch))


@dataclass(frozen=True, eq=False)
class HeightGrid:
    """不可变高程网格。heights 为只读 int8 数组，shape (ny, nx)。"""

    heights: np.ndarray
    start: Position
    end: Position

    def __post_init__(self) -> None:
        try:
            raw = np.asarray(self.heights)
        except ValueError as err:
            raise MalformedGrid("rows have unequal length", detail=str(err)) from err

        if raw.ndim != 2 or raw.size == 0:
            raise MalformedGrid("grid must be a non-empty rectangle", detail=f"shape={raw.shape}")
        if raw.dtype.kind not in "iu":
            raise MalformedGrid("elevations must be integers", detail=f"dtype={raw.dtype}")
        if raw.min() < MIN_RANK or raw.max() > MAX_RANK:
            raise MalformedGrid(
                "elevation rank out of range",
                detail=f"min={raw.min()}, max={raw.max()}",
            )

        heights = raw.astype(np.int8, copy=True)
        heights.flags.writeable = False
        object.__setattr__(self, "heights", heights)

        for name in ("start", "end"):
            pos = tuple(int(v) for v in getattr(self, name))
            if len(pos) != 2 or not self.in_bounds(pos):
                raise MalformedGrid(f"{name} marker outside grid", detail=str(pos))
            object.__setattr__(self, name, pos)

    # ------------------------------------------------------------------
    # 构造
    # ------------------------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "HeightGrid":
        """
        由文本行构建网格。

        要求：
          - 至少一行，且所有行等长；
          - 恰好一个 'S' 与一个 'E'；
          - 其余字符均为 'a'..'z'。
        """
        if not rows:
            raise MalformedGrid("grid is empty")

        width = len(rows[0])
        starts: list[Position] = []
        ends: list[Position] = []
        heights = np.zeros((len(rows), width), dtype=np.int8)

        for i, row in enumerate(rows):
            if len(row) != width:
                raise MalformedGrid(
                    "rows have unequal length",
                    detail=f"row {i} has {len(row)} cells, expected {width}",
                )
            for j, ch in enumerate(row):
                if ch == START_CHAR:
                    starts.append((i, j))
                elif ch == END_CHAR:
                    ends.append((i, j))
                heights[i, j] = rank_of(ch)

        if len(starts) != 1:
            raise MalformedGrid("expected exactly one start marker", detail=f"found {len(starts)}")
        if len(ends) != 1:
            raise MalformedGrid("expected exactly one end marker", detail=f"found {len(ends)}")

        return cls(heights, starts[0], ends[0])

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def shape(self) -> tuple[int, int]:
        """返回网格形状 (ny, nx)。"""
        return self.heights.shape

    def in_bounds(self, pos: Position) -> bool:
        ny, nx = self.heights.shape
        i, j = pos
        return 0 <= i < ny and 0 <= j < nx

    def height_at(self, pos: Position) -> int:
        if not self.in_bounds(pos):
            raise InvalidPosition(pos, self.shape())
        return int(self.heights[pos[0], pos[1]])

    def neighbors(self, pos: Position) -> list[Position]:
        """上下左右四邻接中位于网格内的格点（边、角上的格点更少）。"""
        i, j = pos
        result: list[Position] = []
        for di, dj in _DIRECTIONS:
            cand = (i + di, j + dj)
            if self.in_bounds(cand):
                result.append(cand)
        return result

    def find_marker(self, kind: MarkerKind) -> Position:
        if kind == "start":
            return self.start
        if kind == "end":
            return self.end
        raise ValueError(f"Unknown marker kind: {kind!r}")

    def find_all(self, predicate: Callable[[int], bool]) -> list[Position]:
        """按行优先顺序返回高程满足 predicate 的全部格点。"""
        return [
            (int(i), int(j))
            for (i, j), h in np.ndenumerate(self.heights)
            if predicate(int(h))
        ]

    def lowest_cells(self) -> list[Position]:
        return self.find_all(lambda h: h == MIN_RANK)

    # ------------------------------------------------------------------
    # 渲染
    # ------------------------------------------------------------------

    def to_rows(self, path: Optional[Iterable[Position]] = None) -> list[str]:
        """
        渲染为文本行。

        不传 path 时还原输入格式；传入 path 时，路径上的格点以箭头
        标出前进方向，其余格点以 '.' 表示，终点仍为 'E'。
        """
        ny, nx = self.shape()
        if path is None:
            cells = [[chr(ord("a") + int(h)) for h in row] for row in self.heights]
            si, sj = self.start
            ei, ej = self.end
            cells[si][sj] = START_CHAR
            cells[ei][ej] = END_CHAR
            return ["".join(row) for row in cells]

        steps = list(path)
        cells = [["."] * nx for _ in range(ny)]
        for (ai, aj), (bi, bj) in zip(steps[:-1], steps[1:]):
            cells[ai][aj] = _ARROWS.get((bi - ai, bj - aj), "?")
        if steps:
            li, lj = steps[-1]
            cells[li][lj] = END_CHAR
        return ["".join(row) for row in cells]


def make_demo_grid() -> HeightGrid:
    """返回 8x5 的示例网格（单源最短 31 步，多源最短 29 步）。"""
    return HeightGrid.from_rows(DEMO_ROWS)


__all__ = [
    "Position",
    "MarkerKind",
    "HeightGrid",
    "DEMO_ROWS",
    "rank_of",
    "make_demo_grid",
    "MIN_RANK",
    "MAX_RANK",
]
