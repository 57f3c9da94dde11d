"""
A* 寻路算法模块。

在 HeightGrid 上做四邻接 A* 搜索：
  - 边的合法性与代价由 ClimbPolicy 决定（单位步长）；
  - 启发函数为曼哈顿距离（可采纳且一致）；
  - open set 使用二叉堆 + 惰性重插入，弹出时跳过过期条目。

同 f 值的平局规则：堆条目为 (f, h, position)，先比 f，再取 h 较小者
（离目标更近），最后按 (row, col) 字典序。
"""

from __future__ import annotations

import heapq
import math
from dataclasses import dataclass
from typing import Callable, Optional

from logging_config import get_logger

from hillroute.exceptions import BrokenPredecessorChain, NoPathFound, SearchBudgetExceeded

from .grid import HeightGrid, Position
from .traversal import DEFAULT_POLICY, ClimbPolicy

logger = get_logger(__name__)


@dataclass
class AStarResult:
    path: list[Position]
    reachable: bool
    reason: Optional[str]
    expanded: int

    @property
    def steps(self) -> Optional[int]:
        return len(self.path) - 1 if self.reachable else None


def manhattan(a: Position, b: Position) -> int:
    """曼哈顿距离启发函数。"""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def reconstruct_path(
    came_from: dict[Position, Position],
    goal: Position,
    start: Position,
) -> list[Position]:
    """
    沿前驱指针从 goal 回溯到没有前驱的格点，再反转得到 start -> goal 的路径。

    若回溯终点不是 start，说明 goal 并未被搜索到达，属于编程错误。
    """
    path = [goal]
    node = goal
    while node in came_from:
        node = came_from[node]
        path.append(node)
        if len(path) > len(came_from) + 1:
            raise BrokenPredecessorChain(f"cycle in predecessor map near {node}")
    if node != start:
        raise BrokenPredecessorChain(f"{goal} does not trace back to {start} (stopped at {node})")
    path.reverse()
    return path


def astar_search(
    grid: HeightGrid,
    root: Position,
    accept: Callable[[Position], bool],
    heuristic: Callable[[Position], float],
    policy: ClimbPolicy = DEFAULT_POLICY,
    max_expansions: int | None = None,
) -> AStarResult:
    """
    通用 A* 主循环：从 root 出发，弹出的第一个 accept(p) 为真的格点即为终点。

    返回的路径按 root -> 终点 排列。失败原因：
      - no_path（open set 耗尽）
      - max_expansions_reached
    """
    grid.height_at(root)

    h0 = heuristic(root)
    open_set: list[tuple[float, float, Position]] = [(h0, h0, root)]
    g_score: dict[Position, float] = {root: 0.0}
    f_score: dict[Position, float] = {root: h0}
    came_from: dict[Position, Position] = {}
    closed_set: set[Position] = set()

    expanded = 0

    while open_set:
        f, _, current = heapq.heappop(open_set)

        # 过期条目（已关闭，或之后被更优的 g 覆盖）
        if current in closed_set or f > f_score[current]:
            continue

        if accept(current):
            path = reconstruct_path(came_from, current, root)
            logger.debug("A* reached %s from %s: %d steps, %d expanded", current, root, len(path) - 1, expanded)
            return AStarResult(path, True, None, expanded)

        if max_expansions is not None and expanded >= max_expansions:
            logger.debug("A* budget of %d expansions exhausted from %s", max_expansions, root)
            return AStarResult([], False, "max_expansions_reached", expanded)

        closed_set.add(current)
        expanded += 1

        for neighbor, step_cost in policy.edges(grid, current):
            if neighbor in closed_set:
                continue

            tentative_g = g_score[current] + step_cost
            if tentative_g < g_score.get(neighbor, math.inf):
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                h = heuristic(neighbor)
                f_score[neighbor] = tentative_g + h
                heapq.heappush(open_set, (tentative_g + h, h, neighbor))

    logger.debug("A* exhausted open set from %s after %d expansions", root, expanded)
    return AStarResult([], False, "no_path", expanded)


def grid_astar_with_info(
    grid: HeightGrid,
    start: Position,
    goal: Position,
    policy: ClimbPolicy | None = None,
    max_expansions: int | None = None,
) -> AStarResult:
    """单源 A*，返回带可达性与失败原因的信息；不可达时不抛异常。"""
    grid.height_at(goal)
    return astar_search(
        grid,
        start,
        accept=lambda pos: pos == goal,
        heuristic=lambda pos: manhattan(pos, goal),
        policy=policy or DEFAULT_POLICY,
        max_expansions=max_expansions,
    )


def find_path(
    grid: HeightGrid,
    start: Position,
    goal: Position,
    policy: ClimbPolicy | None = None,
    max_expansions: int | None = None,
) -> list[Position]:
    """
    返回 start -> goal 的最短路径（含两端）。

    Raises:
        NoPathFound: open set 耗尽仍未到达 goal
        SearchBudgetExceeded: 达到 max_expansions
    """
    res = grid_astar_with_info(grid, start, goal, policy=policy, max_expansions=max_expansions)
    if res.reachable:
        return res.path
    if res.reason == "max_expansions_reached":
        raise SearchBudgetExceeded(detail=f"{start} -> {goal} after {res.expanded} expansions")
    raise NoPathFound(detail=f"{start} -> {goal}")


__all__ = [
    "AStarResult",
    "manhattan",
    "reconstruct_path",
    "astar_search",
    "grid_astar_with_info",
    "find_path",
]
