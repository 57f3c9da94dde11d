"""
多源最短路径模块。

在一组候选起点中找到到达同一终点的全局最短路径。两种策略：
  - independent: 对每个候选起点独立跑一次 A*，取最短者；可用线程池并行；
  - reverse: 以终点为根、在反向图上只跑一次搜索，弹出的第一个候选起点即为答案。

两种策略对外契约相同：返回长度最小的路径，所有候选都不可达时抛 NoPathFound。
"""

from __future__ import annotations

import contextvars
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from logging_config import get_logger

from hillroute.exceptions import ConfigError, NoPathFound, SearchBudgetExceeded

from .astar import AStarResult, astar_search, grid_astar_with_info
from .grid import HeightGrid, Position
from .traversal import DEFAULT_POLICY, ClimbPolicy

logger = get_logger(__name__)

STRATEGIES: tuple[str, ...] = ("independent", "reverse")


@dataclass
class MultiSourceResult:
    """
    多源搜索结果。

    Attributes:
        path: 最短路径（start -> goal），不可达时为空列表
        start: 被选中的候选起点，不可达时为 None
        reachable: 是否可达
        reason: 失败原因（no_path / no_candidates），成功时为 None
        strategy: 使用的策略名
        candidates: 候选起点数量（去重后）
        succeeded: 可达的候选数量（reverse 策略下成功时为 1）
        expanded: 所有搜索累计扩展的格点数
    """

    path: list[Position]
    start: Optional[Position]
    reachable: bool
    reason: Optional[str]
    strategy: str
    candidates: int
    succeeded: int = 0
    expanded: int = 0

    @property
    def steps(self) -> Optional[int]:
        return len(self.path) - 1 if self.reachable else None


def default_candidates(grid: HeightGrid) -> list[Position]:
    """起点标记加上所有最低高程（'a'）格点，去重并按行优先排序。"""
    return _dedupe([grid.find_marker("start"), *grid.lowest_cells()])


def _dedupe(candidates: Iterable[Position]) -> list[Position]:
    seen: set[Position] = set()
    ordered: list[Position] = []
    for pos in candidates:
        pos = (int(pos[0]), int(pos[1]))
        if pos not in seen:
            seen.add(pos)
            ordered.append(pos)
    return ordered


def _run_independent(
    grid: HeightGrid,
    candidates: list[Position],
    goal: Position,
    policy: ClimbPolicy,
    workers: int,
    max_expansions: int | None,
) -> MultiSourceResult:
    def _one(start: Position) -> AStarResult:
        return grid_astar_with_info(grid, start, goal, policy=policy, max_expansions=max_expansions)

    if workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(candidates))) as pool:
            # 每个任务带上调用方上下文（run_id）
            futures = [pool.submit(contextvars.copy_context().run, _one, start) for start in candidates]
            results = [fut.result() for fut in futures]
    else:
        results = [_one(start) for start in candidates]

    expanded = sum(res.expanded for res in results)

    exhausted = [start for start, res in zip(candidates, results) if res.reason == "max_expansions_reached"]
    if exhausted:
        raise SearchBudgetExceeded(
            detail=f"{len(exhausted)} of {len(candidates)} candidates hit max_expansions={max_expansions}"
        )

    best: Optional[tuple[Position, AStarResult]] = None
    succeeded = 0
    for start, res in zip(candidates, results):
        if not res.reachable:
            continue
        succeeded += 1
        # 严格小于：等长时保留输入顺序中靠前的候选
        if best is None or len(res.path) < len(best[1].path):
            best = (start, res)

    if best is None:
        return MultiSourceResult([], None, False, "no_path", "independent", len(candidates), 0, expanded)

    start, res = best
    return MultiSourceResult(res.path, start, True, None, "independent", len(candidates), succeeded, expanded)


def _run_reverse(
    grid: HeightGrid,
    candidates: list[Position],
    goal: Position,
    policy: ClimbPolicy,
    max_expansions: int | None,
) -> MultiSourceResult:
    sources = set(candidates)
    src = np.array(candidates, dtype=np.int64)

    def _nearest_source(pos: Position) -> int:
        # 到最近候选起点的曼哈顿距离，仍是一致启发
        return int(np.min(np.abs(src[:, 0] - pos[0]) + np.abs(src[:, 1] - pos[1])))

    res = astar_search(
        grid,
        goal,
        accept=lambda pos: pos in sources,
        heuristic=_nearest_source,
        policy=policy.reversed(),
        max_expansions=max_expansions,
    )

    if res.reason == "max_expansions_reached":
        raise SearchBudgetExceeded(detail=f"reverse search from {goal} after {res.expanded} expansions")
    if not res.reachable:
        return MultiSourceResult([], None, False, "no_path", "reverse", len(candidates), 0, res.expanded)

    path = list(reversed(res.path))
    return MultiSourceResult(path, path[0], True, None, "reverse", len(candidates), 1, res.expanded)


def find_shortest_path_with_info(
    grid: HeightGrid,
    candidates: Sequence[Position],
    goal: Position,
    strategy: str = "independent",
    workers: int = 1,
    policy: ClimbPolicy | None = None,
    max_expansions: int | None = None,
) -> MultiSourceResult:
    """
    多源搜索，返回带诊断信息的 MultiSourceResult；全部不可达时不抛异常。

    Raises:
        ConfigError: 未知策略
        SearchBudgetExceeded: 任一搜索达到 max_expansions
    """
    if strategy not in STRATEGIES:
        raise ConfigError("unknown multi-source strategy", detail=f"{strategy!r}, expected one of {STRATEGIES}")
    policy = policy or DEFAULT_POLICY

    grid.height_at(goal)
    starts = _dedupe(candidates)
    for pos in starts:
        grid.height_at(pos)

    if not starts:
        logger.info("multi-source search to %s: no candidates", goal)
        return MultiSourceResult([], None, False, "no_candidates", strategy, 0)

    if strategy == "reverse":
        result = _run_reverse(grid, starts, goal, policy, max_expansions)
    else:
        result = _run_independent(grid, starts, goal, policy, workers, max_expansions)

    logger.info(
        "multi-source search to %s [%s]: %d candidates, %d reachable, steps=%s, expanded=%d",
        goal,
        result.strategy,
        result.candidates,
        result.succeeded,
        result.steps,
        result.expanded,
    )
    return result


def find_shortest_path(
    grid: HeightGrid,
    candidates: Sequence[Position],
    goal: Position,
    strategy: str = "independent",
    workers: int = 1,
    policy: ClimbPolicy | None = None,
    max_expansions: int | None = None,
) -> list[Position]:
    """
    返回所有候选起点中到 goal 的最短路径。

    不可达的候选被排除；只有全部候选都不可达时才抛出 NoPathFound。
    """
    res = find_shortest_path_with_info(
        grid,
        candidates,
        goal,
        strategy=strategy,
        workers=workers,
        policy=policy,
        max_expansions=max_expansions,
    )
    if not res.reachable:
        raise NoPathFound(detail=f"none of {res.candidates} candidates reaches {goal}")
    return res.path


__all__ = [
    "MultiSourceResult",
    "STRATEGIES",
    "default_candidates",
    "find_shortest_path",
    "find_shortest_path_with_info",
]
