"""
核心运行器：统一的"运行一次搜索并返回 DataFrame/字典"的封装。

功能：
- 单次搜索运行（run_single_case）
- 批量搜索运行（run_case_grid）
- 结果导出为 DataFrame/CSV
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Literal, Optional

import pandas as pd

from logging_config import get_logger, run_context

from hillroute.config import get_scenario_by_name
from hillroute.core.astar import grid_astar_with_info
from hillroute.core.multisource import default_candidates, find_shortest_path_with_info
from hillroute.core.traversal import ClimbPolicy
from hillroute.exceptions import HillRouteError, SearchBudgetExceeded

logger = get_logger(__name__)

ModeName = Literal["single", "multi"]
MODES: tuple[str, ...] = ("single", "multi")


@dataclass
class SingleRunResult:
    """单次搜索运行的结果数据类。

    Attributes:
        scenario: 场景名称
        mode: 搜索模式（single / multi）
        reachable: 是否可达
        steps: 最短步数，若不可达则为 None
        expected_steps: 场景登记的期望步数
        expanded: 扩展格点总数
        elapsed_ms: 耗时（毫秒）
        meta: 元数据字典，包含 strategy, run_id, start, goal, reason 等
    """

    scenario: str
    mode: ModeName
    reachable: bool
    steps: Optional[int]
    expected_steps: Optional[int]
    expanded: int
    elapsed_ms: float
    meta: Dict[str, Any]

    @property
    def matches_expected(self) -> bool:
        return self.steps == self.expected_steps

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_flat_dict(self) -> Dict[str, Any]:
        """转换为扁平字典（meta 字段展开）。"""
        result = asdict(self)
        meta = result.pop("meta")
        result.update({f"meta_{k}": v for k, v in meta.items()})
        return result


def run_single_case(
    scenario: str,
    mode: ModeName,
    strategy: str = "independent",
    workers: int = 1,
    max_climb: int = 1,
    max_expansions: int | None = None,
) -> SingleRunResult:
    """
    运行单次搜索案例。

    Raises:
        ValueError: 如果场景或模式不存在
        SearchBudgetExceeded: 达到 max_expansions
    """
    scenario_obj = get_scenario_by_name(scenario)
    if scenario_obj is None:
        raise ValueError(f"Unknown scenario: {scenario}")
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode}")

    grid = scenario_obj.build()
    policy = ClimbPolicy(max_climb=max_climb)
    goal = grid.find_marker("end")

    with run_context() as run_id:
        t0 = time.perf_counter()
        if mode == "single":
            start = grid.find_marker("start")
            res = grid_astar_with_info(grid, start, goal, policy=policy, max_expansions=max_expansions)
            if res.reason == "max_expansions_reached":
                raise SearchBudgetExceeded(detail=f"scenario {scenario}")
            reachable, steps, expanded, reason = res.reachable, res.steps, res.expanded, res.reason
            meta: Dict[str, Any] = {"strategy": None, "start": start}
            expected = scenario_obj.expected_steps
        else:
            multi = find_shortest_path_with_info(
                grid,
                default_candidates(grid),
                goal,
                strategy=strategy,
                workers=workers,
                policy=policy,
                max_expansions=max_expansions,
            )
            reachable, steps, expanded, reason = multi.reachable, multi.steps, multi.expanded, multi.reason
            meta = {"strategy": strategy, "start": multi.start, "candidates": multi.candidates}
            expected = scenario_obj.expected_shortest_steps
        elapsed_ms = (time.perf_counter() - t0) * 1000.0

        meta.update({"run_id": run_id, "goal": goal, "reason": reason, "max_climb": max_climb})
        logger.info("scenario=%s mode=%s reachable=%s steps=%s expanded=%d", scenario, mode, reachable, steps, expanded)

    return SingleRunResult(
        scenario=scenario,
        mode=mode,
        reachable=reachable,
        steps=steps,
        expected_steps=expected,
        expanded=expanded,
        elapsed_ms=elapsed_ms,
        meta=meta,
    )


def run_case_grid(
    scenarios: List[str],
    modes: List[ModeName],
    strategy: str = "independent",
    workers: int = 1,
    max_climb: int = 1,
) -> pd.DataFrame:
    """
    逐个调用 run_single_case，返回一个长表格。

    单个案例失败时记录错误并继续，失败行 reachable=False，meta_error 为错误信息。
    """
    results = []

    for scenario in scenarios:
        for mode in modes:
            try:
                result = run_single_case(scenario, mode, strategy=strategy, workers=workers, max_climb=max_climb)
            except (ValueError, HillRouteError) as e:
                logger.warning("Failed to run %s with %s: %s", scenario, mode, e)
                result = SingleRunResult(
                    scenario=scenario,
                    mode=mode,
                    reachable=False,
                    steps=None,
                    expected_steps=None,
                    expanded=0,
                    elapsed_ms=0.0,
                    meta={"error": str(e)},
                )
            results.append(result)

    return pd.DataFrame([result.to_flat_dict() for result in results])


__all__ = ["ModeName", "MODES", "SingleRunResult", "run_single_case", "run_case_grid"]
