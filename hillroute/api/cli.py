#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from logging_config import configure_logging, get_logger

from hillroute.config import (
    SCENARIOS,
    get_scenario_by_name,
    list_scenarios,
    load_run_config,
    validate_search_options,
)
from hillroute.config.schema import RunConfig
from hillroute.core.astar import find_path
from hillroute.core.grid import HeightGrid, Position
from hillroute.core.multisource import STRATEGIES, default_candidates, find_shortest_path
from hillroute.core.traversal import ClimbPolicy
from hillroute.exceptions import ConfigError, HillRouteError
from hillroute.experiments.runner import MODES, run_case_grid
from hillroute.io.heightmap import read_heightmap
from hillroute.settings import settings

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# 参数解析辅助
# ---------------------------------------------------------------------------

def _load_config(args: argparse.Namespace) -> Optional[RunConfig]:
    path = getattr(args, "config", None)
    return load_run_config(path) if path else None


def _load_grid(args: argparse.Namespace, cfg: Optional[RunConfig]) -> HeightGrid:
    """命令行 --input/--scenario 优先，其次是配置文件的 grid 段。"""
    input_path = getattr(args, "input", None)
    scenario_name = getattr(args, "scenario", None)
    if input_path is None and scenario_name is None and cfg is not None:
        input_path, scenario_name = cfg.grid.input, cfg.grid.scenario

    if input_path is not None:
        return read_heightmap(input_path)
    if scenario_name is not None:
        scenario = get_scenario_by_name(scenario_name)
        if scenario is None:
            raise ConfigError("unknown scenario", detail=f"{scenario_name!r}, expected one of {list_scenarios()}")
        return scenario.build()
    raise ConfigError("no grid given", detail="use --input, --scenario or a --config with a grid section")


def _search_options(args: argparse.Namespace, cfg: Optional[RunConfig]) -> Dict[str, Any]:
    """解析顺序：命令行参数 > 配置文件 > 环境变量 settings。"""
    section = cfg.search if cfg is not None else None

    def _pick(name: str, setting: Any) -> Any:
        value = getattr(args, name, None)
        if value is not None:
            return value
        if section is not None and name in section.model_fields_set:
            return getattr(section, name)
        return setting

    multi = bool(getattr(args, "multi", False)) or (section is not None and section.mode == "multi")
    # 命令行取值同样受 SearchSection 的上下限约束
    search = validate_search_options(
        {
            "mode": "multi" if multi else "single",
            "strategy": _pick("strategy", settings.STRATEGY),
            "workers": _pick("workers", settings.WORKERS),
            "max_expansions": _pick("max_expansions", settings.MAX_EXPANSIONS),
            "max_climb": _pick("max_climb", settings.MAX_CLIMB),
        },
        source="command line",
    )
    return {
        "strategy": search.strategy,
        "workers": search.workers,
        "max_expansions": search.max_expansions,
        "max_climb": search.max_climb,
        "multi": search.mode == "multi",
    }


def _positions(path: List[Position]) -> List[List[int]]:
    return [[int(i), int(j)] for i, j in path]


def _add_grid_args(p: argparse.ArgumentParser) -> None:
    src = p.add_mutually_exclusive_group()
    src.add_argument("--input", help="高程图文本文件")
    src.add_argument("--scenario", choices=[s.name for s in SCENARIOS], help="内置场景名")
    p.add_argument("--config", help="YAML 运行配置文件")
    p.add_argument("--strategy", choices=STRATEGIES, help="多源策略（independent / reverse）")
    p.add_argument("--workers", type=int, help="independent 策略的线程数")
    p.add_argument("--max-expansions", dest="max_expansions", type=int, help="单次搜索的扩展预算")
    p.add_argument("--max-climb", dest="max_climb", type=int, help="每步最大爬升等级")
    p.add_argument("--json", action="store_true", help="以 JSON 输出")


# ---------------------------------------------------------------------------
# 子命令
# ---------------------------------------------------------------------------

def handle_solve(args: argparse.Namespace) -> int:
    """单源与多源最短步数各输出一次。"""
    cfg = _load_config(args)
    grid = _load_grid(args, cfg)
    opts = _search_options(args, cfg)
    policy = ClimbPolicy(max_climb=opts["max_climb"])
    goal = grid.find_marker("end")

    path = find_path(grid, grid.find_marker("start"), goal, policy=policy, max_expansions=opts["max_expansions"])
    shortest = find_shortest_path(
        grid,
        default_candidates(grid),
        goal,
        strategy=opts["strategy"],
        workers=opts["workers"],
        policy=policy,
        max_expansions=opts["max_expansions"],
    )

    if args.json:
        print(json.dumps({"ok": True, "steps": len(path) - 1, "shortest_steps": len(shortest) - 1}))
    else:
        print(f"steps from start: {len(path) - 1}")
        print(f"steps from lowest: {len(shortest) - 1}")
    return 0


def handle_path(args: argparse.Namespace) -> int:
    cfg = _load_config(args)
    grid = _load_grid(args, cfg)
    opts = _search_options(args, cfg)
    policy = ClimbPolicy(max_climb=opts["max_climb"])
    goal = grid.find_marker("end")

    if opts["multi"]:
        path = find_shortest_path(
            grid,
            default_candidates(grid),
            goal,
            strategy=opts["strategy"],
            workers=opts["workers"],
            policy=policy,
            max_expansions=opts["max_expansions"],
        )
    else:
        path = find_path(grid, grid.find_marker("start"), goal, policy=policy, max_expansions=opts["max_expansions"])

    if args.json:
        print(json.dumps({"ok": True, "steps": len(path) - 1, "path": _positions(path)}))
        return 0

    print(f"steps: {len(path) - 1}")
    if args.show:
        print("\n".join(grid.to_rows(path)))
    return 0


def handle_scenarios_list(args: argparse.Namespace) -> int:
    rows = [
        {
            "name": s.name,
            "description": s.description,
            "expected_steps": s.expected_steps,
            "expected_shortest_steps": s.expected_shortest_steps,
        }
        for s in SCENARIOS
    ]
    if args.json:
        print(json.dumps(rows, ensure_ascii=False))
        return 0
    for row in rows:
        print(f"{row['name']:<16} {row['description']}  (single={row['expected_steps']}, multi={row['expected_shortest_steps']})")
    return 0


def handle_experiments_run(args: argparse.Namespace) -> int:
    scenarios = args.scenario or list_scenarios()
    modes = args.mode or list(MODES)
    opts = _search_options(args, None)
    df = run_case_grid(
        scenarios,
        modes,
        strategy=opts["strategy"],
        workers=opts["workers"],
        max_climb=opts["max_climb"],
    )
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(out_path, index=False)
        logger.info("wrote %d rows to %s", len(df), out_path)
    print(df.to_string(index=False))
    return 0


_HANDLERS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "solve": handle_solve,
    "path": handle_path,
    "scenarios.list": handle_scenarios_list,
    "experiments.run": handle_experiments_run,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hillroute", description="HillRoute CLI")
    parser.add_argument("--log-file", action="store_true", help=f"同时写入 {settings.LOG_DIR}/hillroute_runs.log")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve = subparsers.add_parser("solve", help="输出单源与多源最短步数")
    _add_grid_args(solve)

    path = subparsers.add_parser("path", help="计算一条最短路径")
    _add_grid_args(path)
    path.add_argument("--multi", action="store_true", help="以起点与所有 'a' 格点为候选起点")
    path.add_argument("--show", action="store_true", help="在网格上画出路径")

    scen = subparsers.add_parser("scenarios.list", help="列出内置场景")
    scen.add_argument("--json", action="store_true", help="以 JSON 输出")

    exp = subparsers.add_parser("experiments.run", help="批量运行场景 x 模式，输出结果表")
    exp.add_argument("--scenario", action="append", choices=list_scenarios(), help="可重复；缺省为全部场景")
    exp.add_argument("--mode", action="append", choices=MODES, help="可重复；缺省为 single 与 multi")
    exp.add_argument("--strategy", choices=STRATEGIES)
    exp.add_argument("--workers", type=int)
    exp.add_argument("--max-climb", dest="max_climb", type=int)
    exp.add_argument("--out", help="CSV 输出路径")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_file:
        configure_logging()

    try:
        return _HANDLERS[args.command](args)
    except HillRouteError as err:
        logger.error("%s", err)
        return 1
    except Exception as err:
        logger.exception("CLI command failed")
        logger.error("%s", HillRouteError("HR-CLI-000", "CLI command failed", detail=str(err)))
        return 1


if __name__ == "__main__":
    sys.exit(main())
