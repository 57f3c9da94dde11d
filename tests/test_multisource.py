"""
多源最短路径测试（independent / reverse 两种策略）。
"""

from __future__ import annotations

import pytest

from hillroute.core.astar import find_path
from hillroute.core.multisource import (
    STRATEGIES,
    default_candidates,
    find_shortest_path,
    find_shortest_path_with_info,
)
from hillroute.exceptions import ConfigError, NoPathFound, SearchBudgetExceeded


def test_default_candidates_are_start_plus_lowest(sample_grid):
    cands = default_candidates(sample_grid)

    assert cands[0] == sample_grid.start
    assert set(cands) == {(0, 0), (0, 1), (1, 0), (2, 0), (3, 0), (4, 0)}
    assert len(cands) == len(set(cands))


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_sample_grid_multi_source_has_29_steps(sample_grid, strategy):
    path = find_shortest_path(sample_grid, default_candidates(sample_grid), sample_grid.end, strategy=strategy)

    assert len(path) == 30
    assert path[0] in default_candidates(sample_grid)
    assert path[-1] == sample_grid.end


def test_threaded_independent_search_matches_serial(sample_grid):
    cands = default_candidates(sample_grid)
    serial = find_shortest_path_with_info(sample_grid, cands, sample_grid.end, workers=1)
    threaded = find_shortest_path_with_info(sample_grid, cands, sample_grid.end, workers=4)

    assert threaded.steps == serial.steps == 29
    assert threaded.start == serial.start
    assert threaded.path == serial.path
    assert threaded.succeeded == serial.succeeded


def test_multi_source_not_longer_than_any_candidate(sample_grid):
    cands = default_candidates(sample_grid)
    best = find_shortest_path(sample_grid, cands, sample_grid.end)

    for start in cands:
        try:
            single = find_path(sample_grid, start, sample_grid.end)
        except NoPathFound:
            continue
        assert len(best) <= len(single)


def test_info_fields(sample_grid):
    res = find_shortest_path_with_info(sample_grid, default_candidates(sample_grid), sample_grid.end)

    assert res.reachable is True
    assert res.reason is None
    assert res.strategy == "independent"
    assert res.candidates == 6
    assert 1 <= res.succeeded <= 6
    assert res.start == res.path[0]
    assert res.expanded > 0


def test_duplicate_candidates_are_collapsed(sample_grid):
    res = find_shortest_path_with_info(sample_grid, [(0, 0), (0, 0), (1, 0)], sample_grid.end)
    assert res.candidates == 2


def test_ties_go_to_earliest_candidate():
    """两个候选起点到终点等距，选输入顺序靠前的那个。"""
    from hillroute.core.grid import HeightGrid

    grid = HeightGrid([[0, 1, 0]], (0, 0), (0, 1))
    left = find_shortest_path_with_info(grid, [(0, 0), (0, 2)], (0, 1))
    right = find_shortest_path_with_info(grid, [(0, 2), (0, 0)], (0, 1))

    assert left.start == (0, 0)
    assert right.start == (0, 2)


def test_unreachable_candidates_are_excluded():
    from hillroute.core.grid import HeightGrid

    # (0,0) 被 c 挡住，(1,2) 可以直接走到终点
    grid = HeightGrid(
        [
            [0, 2, 1],
            [2, 2, 0],
        ],
        (0, 0),
        (0, 2),
    )
    res = find_shortest_path_with_info(grid, [(0, 0), (1, 2)], (0, 2))

    assert res.reachable is True
    assert res.succeeded == 1
    assert res.path == [(1, 2), (0, 2)]


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_all_candidates_fail(walled_grid, strategy):
    with pytest.raises(NoPathFound):
        find_shortest_path(walled_grid, default_candidates(walled_grid), walled_grid.end, strategy=strategy)

    res = find_shortest_path_with_info(walled_grid, default_candidates(walled_grid), walled_grid.end, strategy=strategy)
    assert res.reachable is False
    assert res.reason == "no_path"
    assert res.start is None
    assert res.steps is None


def test_no_candidates(sample_grid):
    with pytest.raises(NoPathFound):
        find_shortest_path(sample_grid, [], sample_grid.end)

    res = find_shortest_path_with_info(sample_grid, [], sample_grid.end)
    assert res.reason == "no_candidates"


def test_unknown_strategy(sample_grid):
    with pytest.raises(ConfigError):
        find_shortest_path(sample_grid, [(0, 0)], sample_grid.end, strategy="bidirectional")


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_budget_exhaustion_propagates(sample_grid, strategy):
    with pytest.raises(SearchBudgetExceeded):
        find_shortest_path(
            sample_grid,
            default_candidates(sample_grid),
            sample_grid.end,
            strategy=strategy,
            max_expansions=3,
        )


def test_single_cell_multi_source():
    from hillroute.core.grid import HeightGrid

    grid = HeightGrid([[0]], (0, 0), (0, 0))
    for strategy in STRATEGIES:
        assert find_shortest_path(grid, default_candidates(grid), (0, 0), strategy=strategy) == [(0, 0)]


@pytest.mark.parametrize("seed", range(20))
def test_strategies_agree_with_bfs(seed, random_grid, bfs_steps):
    grid = random_grid(seed)
    cands = default_candidates(grid)
    lengths = [bfs_steps(grid, c, grid.end) for c in cands]
    reachable = [n for n in lengths if n is not None]
    expected = min(reachable) if reachable else None

    for strategy in STRATEGIES:
        res = find_shortest_path_with_info(grid, cands, grid.end, strategy=strategy)
        assert res.steps == expected, strategy
        if res.reachable:
            assert res.path[0] in cands
            assert res.path[-1] == grid.end
            for a, b in zip(res.path[:-1], res.path[1:]):
                assert grid.height_at(b) <= grid.height_at(a) + 1
