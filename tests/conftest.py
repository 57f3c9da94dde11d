from __future__ import annotations

import sys
from collections import deque
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def pytest_configure(config):
    # 确保本仓库根目录排在 sys.path 最前（logging_config 是顶层模块）
    root = str(PROJECT_ROOT)
    if root in sys.path:
        sys.path.remove(root)
    sys.path.insert(0, root)


def _bfs_steps(grid, start, goal, max_climb: int = 1) -> Optional[int]:
    """不带启发的广度优先搜索，作为最短步数的对照。"""
    dist = {start: 0}
    queue = deque([start])
    while queue:
        cur = queue.popleft()
        if cur == goal:
            return dist[cur]
        for nb in grid.neighbors(cur):
            if nb not in dist and grid.height_at(nb) <= grid.height_at(cur) + max_climb:
                dist[nb] = dist[cur] + 1
                queue.append(nb)
    return None


def _random_grid(seed: int, ny: int = 6, nx: int = 7, spread: int = 5):
    from hillroute.core.grid import HeightGrid

    rng = np.random.default_rng(seed)
    heights = rng.integers(0, spread, size=(ny, nx))
    cells = rng.choice(ny * nx, size=2, replace=False)
    start = divmod(int(cells[0]), nx)
    end = divmod(int(cells[1]), nx)
    heights[start] = 0
    return HeightGrid(heights, start, end)


@pytest.fixture
def sample_grid():
    from hillroute.core.grid import make_demo_grid

    return make_demo_grid()


@pytest.fixture
def walled_grid():
    from hillroute.config import get_scenario_by_name

    return get_scenario_by_name("walled_summit").build()


@pytest.fixture
def bfs_steps() -> Callable:
    return _bfs_steps


@pytest.fixture
def random_grid() -> Callable:
    return _random_grid
