"""
场景预设配置模块。

定义标准高程网格场景库，用于测试、批量实验与 CLI 演示。

四个标准场景：
  - sample: 8x5 示例网格（单源 31 步，多源 29 步）
  - walled_summit: 终点被 'z' 包围，任何起点都不可达
  - single_cell: 1x1 网格，起点即终点（0 步）
  - ladder: 单行 a..z 阶梯，每步恰好上升一级（25 步）
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from hillroute.core.grid import DEMO_ROWS, HeightGrid, Position, rank_of


@dataclass
class Scenario:
    """单个场景定义。

    Attributes:
        name: 场景名称（英文标识，用于代码与 CLI）
        description: 场景描述
        rows: 网格文本行
        expected_steps: 单源最短步数；None 表示不可达
        expected_shortest_steps: 多源最短步数；None 表示不可达
        start: 显式起点。为 None 时从 rows 中的 'S' 读取
        end: 显式终点。为 None 时从 rows 中的 'E' 读取
    """

    name: str
    description: str
    rows: List[str]
    expected_steps: Optional[int]
    expected_shortest_steps: Optional[int]
    start: Optional[Position] = None
    end: Optional[Position] = None

    def __str__(self) -> str:
        return f"{self.description} ({self.name})"

    def build(self) -> HeightGrid:
        """构建场景网格。"""
        if self.start is None or self.end is None:
            return HeightGrid.from_rows(self.rows)
        heights = [[rank_of(ch) for ch in row] for row in self.rows]
        return HeightGrid(heights, self.start, self.end)


# ============================================================================
# 标准场景库
# ============================================================================

SCENARIOS: List[Scenario] = [
    Scenario(
        name="sample",
        description="8x5 sample heightmap",
        rows=list(DEMO_ROWS),
        expected_steps=31,
        expected_shortest_steps=29,
    ),
    Scenario(
        name="walled_summit",
        description="summit fenced in by z cells",
        rows=[
            "Saaaa",
            "aazaa",
            "azEza",
            "aazaa",
        ],
        expected_steps=None,
        expected_shortest_steps=None,
    ),
    Scenario(
        name="single_cell",
        description="start and end share the only cell",
        rows=["a"],
        expected_steps=0,
        expected_shortest_steps=0,
        start=(0, 0),
        end=(0, 0),
    ),
    Scenario(
        name="ladder",
        description="one-row ladder from a to z",
        rows=["SbcdefghijklmnopqrstuvwxyE"],
        expected_steps=25,
        expected_shortest_steps=25,
    ),
]


# ============================================================================
# 工具函数
# ============================================================================

def get_scenario_by_name(name: str) -> Optional[Scenario]:
    """
    按名称获取场景。

    Returns:
        Scenario 对象，若不存在则返回 None
    """
    for scenario in SCENARIOS:
        if scenario.name == name:
            return scenario
    return None


def list_scenarios() -> List[str]:
    return [s.name for s in SCENARIOS]


def list_scenario_descriptions() -> dict[str, str]:
    """{场景名称: 场景描述}"""
    return {s.name: s.description for s in SCENARIOS}
