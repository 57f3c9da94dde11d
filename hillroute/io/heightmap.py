"""
高程图读取模块。

输入格式：每行一个网格行，字符为 'a'..'z'，恰好一个 'S' 与一个 'E'。
空行与行首尾空白会被忽略。
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from logging_config import get_logger

from hillroute.core.grid import HeightGrid
from hillroute.exceptions import MalformedGrid

logger = get_logger(__name__)


def parse_heightmap(text: str) -> HeightGrid:
    rows = [line.strip() for line in text.splitlines()]
    rows = [row for row in rows if row]
    return HeightGrid.from_rows(rows)


def read_heightmap(path: Union[str, Path]) -> HeightGrid:
    """
    从文本文件读取高程网格。

    Raises:
        MalformedGrid: 文件不存在、无法解码或内容不合法
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise MalformedGrid("cannot read heightmap", detail=f"{p}: {err}") from err

    grid = parse_heightmap(text)
    ny, nx = grid.shape()
    logger.info("loaded heightmap %s: %dx%d, start=%s, end=%s", p, ny, nx, grid.start, grid.end)
    return grid


__all__ = ["parse_heightmap", "read_heightmap"]
