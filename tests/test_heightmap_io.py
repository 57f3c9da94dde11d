"""
高程图文本读取测试。
"""

from __future__ import annotations

import pytest

from hillroute.core.grid import DEMO_ROWS
from hillroute.exceptions import MalformedGrid
from hillroute.io.heightmap import parse_heightmap, read_heightmap


def test_parse_ignores_blank_lines_and_indentation():
    text = "\n  Sabqponm\nabcryxxl  \naccszExk\n\nacctuvwj\nabdefghi\n\n"
    grid = parse_heightmap(text)

    assert grid.shape() == (5, 8)
    assert grid.to_rows() == DEMO_ROWS


def test_read_heightmap_from_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text("\n".join(DEMO_ROWS) + "\n", encoding="utf-8")

    grid = read_heightmap(path)
    assert grid.start == (0, 0)
    assert grid.end == (2, 5)


def test_read_heightmap_accepts_str_path(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text("SE\n", encoding="utf-8")

    grid = read_heightmap(str(path))
    assert grid.shape() == (1, 2)


def test_missing_file(tmp_path):
    with pytest.raises(MalformedGrid):
        read_heightmap(tmp_path / "nope.txt")


def test_ragged_file(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("Sab\nabcE\n", encoding="utf-8")

    with pytest.raises(MalformedGrid):
        read_heightmap(path)


def test_empty_text():
    with pytest.raises(MalformedGrid):
        parse_heightmap("\n\n")
