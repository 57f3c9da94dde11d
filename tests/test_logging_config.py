"""Unit tests for the shared logging helpers."""

from __future__ import annotations

import logging
import os
import threading

from logging_config import (
    configure_logging,
    current_run_id,
    export_recent_output,
    get_logger,
    get_recent_output,
    run_context,
)


def test_run_context_sets_and_restores_id():
    before = current_run_id()
    with run_context("abc123") as run_id:
        assert run_id == "abc123"
        assert current_run_id() == "abc123"
    assert current_run_id() == before


def test_run_context_generates_id():
    with run_context() as run_id:
        assert len(run_id) == 8


def test_records_land_in_buffer_with_run_id():
    logger = get_logger("hillroute.tests.buffer")
    with run_context("buf-run"):
        logger.warning("buffered message 42")

    lines = get_recent_output(50)
    matching = [line for line in lines if "buffered message 42" in line]
    assert matching
    assert "| buf-run |" in matching[-1]
    assert "| WARNING |" in matching[-1]
    assert "buffered message 42" in export_recent_output(50)


def test_recent_output_limit():
    assert get_recent_output(0) == []
    logger = get_logger("hillroute.tests.limit")
    for i in range(3):
        logger.warning("limit line %d", i)
    assert len(get_recent_output(2)) == 2


def test_configure_logging_writes_file(tmp_path):
    log_path = configure_logging(log_dir=tmp_path)
    try:
        get_logger("hillroute.tests.file").warning("to the file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert log_path == tmp_path / "hillroute_runs.log"
        assert "to the file" in log_path.read_text(encoding="utf-8")
        # 再次调用不会重复挂载
        assert configure_logging(log_dir=tmp_path) == log_path
        handlers = [
            h for h in logging.getLogger().handlers
            if isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_path)
        ]
        assert len(handlers) == 1
    finally:
        root = logging.getLogger()
        for h in list(root.handlers):
            if isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_path):
                root.removeHandler(h)
                h.close()


def test_run_context_is_isolated_per_thread():
    """两个线程同时处于各自的 run_context 中，互不覆盖。"""
    barrier = threading.Barrier(2)
    seen = {}

    def _work(run_id):
        with run_context(run_id):
            barrier.wait()
            seen[run_id] = current_run_id()
            barrier.wait()

    threads = [threading.Thread(target=_work, args=(rid,)) for rid in ("A", "B")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert seen == {"A": "A", "B": "B"}


def test_pool_workers_inherit_run_id(sample_grid):
    from hillroute.core.multisource import default_candidates, find_shortest_path

    logger = logging.getLogger()
    old_level = logger.level
    logger.setLevel(logging.DEBUG)
    try:
        with run_context("pool-run"):
            find_shortest_path(sample_grid, default_candidates(sample_grid), sample_grid.end, workers=4)
    finally:
        logger.setLevel(old_level)

    astar_lines = [line for line in get_recent_output(500) if "A* reached" in line and "| pool-run |" in line]
    assert astar_lines
