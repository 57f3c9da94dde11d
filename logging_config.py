from __future__ import annotations

import contextvars
import logging
import os
import sys
import threading
import uuid
from collections import deque
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

_DEFAULT_LEVEL = os.getenv("HILLROUTE_LOG_LEVEL", "INFO").upper()
_RESOLVED_LEVEL = logging.getLevelName(_DEFAULT_LEVEL)
if isinstance(_RESOLVED_LEVEL, str):
    _RESOLVED_LEVEL = logging.INFO

_BUFFER_SIZE = int(os.getenv("HILLROUTE_LOG_BUFFER", "500"))
_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(run_id)s | HillRoute.%(module)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_FILE_NAME = "hillroute_runs.log"

_buffer_lock = threading.Lock()
_log_buffer: deque[str] = deque(maxlen=_BUFFER_SIZE)
_run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("hillroute_run_id", default="-")


class RunIdFilter(logging.Filter):
    """Inject the run_id into each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _run_id_var.get()
        return True


class _BufferingHandler(logging.Handler):
    """Capture log records into an in-memory ring buffer."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        message = self.format(record)
        with _buffer_lock:
            _log_buffer.append(message)


_logging_configured = False
_configure_lock = threading.Lock()


def _configure_logging() -> None:
    global _logging_configured
    with _configure_lock:
        if _logging_configured:
            return

        formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)
        run_filter = RunIdFilter()

        root_logger = logging.getLogger()
        root_logger.setLevel(_RESOLVED_LEVEL)
        root_logger.addFilter(run_filter)

        # Avoid attaching duplicate console handlers if another configuration already exists.
        if not any(isinstance(handler, logging.StreamHandler) for handler in root_logger.handlers):
            stream_handler = logging.StreamHandler(sys.stderr)
            stream_handler.setFormatter(formatter)
            stream_handler.setLevel(_RESOLVED_LEVEL)
            stream_handler.addFilter(run_filter)
            root_logger.addHandler(stream_handler)

        buffer_handler = _BufferingHandler()
        buffer_handler.addFilter(run_filter)
        root_logger.addHandler(buffer_handler)

        _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger configured with the unified HillRoute format."""
    _configure_logging()
    return logging.getLogger(name)


def current_run_id() -> str:
    return _run_id_var.get()


@contextmanager
def run_context(run_id: Optional[str] = None) -> Iterator[str]:
    """Tag every record logged inside the block with ``run_id`` (generated when omitted)."""
    new_id = run_id or uuid.uuid4().hex[:8]
    token = _run_id_var.set(new_id)
    try:
        yield new_id
    finally:
        _run_id_var.reset(token)


def get_recent_output(limit: int = 200) -> List[str]:
    """Return the most recent log lines up to ``limit`` entries."""
    if limit <= 0:
        return []
    with _buffer_lock:
        return list(_log_buffer)[-limit:]


def export_recent_output(limit: int = 200) -> str:
    """Render recent log lines as a single newline-delimited string."""
    return "\n".join(get_recent_output(limit))


def configure_logging(structured: bool = True, log_dir: Union[str, Path, None] = None) -> Path:
    """Attach (or refresh) a file handler writing to ``<log_dir>/hillroute_runs.log``.

    - structured=True: the unified pipe-separated format
    - structured=False: "%(message)s"

    Console and buffer handlers are left untouched. Returns the log file path.
    """
    _configure_logging()

    if log_dir is None:
        from hillroute.settings import settings

        log_dir = settings.LOG_DIR

    fmt = _LOG_FORMAT if structured else "%(message)s"
    formatter = logging.Formatter(fmt=fmt, datefmt=_DATE_FORMAT)

    log_path = Path(log_dir) / _LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_path):
            handler.setFormatter(formatter)
            return log_path

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(_RESOLVED_LEVEL)
    file_handler.addFilter(RunIdFilter())
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
    return log_path


__all__ = [
    "get_logger",
    "current_run_id",
    "run_context",
    "get_recent_output",
    "export_recent_output",
    "configure_logging",
]
