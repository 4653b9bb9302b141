"""Append-only audit log shared by all concurrent workflows.

Every line is timestamped and tagged with the target it concerns:

    2026/10/18 14:02:11 === Starting operation: 2026-10-18T14:02:11+02:00 ===
    2026/10/18 14:02:12 [repos/api] processing on branch 'main'
    2026/10/18 14:02:12 [repos/api] executed: git add -A
    2026/10/18 14:02:14 [repos/web] skipped: not a git repository

``FileAuditSink`` routes records through a ``QueueHandler``. A single
``QueueListener`` thread owns the file handler and writes one record per
line, so workers never touch the file handle and lines never interleave.
Lines from different targets carry no ordering guarantee.
"""

from __future__ import annotations

import itertools
import logging
import logging.handlers
import queue
import threading
from datetime import datetime
from pathlib import Path
from typing import Protocol

__all__ = [
    "AUDIT_DATEFMT",
    "AUDIT_FORMAT",
    "AuditSink",
    "FileAuditSink",
    "MemoryAuditSink",
    "format_target_line",
]

AUDIT_FORMAT = "%(asctime)s %(message)s"
AUDIT_DATEFMT = "%Y/%m/%d %H:%M:%S"

_sink_ids = itertools.count(1)


def format_target_line(target: str, message: str) -> str:
    """One audit line about a target; embedded newlines are folded into spaces."""
    return f"[{target}] {' '.join(message.splitlines())}"


class AuditSink(Protocol):
    """Line-oriented, thread-safe audit log."""

    def record(self, target: str, message: str) -> None:
        """Write one line about a target."""
        ...

    def start(self) -> None:
        """Write the opening line of a run."""
        ...

    def finish(self) -> None:
        """Write the closing line of a run."""
        ...


class FileAuditSink:
    """Audit sink appending to a file.

    The file is opened in append mode on construction; ``close()`` drains
    pending records and closes it. Usable as a context manager.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        # Opening may raise OSError; the caller reports it before any work starts.
        path.parent.mkdir(parents=True, exist_ok=True)
        self._file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        self._file_handler.setFormatter(logging.Formatter(AUDIT_FORMAT, datefmt=AUDIT_DATEFMT))

        self._queue: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
        self._listener = logging.handlers.QueueListener(self._queue, self._file_handler)

        # One logger per sink: concurrent sinks never share handlers.
        self._logger = logging.getLogger(f"gmp.audit.{next(_sink_ids)}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        self._logger.addHandler(logging.handlers.QueueHandler(self._queue))

        self._listener.start()
        self._closed = False

    def _write(self, line: str) -> None:
        self._logger.info(line)

    def record(self, target: str, message: str) -> None:
        self._write(format_target_line(target, message))

    def start(self) -> None:
        self._write(f"=== Starting operation: {datetime.now().astimezone().isoformat(timespec='seconds')} ===")

    def finish(self) -> None:
        self._write("=== All jobs finished ===")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._listener.stop()
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()
        self._file_handler.close()

    def __enter__(self) -> FileAuditSink:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class MemoryAuditSink:
    """Audit sink keeping lines in memory (tests, previews)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._lines: list[str] = []

    def _write(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    def record(self, target: str, message: str) -> None:
        self._write(format_target_line(target, message))

    def start(self) -> None:
        self._write("=== Starting operation ===")

    def finish(self) -> None:
        self._write("=== All jobs finished ===")

    @property
    def lines(self) -> list[str]:
        with self._lock:
            return list(self._lines)

    def for_target(self, target: str) -> list[str]:
        """Lines about one target, in the order they were written."""
        prefix = f"[{target}] "
        return [line[len(prefix) :] for line in self.lines if line.startswith(prefix)]
