"""Output abstraction layer: console and audit log."""

from .audit import (
    AuditSink,
    FileAuditSink,
    MemoryAuditSink,
)
from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)

__all__ = [
    "AuditSink",
    "ConsoleProtocol",
    "FileAuditSink",
    "MemoryAuditSink",
    "MockConsole",
    "RichConsole",
    "Style",
]
