"""Platform abstraction layer."""

from .process import (
    Command,
    CommandRunner,
    ProcessError,
    run,
    run_silent,
)

__all__ = [
    "Command",
    "CommandRunner",
    "ProcessError",
    "run",
    "run_silent",
]
