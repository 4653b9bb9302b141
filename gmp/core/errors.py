"""Exit codes for the git-multi-push CLI.

A completed batch always exits with ``OK``: per-repository failures are
recorded in the audit log, not in the exit status. Non-zero codes are only
used when the run stops before touching any repository.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are stable.

    - 0: Batch completed
    - 1: User error (missing list file, message or provider URL, bad options)
    - 5: I/O error (audit log cannot be opened)
    """

    OK = 0
    USER_ERROR = 1
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
