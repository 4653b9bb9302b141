"""Target list reading.

A target list is a plain-text file with one repository per line: a local
path in commit & push mode, a repository name or full clone URL in checkout
mode. Surrounding whitespace is trimmed and blank lines are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "TargetListError",
    "is_full_location",
    "parse_targets",
    "read_targets",
]

# user@host:path and host:path (scp-like syntax accepted by git)
_SCP_LIKE = re.compile(r"^(?:[\w.+-]+@[\w.-]+:.+|[\w.-]+:[^/].*)$")


@dataclass(frozen=True, slots=True)
class TargetListError:
    """Error when the target list cannot be read."""

    message: str
    path: Path
    hint: str | None = None


def parse_targets(text: str) -> list[str]:
    """Split list file content into targets, preserving order."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def read_targets(path: Path) -> Result[list[str], TargetListError]:
    """Read the target list file.

    Args:
        path: List file, one target per non-blank line

    Returns:
        Ok(targets) in file order, Err(TargetListError) if the file is
        missing or unreadable
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        return Err(
            TargetListError(
                f"repo file not found: {path}",
                path=path,
                hint="Pass an existing file with --repo-file",
            )
        )
    except IsADirectoryError:
        return Err(TargetListError(f"repo file is a directory: {path}", path=path))
    except PermissionError:
        return Err(TargetListError(f"permission denied reading: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(TargetListError(f"error reading repo file: {e}", path=path))

    return Ok(parse_targets(text))


def is_full_location(target: str) -> bool:
    """True if the target is a complete clone location rather than a bare name.

    Recognizes URLs with a scheme (https://, ssh://, file://), the scp-like
    ``[user@]host:path`` form and local paths (absolute, or starting with
    ``./`` or ``../``).
    """
    if "://" in target or _SCP_LIKE.match(target):
        return True
    return Path(target).is_absolute() or target.startswith(("./", "../"))
