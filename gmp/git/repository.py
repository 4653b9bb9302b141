"""Read-only repository probes.

``Repository`` answers three questions about a working copy, each
tolerant of missing state:

- is this path a git repository?
- which branch is checked out?
- are there uncommitted changes?

Usage:
    repo = Repository(Path("/path/to/repo"))
    if repo.is_repository():
        match repo.current_branch():
            case Ok(branch):
                print(f"Branch: {branch}")
            case Err(e):
                print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from gmp.core.result import Err, Ok, Result
from gmp.platform.process import ProcessError
from gmp.platform.process import run as run_process

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1

    def __str__(self) -> str:
        return f"git {self.command}: {self.message}"


class Repository:
    """A local working copy.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def is_repository(self) -> bool:
        """True if ``<path>/.git`` is a directory. Never raises."""
        try:
            return (self.path / ".git").is_dir()
        except (OSError, ValueError):
            return False

    def current_branch(self) -> Result[str, GitError]:
        """Get the checked-out branch name.

        Runs ``git rev-parse --abbrev-ref HEAD``.

        Returns:
            Ok(branch) on success
            Err(GitError) if git fails or HEAD is detached
        """
        result = (
            self._run(["rev-parse", "--abbrev-ref", "HEAD"])
            .map(str.strip)
            .map_err(
                lambda e: GitError(
                    command="rev-parse",
                    message=e.stderr.strip() or str(e),
                    returncode=e.returncode,
                )
            )
        )
        match result:
            case Err():
                return result
            case Ok(branch):
                if not branch or branch == "HEAD":
                    return Err(GitError(command="rev-parse", message="detached HEAD"))
                return Ok(branch)

    def has_pending_changes(self) -> bool:
        """True if the working tree has tracked or untracked changes.

        Returns False if status cannot be determined.
        """
        result = self._run(["status", "--porcelain"])
        match result:
            case Ok(stdout):
                return stdout.strip() != ""
            case Err(_):
                return False

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(["git", *args], cwd=self.path)
