"""Subprocess execution with Result-based error handling.

Two ways to run an external command:

- ``run`` captures output; used by the read-only repository probes.
- ``CommandRunner.run`` streams output to the terminal and honors dry-run;
  used for every command that changes a repository (add, commit, push, clone).

Usage:
    runner = CommandRunner(dry_run=False, console=RichConsole())
    match runner.run(Command("git", ("push",)), cwd=repo_path):
        case Ok(_):
            print("pushed")
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from gmp.core.result import Err, Ok, Result
from gmp.output.console import ConsoleProtocol, Style

__all__ = ["Command", "CommandRunner", "ProcessError", "run", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 if the process could not be started.
        stdout: Standard output (empty when output was streamed).
        stderr: Standard error, or the OS error when spawning failed.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.returncode == -1 and self.stderr:
            return f"{cmd_str} could not be started: {self.stderr}"
        return f"{cmd_str} failed (exit {self.returncode})"

    @property
    def detail(self) -> str:
        """Most useful single-line description of the failure."""
        text = self.stderr.strip() or self.stdout.strip()
        if text and self.returncode != -1:
            return f"{self}: {text.splitlines()[-1]}"
        return str(self)


@dataclass(frozen=True, slots=True)
class Command:
    """An external command: program plus arguments."""

    program: str
    args: tuple[str, ...] = ()

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def preview(self) -> str:
        """Shell-quoted rendering, stable for identical commands."""
        return shlex.join(self.argv)

    def __str__(self) -> str:
        return self.preview()


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).

    Returns:
        Ok(stdout) on exit 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command without capturing output.

    stdout and stderr are inherited, so the tool's own messages reach the
    terminal directly.

    Returns:
        Ok(None) on exit 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
        )

    return Ok(None)


class CommandRunner:
    """Executes or simulates mutating commands.

    With ``dry_run`` set nothing is spawned: a preview line is printed and
    success is returned. Failures are reported, never retried.
    """

    def __init__(self, *, dry_run: bool, console: ConsoleProtocol) -> None:
        self.dry_run = dry_run
        self._console = console

    def describe(self, command: Command, cwd: Path) -> str:
        """Human-readable preview: ``git commit -m sync (in /repos/a)``."""
        return f"{command.preview()} (in {cwd})"

    def run(self, command: Command, cwd: Path) -> Result[None, ProcessError]:
        if self.dry_run:
            self._console.print(f"dry-run: {self.describe(command, cwd)}", Style.DIM)
            return Ok(None)
        return run_silent(command.argv, cwd=cwd)
