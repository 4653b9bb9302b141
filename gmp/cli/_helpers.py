"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from gmp.core.errors import ErrorCode
from gmp.core.result import Err, Result
from gmp.output.console import Style

if TYPE_CHECKING:
    from gmp.cli.context import CLIContext


T = TypeVar("T")
E = TypeVar("E")


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Return the value of an Ok result, or report the error and exit.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        fail(ctx, message, hint=hint, error_code=error_code)
    return result.value


def fail(
    ctx: CLIContext,
    message: str,
    *,
    hint: str | None = None,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> NoReturn:
    """Print an error (and hint) and exit before any repository is touched."""
    ctx.console.error(message)
    if hint:
        ctx.console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(error_code))
