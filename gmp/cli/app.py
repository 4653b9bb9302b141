from __future__ import annotations

from pathlib import Path

import typer

from gmp import __version__
from gmp.cli._helpers import exit_on_error, fail
from gmp.cli.context import build_context
from gmp.core.config import (
    FileDefaults,
    Mode,
    check_targets,
    find_defaults_file,
    load_defaults,
    resolve_config,
)
from gmp.core.errors import ErrorCode
from gmp.core.targets import read_targets
from gmp.output.audit import FileAuditSink
from gmp.output.console import Style
from gmp.services.batch import BatchService

EPILOG = """\
Examples:

  # Commit & push every repo in repos.txt, only on main or develop, dry-run
  git-multi-push --repo-file repos.txt --branch main,develop --dry "Update all repos"

  # Clone every repo listed in repos.txt, 8 in parallel
  git-multi-push --repo-file repos.txt --checkout --provider-url https://bitbucket.org/myteam --parallel 8
"""


app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    help="Commit & push (or clone) many git repositories in parallel.",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.command(epilog=EPILOG)
def multi_push(
    message: str | None = typer.Argument(
        None, help="Commit message (required unless --checkout)."
    ),
    repo_file: Path | None = typer.Option(
        None, "--repo-file", "-f", help="Text file with one repository per line."
    ),
    dry_run: bool = typer.Option(
        False, "--dry", "--dry-run", help="Show commands without running them."
    ),
    branch: str | None = typer.Option(
        None, "--branch", "-b", help="Allowed branches, comma separated (default: all)."
    ),
    parallel: int | None = typer.Option(
        None, "--parallel", "-p", help="Number of parallel jobs (default: 8)."
    ),
    checkout: bool = typer.Option(False, "--checkout", help="Clone the listed repositories."),
    provider_url: str | None = typer.Option(
        None,
        "--provider-url",
        help="Git provider base URL for bare repository names (e.g. https://bitbucket.org/myteam).",
    ),
    clone_branch: str | None = typer.Option(
        None, "--clone-branch", help="Branch to check out when cloning."
    ),
    workdir: Path | None = typer.Option(
        None,
        "--workdir",
        file_okay=False,
        help="Base directory for relative repository paths and clones (default: current directory).",
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Audit log file (default: git-multi-push.log)."
    ),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="TOML defaults file (default: ./gmp.toml if present)."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Commit & push (or clone) every repository listed in a file."""
    ctx = build_context()

    if repo_file is None:
        fail(ctx, "--repo-file is required", hint="git-multi-push --repo-file repos.txt \"Message\"")

    defaults = FileDefaults()
    defaults_path = config_path or find_defaults_file(ctx.cwd)
    if defaults_path is not None:
        defaults = exit_on_error(load_defaults(defaults_path), ctx)

    config = exit_on_error(
        resolve_config(
            mode=Mode.CHECKOUT if checkout else Mode.COMMIT_PUSH,
            dry_run=dry_run,
            branches=branch,
            commit_message=message,
            parallel=parallel,
            provider_url=provider_url,
            clone_branch=clone_branch,
            workdir=workdir.resolve() if workdir is not None else ctx.cwd,
            log_file=log_file,
            defaults=defaults,
        ),
        ctx,
    )

    targets = exit_on_error(read_targets(repo_file), ctx)
    exit_on_error(check_targets(config, targets), ctx)

    try:
        audit = FileAuditSink(config.log_file)
    except OSError as e:
        fail(ctx, f"cannot open log file {config.log_file}: {e}", error_code=ErrorCode.IO_ERROR)

    with audit:
        if config.dry_run:
            ctx.console.warning("dry-run: no command will be executed")
        BatchService(config, audit=audit, console=ctx.console).run(targets)

    ctx.console.print("All jobs finished!", Style.SUCCESS)


def main() -> None:
    app()
