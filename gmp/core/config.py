"""Run configuration.

``RunConfig`` is the resolved, read-only record every workflow receives.
It is built from three layers, highest priority first: explicit CLI
options, the optional TOML defaults file (``gmp.toml``), built-in defaults.

Defaults file layout:

    [defaults]
    parallel = 4
    branches = ["main", "develop"]
    provider_url = "https://example.org/org"
    log_file = "logs/git-multi-push.log"
    clone_branch = "main"
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_str_list, get_table
from .targets import is_full_location

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_LOG_FILE",
    "DEFAULT_PARALLEL",
    "FileDefaults",
    "Mode",
    "RunConfig",
    "check_targets",
    "find_defaults_file",
    "load_defaults",
    "parse_branches",
    "resolve_config",
]

DEFAULT_PARALLEL = 8
DEFAULT_LOG_FILE = Path("git-multi-push.log")
DEFAULT_CONFIG_NAME = "gmp.toml"


class Mode(Enum):
    """What each workflow does with its target."""

    COMMIT_PUSH = "commit-push"
    CHECKOUT = "checkout"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the configuration cannot be resolved."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class FileDefaults:
    """Values read from the ``[defaults]`` table. None means "not set"."""

    parallel: int | None = None
    branches: tuple[str, ...] | None = None
    provider_url: str | None = None
    log_file: Path | None = None
    clone_branch: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, base_dir: Path | None = None) -> FileDefaults:
        """Create from parsed TOML. Relative ``log_file`` is taken relative to ``base_dir``."""
        table: StrDict = get_table(data, "defaults") or {}

        branches = get_str_list(table, "branches")
        log_file_raw = get_str(table, "log_file")
        log_file: Path | None = None
        if log_file_raw is not None:
            log_file = Path(log_file_raw).expanduser()
            if base_dir is not None and not log_file.is_absolute():
                log_file = base_dir / log_file

        return cls(
            parallel=get_int(table, "parallel"),
            branches=tuple(branches) if branches is not None else None,
            provider_url=get_str(table, "provider_url"),
            log_file=log_file,
            clone_branch=get_str(table, "clone_branch"),
        )


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Resolved configuration shared by the orchestrator and all workflows.

    Attributes:
        mode: Commit & push (default) or checkout
        dry_run: Describe commands instead of executing them
        allowed_branches: Branch filter for commit & push; empty accepts all
        commit_message: Message for ``git commit -m``
        max_parallel: Upper bound on concurrently running workflows
        provider_url: Base URL joined with bare repository names in checkout mode
        clone_branch: Branch passed to ``git clone -b`` when set
        workdir: Directory relative targets and clones are resolved against
        log_file: Audit log path
    """

    mode: Mode = Mode.COMMIT_PUSH
    dry_run: bool = False
    allowed_branches: frozenset[str] = frozenset()
    commit_message: str = ""
    max_parallel: int = DEFAULT_PARALLEL
    provider_url: str | None = None
    clone_branch: str | None = None
    workdir: Path = field(default_factory=Path.cwd)
    log_file: Path = DEFAULT_LOG_FILE

    def branch_allowed(self, branch: str) -> bool:
        """True if the branch passes the filter. An empty filter accepts every branch."""
        return not self.allowed_branches or branch in self.allowed_branches


def parse_branches(value: str | Iterable[str] | None) -> frozenset[str]:
    """Parse a comma-separated branch list ("main, develop") into a set."""
    if value is None:
        return frozenset()
    parts = value.split(",") if isinstance(value, str) else value
    return frozenset(p.strip() for p in parts if p.strip())


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"invalid TOML syntax: {e}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("config root must be a TOML table", path=path))
    return Ok(data)


def load_defaults(path: Path) -> Result[FileDefaults, ConfigError]:
    """Load the ``[defaults]`` table from a TOML file.

    Args:
        path: Path to the defaults file

    Returns:
        Ok(FileDefaults) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result
    return Ok(FileDefaults.from_dict(result.value, base_dir=path.parent))


def find_defaults_file(cwd: Path) -> Path | None:
    """Return ``<cwd>/gmp.toml`` if it exists."""
    candidate = cwd / DEFAULT_CONFIG_NAME
    return candidate if candidate.is_file() else None


def resolve_config(
    *,
    mode: Mode,
    dry_run: bool = False,
    branches: str | None = None,
    commit_message: str | None = None,
    parallel: int | None = None,
    provider_url: str | None = None,
    clone_branch: str | None = None,
    workdir: Path | None = None,
    log_file: Path | None = None,
    defaults: FileDefaults | None = None,
) -> Result[RunConfig, ConfigError]:
    """Merge CLI values over file defaults and validate the result.

    Returns:
        Ok(RunConfig), or Err(ConfigError) if the commit message is missing in
        commit & push mode or the parallelism is not a positive integer
    """
    defaults = defaults or FileDefaults()

    max_parallel = parallel if parallel is not None else defaults.parallel
    if max_parallel is None:
        max_parallel = DEFAULT_PARALLEL
    if max_parallel <= 0:
        return Err(
            ConfigError(
                f"parallel must be a positive integer, got {max_parallel}",
                hint="Use --parallel 1 for sequential processing",
            )
        )

    message = commit_message or ""
    if mode is Mode.COMMIT_PUSH and not message.strip():
        return Err(
            ConfigError(
                "commit message required",
                hint='git-multi-push --repo-file repos.txt "Update all repos"',
            )
        )

    allowed = parse_branches(branches) if branches is not None else parse_branches(defaults.branches)

    return Ok(
        RunConfig(
            mode=mode,
            dry_run=dry_run,
            allowed_branches=allowed,
            commit_message=message,
            max_parallel=max_parallel,
            provider_url=(provider_url or "").strip() or defaults.provider_url,
            clone_branch=(clone_branch or "").strip() or defaults.clone_branch,
            workdir=workdir if workdir is not None else Path.cwd(),
            log_file=log_file or defaults.log_file or DEFAULT_LOG_FILE,
        )
    )


def check_targets(config: RunConfig, targets: list[str]) -> Result[None, ConfigError]:
    """Reject checkout runs that list bare names without a provider URL."""
    if config.mode is not Mode.CHECKOUT or config.provider_url:
        return Ok(None)

    bare = [t for t in targets if not is_full_location(t)]
    if bare:
        return Err(
            ConfigError(
                f"--provider-url required for checkout of bare repository names (e.g. {bare[0]!r})",
                hint="git-multi-push --repo-file repos.txt --checkout --provider-url https://example.org/team",
            )
        )
    return Ok(None)
