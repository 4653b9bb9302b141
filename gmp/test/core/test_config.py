"""Tests for gmp.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from gmp.core.config import (
    DEFAULT_LOG_FILE,
    DEFAULT_PARALLEL,
    FileDefaults,
    Mode,
    RunConfig,
    check_targets,
    find_defaults_file,
    load_defaults,
    parse_branches,
    resolve_config,
)
from gmp.core.errors import ErrorCode
from gmp.core.result import Err, Ok


class TestParseBranches:
    def test_none_is_empty(self) -> None:
        assert parse_branches(None) == frozenset()

    def test_empty_string_is_empty(self) -> None:
        assert parse_branches("") == frozenset()

    def test_comma_separated(self) -> None:
        assert parse_branches("main, develop,,release ") == {"main", "develop", "release"}

    def test_iterable(self) -> None:
        assert parse_branches(["main", " "]) == {"main"}


class TestRunConfig:
    def test_defaults(self) -> None:
        config = RunConfig()
        assert config.mode is Mode.COMMIT_PUSH
        assert config.dry_run is False
        assert config.allowed_branches == frozenset()
        assert config.max_parallel == DEFAULT_PARALLEL == 8
        assert config.log_file == DEFAULT_LOG_FILE

    def test_empty_filter_accepts_every_branch(self) -> None:
        config = RunConfig()
        assert config.branch_allowed("main")
        assert config.branch_allowed("feature-x")

    def test_filter(self) -> None:
        config = RunConfig(allowed_branches=frozenset({"main"}))
        assert config.branch_allowed("main")
        assert not config.branch_allowed("feature-x")

    def test_frozen(self) -> None:
        config = RunConfig()
        with pytest.raises(AttributeError):
            config.dry_run = True  # type: ignore[misc]


class TestResolveConfig:
    def test_commit_mode_requires_message(self) -> None:
        result = resolve_config(mode=Mode.COMMIT_PUSH, commit_message=None)
        assert isinstance(result, Err)
        assert "commit message" in result.error.message

    def test_blank_message_rejected(self) -> None:
        result = resolve_config(mode=Mode.COMMIT_PUSH, commit_message="   ")
        assert isinstance(result, Err)

    def test_checkout_mode_needs_no_message(self) -> None:
        result = resolve_config(mode=Mode.CHECKOUT)
        assert isinstance(result, Ok)
        assert result.value.mode is Mode.CHECKOUT

    def test_message_kept_verbatim(self) -> None:
        result = resolve_config(mode=Mode.COMMIT_PUSH, commit_message=" sync ")
        assert isinstance(result, Ok)
        assert result.value.commit_message == " sync "

    @pytest.mark.parametrize("parallel", [0, -3])
    def test_parallel_must_be_positive(self, parallel: int) -> None:
        result = resolve_config(mode=Mode.CHECKOUT, parallel=parallel)
        assert isinstance(result, Err)
        assert "positive" in result.error.message

    def test_cli_overrides_file_defaults(self, tmp_path: Path) -> None:
        defaults = FileDefaults(
            parallel=2,
            branches=("develop",),
            provider_url="https://file.example/org",
            log_file=tmp_path / "file.log",
        )
        result = resolve_config(
            mode=Mode.CHECKOUT,
            branches="main",
            parallel=4,
            provider_url="https://cli.example/org",
            log_file=tmp_path / "cli.log",
            defaults=defaults,
        )
        assert isinstance(result, Ok)
        config = result.value
        assert config.max_parallel == 4
        assert config.allowed_branches == {"main"}
        assert config.provider_url == "https://cli.example/org"
        assert config.log_file == tmp_path / "cli.log"

    def test_file_defaults_fill_gaps(self, tmp_path: Path) -> None:
        defaults = FileDefaults(
            parallel=2,
            branches=("main", "develop"),
            clone_branch="main",
            log_file=tmp_path / "file.log",
        )
        result = resolve_config(mode=Mode.COMMIT_PUSH, commit_message="sync", defaults=defaults)
        assert isinstance(result, Ok)
        config = result.value
        assert config.max_parallel == 2
        assert config.allowed_branches == {"main", "develop"}
        assert config.clone_branch == "main"
        assert config.log_file == tmp_path / "file.log"

    def test_explicit_empty_branch_option_disables_file_filter(self) -> None:
        defaults = FileDefaults(branches=("main",))
        result = resolve_config(
            mode=Mode.COMMIT_PUSH, commit_message="sync", branches="", defaults=defaults
        )
        assert isinstance(result, Ok)
        assert result.value.allowed_branches == frozenset()

    def test_workdir(self, tmp_path: Path) -> None:
        result = resolve_config(mode=Mode.CHECKOUT, workdir=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.workdir == tmp_path


class TestCheckTargets:
    def test_commit_mode_always_ok(self) -> None:
        assert isinstance(check_targets(RunConfig(commit_message="m"), ["repoA"]), Ok)

    def test_checkout_with_provider_ok(self) -> None:
        config = RunConfig(mode=Mode.CHECKOUT, provider_url="https://example.org/org")
        assert isinstance(check_targets(config, ["teamrepo"]), Ok)

    def test_checkout_full_locations_without_provider_ok(self) -> None:
        config = RunConfig(mode=Mode.CHECKOUT)
        targets = ["https://example.org/org/a.git", "git@example.org:org/b.git"]
        assert isinstance(check_targets(config, targets), Ok)

    def test_checkout_local_paths_without_provider_ok(self) -> None:
        config = RunConfig(mode=Mode.CHECKOUT)
        targets = ["/srv/git/repo.git", "./remotes/repo", "example.org:org/c.git"]
        assert check_targets(config, targets) == Ok(None)

    def test_checkout_bare_name_without_provider_rejected(self) -> None:
        config = RunConfig(mode=Mode.CHECKOUT)
        result = check_targets(config, ["https://example.org/org/a.git", "teamrepo"])
        assert isinstance(result, Err)
        assert "--provider-url" in result.error.message
        assert "teamrepo" in result.error.message


class TestLoadDefaults:
    def test_full_file(self, tmp_path: Path) -> None:
        path = tmp_path / "gmp.toml"
        path.write_text(
            "\n".join(
                [
                    "[defaults]",
                    "parallel = 4",
                    'branches = ["main", "develop"]',
                    'provider_url = "https://example.org/org"',
                    'log_file = "logs/audit.log"',
                    'clone_branch = "main"',
                ]
            ),
            encoding="utf-8",
        )

        result = load_defaults(path)

        assert isinstance(result, Ok)
        defaults = result.value
        assert defaults.parallel == 4
        assert defaults.branches == ("main", "develop")
        assert defaults.provider_url == "https://example.org/org"
        assert defaults.log_file == tmp_path / "logs" / "audit.log"
        assert defaults.clone_branch == "main"

    def test_comma_separated_branches(self, tmp_path: Path) -> None:
        path = tmp_path / "gmp.toml"
        path.write_text('[defaults]\nbranches = "main, develop"\n', encoding="utf-8")

        result = load_defaults(path)

        assert isinstance(result, Ok)
        assert result.value.branches == ("main", "develop")

    def test_missing_table_gives_empty_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "gmp.toml"
        path.write_text('[other]\nkey = "value"\n', encoding="utf-8")

        result = load_defaults(path)

        assert result == Ok(FileDefaults())

    def test_wrong_types_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "gmp.toml"
        path.write_text('[defaults]\nparallel = "many"\nprovider_url = 3\n', encoding="utf-8")

        result = load_defaults(path)

        assert result == Ok(FileDefaults())

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "gmp.toml"
        path.write_text("[defaults\n", encoding="utf-8")

        result = load_defaults(path)

        assert isinstance(result, Err)
        assert "invalid TOML" in result.error.message
        assert result.error.path == path

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_defaults(tmp_path / "nope.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message


class TestFindDefaultsFile:
    def test_found(self, tmp_path: Path) -> None:
        (tmp_path / "gmp.toml").write_text("", encoding="utf-8")
        assert find_defaults_file(tmp_path) == tmp_path / "gmp.toml"

    def test_absent(self, tmp_path: Path) -> None:
        assert find_defaults_file(tmp_path) is None


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert int(ErrorCode.OK) == 0
        assert int(ErrorCode.USER_ERROR) == 1
        assert int(ErrorCode.IO_ERROR) == 5

    def test_str(self) -> None:
        assert str(ErrorCode.USER_ERROR) == "user error"
