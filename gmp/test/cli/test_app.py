from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

import gmp.cli.app as app_module
from gmp import __version__
from gmp.cli.context import CLIContext
from gmp.output.console import MockConsole, Style

runner = CliRunner()


@pytest.fixture
def console(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> MockConsole:
    mock = MockConsole()

    def fake_build_context() -> CLIContext:
        return CLIContext(cwd=tmp_path, console=mock)

    monkeypatch.setattr(app_module, "build_context", fake_build_context)
    monkeypatch.chdir(tmp_path)
    return mock


def _repo_file(tmp_path: Path, *lines: str) -> Path:
    path = tmp_path / "repos.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_version() -> None:
    result = runner.invoke(app_module.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_repo_file_required(console: MockConsole) -> None:
    result = runner.invoke(app_module.app, ["Update all repos"])

    assert result.exit_code == 1
    assert console.find("--repo-file is required")


def test_missing_repo_file(tmp_path: Path, console: MockConsole) -> None:
    result = runner.invoke(
        app_module.app, ["--repo-file", str(tmp_path / "nope.txt"), "Update all repos"]
    )

    assert result.exit_code == 1
    assert console.find("repo file not found")


def test_commit_message_required(tmp_path: Path, console: MockConsole) -> None:
    repos = _repo_file(tmp_path, "repoA")

    result = runner.invoke(app_module.app, ["--repo-file", str(repos)])

    assert result.exit_code == 1
    assert console.find("commit message required")
    assert not (tmp_path / "git-multi-push.log").exists()


def test_parallel_must_be_positive(tmp_path: Path, console: MockConsole) -> None:
    repos = _repo_file(tmp_path, "repoA")

    result = runner.invoke(
        app_module.app, ["--repo-file", str(repos), "--parallel", "0", "Update all repos"]
    )

    assert result.exit_code == 1
    assert console.has_error()


def test_checkout_bare_name_needs_provider(tmp_path: Path, console: MockConsole) -> None:
    repos = _repo_file(tmp_path, "teamrepo")

    result = runner.invoke(app_module.app, ["--repo-file", str(repos), "--checkout"])

    assert result.exit_code == 1
    assert console.find("--provider-url")
    assert not (tmp_path / "git-multi-push.log").exists()


def test_dry_run_commit(tmp_path: Path, console: MockConsole) -> None:
    repos = _repo_file(tmp_path, "repoA", "", "repoB")

    result = runner.invoke(
        app_module.app, ["--repo-file", str(repos), "--dry", "Update all repos"]
    )

    assert result.exit_code == 0
    assert console.find("dry-run: no command will be executed")[0].style == Style.WARNING
    assert console.find("repoA: skipped: not a git repository")
    assert console.find("repoB: skipped: not a git repository")
    assert console.messages[-1] == "All jobs finished!"

    log = (tmp_path / "git-multi-push.log").read_text(encoding="utf-8")
    assert "=== Starting operation: " in log
    assert "[repoA] skipped: not a git repository" in log
    assert "=== All jobs finished ===" in log


def test_dry_run_checkout_with_config_file(tmp_path: Path, console: MockConsole) -> None:
    repos = _repo_file(tmp_path, "teamrepo")
    (tmp_path / "gmp.toml").write_text(
        '[defaults]\nprovider_url = "https://example.org/org"\nlog_file = "logs/audit.log"\n',
        encoding="utf-8",
    )

    result = runner.invoke(app_module.app, ["--repo-file", str(repos), "--checkout", "--dry"])

    assert result.exit_code == 0
    assert not (tmp_path / "teamrepo").exists()
    log = (tmp_path / "logs" / "audit.log").read_text(encoding="utf-8")
    assert "[teamrepo] would execute: git clone -- https://example.org/org/teamrepo.git teamrepo" in log


def test_invalid_config_file(tmp_path: Path, console: MockConsole) -> None:
    repos = _repo_file(tmp_path, "repoA")
    config = tmp_path / "custom.toml"
    config.write_text("[defaults\n", encoding="utf-8")

    result = runner.invoke(
        app_module.app,
        ["--repo-file", str(repos), "--config", str(config), "Update all repos"],
    )

    assert result.exit_code == 1
    assert console.find("invalid TOML")


def test_unopenable_log_file(tmp_path: Path, console: MockConsole) -> None:
    repos = _repo_file(tmp_path, "repoA")
    (tmp_path / "taken").mkdir()

    result = runner.invoke(
        app_module.app,
        ["--repo-file", str(repos), "--log-file", str(tmp_path / "taken"), "Update all repos"],
    )

    assert result.exit_code == 5
    assert console.find("cannot open log file")


def test_checkout_local_path_without_provider(tmp_path: Path, console: MockConsole) -> None:
    repos = _repo_file(tmp_path, "/srv/git/teamrepo.git", "../mirror/other.git")

    result = runner.invoke(app_module.app, ["--repo-file", str(repos), "--checkout", "--dry"])

    assert result.exit_code == 0
    log = (tmp_path / "git-multi-push.log").read_text(encoding="utf-8")
    assert "would execute: git clone -- /srv/git/teamrepo.git teamrepo" in log
    assert "would execute: git clone -- ../mirror/other.git other" in log
