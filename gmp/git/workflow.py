"""Per-repository workflows.

A workflow takes one target and drives it to exactly one terminal state.
Transitions are strictly forward; there is no retry and no rollback.

Commit & push (target = local path)::

    entry -> NOT_A_REPOSITORY
          -> BRANCH_CHECK_FAILED
          -> BRANCH_NOT_ALLOWED
          -> NO_CHANGES
          -> running: stage, commit, push -> SUCCEEDED | FAILED(step)

Checkout (target = repository name or clone URL)::

    entry -> ALREADY_EXISTS
          -> clone -> SUCCEEDED | FAILED(clone)

Each workflow writes its progress to the shared audit sink: one line when
commands start running, one per executed (or previewed) command and one
terminal line naming the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from gmp.core.config import RunConfig
from gmp.core.result import Err
from gmp.git.repository import Repository
from gmp.output.audit import AuditSink
from gmp.platform.process import Command, CommandRunner

__all__ = [
    "CheckoutPlan",
    "CheckoutWorkflow",
    "CommitPushWorkflow",
    "Outcome",
    "OutcomeKind",
    "Step",
    "Workflow",
    "WorkflowState",
    "plan_checkout",
]

GIT_SUFFIX = ".git"


class Step(Enum):
    """Operations a workflow can fail at."""

    RESOLVE_BRANCH = "resolve-branch"
    STAGE = "stage"
    COMMIT = "commit"
    PUSH = "push"
    CLONE = "clone"

    def __str__(self) -> str:
        return self.value


class OutcomeKind(Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class WorkflowState(Enum):
    """Terminal states of a workflow, with the kind of outcome they represent."""

    NOT_A_REPOSITORY = ("not a git repository", OutcomeKind.SKIPPED)
    BRANCH_NOT_ALLOWED = ("branch not allowed", OutcomeKind.SKIPPED)
    NO_CHANGES = ("no changes", OutcomeKind.SKIPPED)
    ALREADY_EXISTS = ("directory already exists", OutcomeKind.SKIPPED)
    BRANCH_CHECK_FAILED = ("branch check failed", OutcomeKind.FAILED)
    FAILED = ("failed", OutcomeKind.FAILED)
    SUCCEEDED = ("succeeded", OutcomeKind.SUCCEEDED)

    def __init__(self, label: str, kind: OutcomeKind) -> None:
        self.label = label
        self.kind = kind

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True, slots=True)
class Outcome:
    """Terminal result of one workflow.

    Attributes:
        target: The target line the workflow ran for
        state: Terminal state reached
        branch: Checked-out branch, when known
        step: Step that failed (failures only)
        error: Error text from git (failures only)
    """

    target: str
    state: WorkflowState
    branch: str | None = None
    step: Step | None = None
    error: str | None = None

    @property
    def kind(self) -> OutcomeKind:
        return self.state.kind

    @property
    def skipped(self) -> bool:
        return self.kind is OutcomeKind.SKIPPED

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.kind is OutcomeKind.FAILED

    def describe(self) -> str:
        """One-line description used for audit and console output."""
        if self.skipped:
            text = f"skipped: {self.state}"
        elif self.failed:
            text = f"failed at {self.step}: {self.error}" if self.step else f"failed: {self.error}"
        else:
            text = "succeeded"
        if self.branch:
            text += f" (branch '{self.branch}')"
        return text


class Workflow(Protocol):
    """Runs one target to a terminal outcome."""

    def __call__(self, target: str) -> Outcome: ...


class _AuditedWorkflow:
    def __init__(self, config: RunConfig, *, runner: CommandRunner, audit: AuditSink) -> None:
        self.config = config
        self.runner = runner
        self.audit = audit

    def _finish(self, outcome: Outcome) -> Outcome:
        self.audit.record(outcome.target, outcome.describe())
        return outcome

    def _execute(self, target: str, command: Command, cwd: Path) -> str | None:
        """Run one command through the runner. Returns the error detail on failure."""
        result = self.runner.run(command, cwd=cwd)
        if isinstance(result, Err):
            return result.error.detail
        verb = "would execute" if self.runner.dry_run else "executed"
        self.audit.record(target, f"{verb}: {command.preview()}")
        return None


class CommitPushWorkflow(_AuditedWorkflow):
    """Stage, commit and push pending changes of a local repository."""

    def steps(self) -> list[tuple[Step, Command]]:
        """Commands run for a repository that passed every check, in order."""
        return [
            (Step.STAGE, Command("git", ("add", "-A"))),
            (Step.COMMIT, Command("git", ("commit", "-m", self.config.commit_message))),
            (Step.PUSH, Command("git", ("push",))),
        ]

    def __call__(self, target: str) -> Outcome:
        repo = Repository(self.config.workdir / target)

        if not repo.is_repository():
            return self._finish(Outcome(target, WorkflowState.NOT_A_REPOSITORY))

        branch_result = repo.current_branch()
        if isinstance(branch_result, Err):
            return self._finish(
                Outcome(
                    target,
                    WorkflowState.BRANCH_CHECK_FAILED,
                    step=Step.RESOLVE_BRANCH,
                    error=branch_result.error.message,
                )
            )
        branch = branch_result.value

        if not self.config.branch_allowed(branch):
            return self._finish(Outcome(target, WorkflowState.BRANCH_NOT_ALLOWED, branch=branch))

        if not repo.has_pending_changes():
            return self._finish(Outcome(target, WorkflowState.NO_CHANGES, branch=branch))

        self.audit.record(target, f"processing on branch '{branch}'")
        for step, command in self.steps():
            failure = self._execute(target, command, repo.path)
            if failure is not None:
                return self._finish(
                    Outcome(
                        target,
                        WorkflowState.FAILED,
                        branch=branch,
                        step=step,
                        error=failure,
                    )
                )

        return self._finish(Outcome(target, WorkflowState.SUCCEEDED, branch=branch))


@dataclass(frozen=True, slots=True)
class CheckoutPlan:
    """Where to clone from and which directory to clone into."""

    url: str
    directory: str


def _strip_git_suffix(name: str) -> str:
    if name.endswith(GIT_SUFFIX) and len(name) > len(GIT_SUFFIX):
        return name[: -len(GIT_SUFFIX)]
    return name


def plan_checkout(target: str, provider_url: str | None) -> CheckoutPlan:
    """Compose the clone location and local directory for a target.

    With a provider URL the target is a repository name joined to it with
    exactly one ``/``:

        >>> plan_checkout("teamrepo", "https://example.org/org/")
        CheckoutPlan(url='https://example.org/org/teamrepo.git', directory='teamrepo')

    Without one the target is already a clone location and the directory is
    its last path segment:

        >>> plan_checkout("git@example.org:org/teamrepo.git", None)
        CheckoutPlan(url='git@example.org:org/teamrepo.git', directory='teamrepo')
    """
    if provider_url:
        name = _strip_git_suffix(target.strip("/"))
        return CheckoutPlan(
            url=f"{provider_url.rstrip('/')}/{name}{GIT_SUFFIX}",
            directory=name,
        )

    last = target.rstrip("/").replace(":", "/").rsplit("/", 1)[-1]
    return CheckoutPlan(url=target, directory=_strip_git_suffix(last))


class CheckoutWorkflow(_AuditedWorkflow):
    """Clone a repository unless its directory already exists."""

    def clone_command(self, plan: CheckoutPlan) -> Command:
        args = ["clone"]
        if self.config.clone_branch:
            args.extend(["-b", self.config.clone_branch])
        args.extend(["--", plan.url, plan.directory])
        return Command("git", tuple(args))

    def __call__(self, target: str) -> Outcome:
        plan = plan_checkout(target, self.config.provider_url)
        workdir = self.config.workdir

        # Existing checkouts are never overwritten; re-runs are idempotent.
        if (workdir / plan.directory).exists():
            return self._finish(Outcome(target, WorkflowState.ALREADY_EXISTS))

        failure = self._execute(target, self.clone_command(plan), workdir)
        if failure is not None:
            return self._finish(
                Outcome(target, WorkflowState.FAILED, step=Step.CLONE, error=failure)
            )
        return self._finish(Outcome(target, WorkflowState.SUCCEEDED, branch=self.config.clone_branch))
