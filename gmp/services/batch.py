"""Batch orchestration: one workflow per target, bounded parallelism.

Targets are dispatched in list order to a fixed pool of ``max_parallel``
worker threads; completion order is unconstrained. A failing target never
cancels or delays the others, and ``run`` returns only once every
workflow has reached a terminal state.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from gmp.core.config import Mode, RunConfig
from gmp.git.workflow import CheckoutWorkflow, CommitPushWorkflow, Outcome, Workflow
from gmp.output.audit import AuditSink
from gmp.output.console import ConsoleProtocol, Style
from gmp.platform.process import CommandRunner

__all__ = ["BatchService", "build_workflow"]


def build_workflow(
    config: RunConfig,
    *,
    runner: CommandRunner,
    audit: AuditSink,
) -> Workflow:
    """Create the workflow matching ``config.mode``."""
    if config.mode is Mode.CHECKOUT:
        return CheckoutWorkflow(config, runner=runner, audit=audit)
    return CommitPushWorkflow(config, runner=runner, audit=audit)


class BatchService:
    """Drive many workflows concurrently against a shared audit sink.

    Policy:
    - At most ``config.max_parallel`` workflows run at any instant.
    - No early termination: every target reaches a terminal state.
    - No aggregation: outcomes are reported one by one as they complete.
    """

    def __init__(
        self,
        config: RunConfig,
        *,
        audit: AuditSink,
        console: ConsoleProtocol,
        workflow: Workflow | None = None,
    ) -> None:
        self._config = config
        self._audit = audit
        self._console = console
        self._workflow = workflow or build_workflow(
            config,
            runner=CommandRunner(dry_run=config.dry_run, console=console),
            audit=audit,
        )

    def run(self, targets: Sequence[str]) -> list[Outcome]:
        """Process every target and wait for all of them.

        Returns:
            Outcomes in dispatch (target list) order.

        Raises:
            Exception: The first unexpected error raised inside a workflow,
                re-raised after all other workflows have finished.
        """
        self._audit.start()
        try:
            futures: list[Future[Outcome]] = []
            if targets:
                with ThreadPoolExecutor(
                    max_workers=self._config.max_parallel,
                    thread_name_prefix="gmp-worker",
                ) as pool:
                    futures = [pool.submit(self._run_one, target) for target in targets]
            return [f.result() for f in futures]
        finally:
            self._audit.finish()

    def _run_one(self, target: str) -> Outcome:
        try:
            outcome = self._workflow(target)
        except Exception as e:
            self._audit.record(target, f"aborted: unexpected error: {e!r}")
            self._console.error(f"{target}: unexpected error: {e}")
            raise
        self._report(outcome)
        return outcome

    def _report(self, outcome: Outcome) -> None:
        line = f"{outcome.target}: {outcome.describe()}"
        if outcome.succeeded:
            self._console.success(line)
        elif outcome.failed:
            self._console.error(line)
        else:
            self._console.print(line, Style.DIM)
