"""Git operations module.

- Repository: read-only probes on a single working copy
- Workflows: per-target commit & push and checkout state machines

Usage:
    from gmp.git import CommitPushWorkflow

    workflow = CommitPushWorkflow(config, runner=runner, audit=audit)
    outcome = workflow("repos/api")
    print(outcome.describe())
"""

from gmp.git.repository import (
    GitError,
    Repository,
)
from gmp.git.workflow import (
    CheckoutPlan,
    CheckoutWorkflow,
    CommitPushWorkflow,
    Outcome,
    OutcomeKind,
    Step,
    Workflow,
    WorkflowState,
    plan_checkout,
)

__all__ = [
    # Repository
    "GitError",
    "Repository",
    # Workflow
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
