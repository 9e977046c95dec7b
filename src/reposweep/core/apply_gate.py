"""Apply-phase gate for automated review sessions.

Nothing mutates a repository until the plan validates, the working copy
passes preflight, and this process holds the review lock. The lock is
released on every exit path of the session.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from ..config import SweepConfig
from ..models import PreflightResult, ReviewPlan
from .lock_manager import review_lock
from .plan_validator import load_review_plan
from .preflight import repo_preflight_check

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PreflightFailedError(Exception):
    """Working copy failed preflight.

    Attributes:
        result: The failing preflight result.
    """

    def __init__(self, result: PreflightResult) -> None:
        self.result = result
        super().__init__(f"{result.repo_path}: {result.skip_reason_tag}: {result.message}")


def run_gated_session(
    plan_path: Path,
    repo_path: Path,
    session: Callable[[ReviewPlan, Path], T],
    *,
    config: SweepConfig,
    state_dir: Path,
    run_id: str | None = None,
) -> T:
    """Validate, preflight and lock, then run the session driver.

    Args:
        plan_path: Path to the review plan JSON
        repo_path: Working copy the session will mutate
        session: External session driver, called with (plan, repo_path)
        config: Loaded configuration (preflight settings)
        state_dir: Directory holding the review lock
        run_id: Run identifier recorded in the lock info

    Returns:
        Whatever the session driver returns

    Raises:
        PlanValidationError: If the plan is invalid
        PreflightFailedError: If the working copy fails preflight
        LockError: If the review lock cannot be acquired
    """
    plan = load_review_plan(plan_path)
    logger.info(f"Plan for {plan.repo} is valid ({len(plan.items)} items)")

    result = repo_preflight_check(
        repo_path,
        push_strategy=config.preflight.push_strategy,
        max_untracked=config.preflight.max_untracked,
    )
    if not result.passed:
        raise PreflightFailedError(result)

    with review_lock(state_dir, run_id=run_id, mode="apply") as lock:
        logger.info(f"Starting session {lock.info.run_id} in {repo_path}")
        return session(plan, repo_path)
