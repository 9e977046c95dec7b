"""Apply command: run an external session behind the apply gate."""

import logging
import shlex
import subprocess
from collections.abc import Callable
from pathlib import Path

import typer

from ..config import get_config_dir, load_config
from ..constants import SESSION_TIMEOUT
from ..core import (
    LockError,
    PlanValidationError,
    PreflightFailedError,
    ReviewHistory,
    ReviewLockHeldError,
    get_state_dir,
    run_gated_session,
)
from ..models import ReviewPlan, SkipReason
from ..output import get_output_context

logger = logging.getLogger(__name__)


def _external_session(
    command: list[str], plan_path: Path
) -> Callable[[ReviewPlan, Path], tuple[ReviewPlan, int]]:
    """Build a session driver that runs `command` with the plan path appended."""

    def run(plan: ReviewPlan, repo_path: Path) -> tuple[ReviewPlan, int]:
        logger.debug(f"Running {shlex.join(command)} in {repo_path}")
        result = subprocess.run(
            [*command, str(plan_path.resolve())],
            cwd=repo_path,
            timeout=SESSION_TIMEOUT,
        )
        return plan, result.returncode

    return run


def apply(
    plan: Path = typer.Argument(..., help="Path to the review plan JSON"),
    repo: Path = typer.Option(..., "--repo", "-r", help="Working copy to apply the plan in"),
    exec_cmd: str = typer.Option(
        ...,
        "--exec",
        "-e",
        help="Session command; the plan path is appended as last argument",
    ),
    run_id: str | None = typer.Option(None, "--run-id", help="Run ID recorded in the lock"),
    state_dir: Path | None = typer.Option(
        None,
        "--state-dir",
        help="Directory holding the review lock",
    ),
) -> None:
    """Validate, preflight and lock, then run the session command."""
    ctx = get_output_context()
    config = load_config(get_config_dir())
    resolved_state_dir = get_state_dir(config, state_dir)

    try:
        command = shlex.split(exec_cmd)
    except ValueError as e:
        ctx.error(f"Invalid session command: {e}")
        raise typer.Exit(1) from None
    if not command:
        ctx.error("Session command is empty")
        raise typer.Exit(1)

    try:
        review_plan, returncode = run_gated_session(
            plan,
            repo,
            _external_session(command, plan),
            config=config,
            state_dir=resolved_state_dir,
            run_id=run_id,
        )
    except PlanValidationError as e:
        ctx.error(f"Invalid plan: {e.reason}", {"plan": str(plan)})
        raise typer.Exit(1) from None
    except PreflightFailedError as e:
        r = e.result
        ctx.error(
            f"{r.repo_path}: {r.message}",
            {"skip_reason": r.skip_reason_tag, "action": r.action},
        )
        ctx.hint(r.action)
        code = 3 if r.skip_reason is SkipReason.NOT_A_GIT_REPO else 1
        raise typer.Exit(code) from None
    except ReviewLockHeldError as e:
        ctx.error(str(e), {"run_id": e.run_id, "pid": e.pid})
        raise typer.Exit(2) from None
    except LockError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None
    except FileNotFoundError:
        ctx.error(f"Session command not found: {command[0]}")
        raise typer.Exit(1) from None
    except subprocess.TimeoutExpired:
        ctx.error(f"Session timed out after {SESSION_TIMEOUT} seconds")
        raise typer.Exit(1) from None

    if returncode != 0:
        ctx.error(f"Session exited with code {returncode}", {"returncode": returncode})
        raise typer.Exit(returncode if returncode > 0 else 1)

    history = ReviewHistory(resolved_state_dir, cooldown_hours=config.review.cooldown_hours)
    try:
        for item in review_plan.items:
            history.record_review(review_plan.repo, item.type, item.number)
    except LockError as e:
        ctx.warn(f"Could not record review history: {e}")

    ctx.success(
        f"Applied plan for {review_plan.repo} ({len(review_plan.items)} items)",
        {"plan": str(plan), "repo": review_plan.repo, "items": len(review_plan.items)},
    )
