"""Repository preflight gate.

Runs ordered safety checks against a working copy before any automated
session may mutate it. The first failing check determines the skip
reason. Checks only read repository state.
"""

import logging
from pathlib import Path

from ..constants import DEFAULT_MAX_UNTRACKED, DEFAULT_PUSH_STRATEGY
from ..models import PreflightResult, SkipReason
from ..services import GitError, get_config_value, get_git_dir, git_succeeds, run_git_result

logger = logging.getLogger(__name__)

PUSH_STRATEGIES = ("push", "none")

SKIP_REASON_MESSAGES: dict[SkipReason, str] = {
    SkipReason.NOT_A_GIT_REPO: "Not a git repository",
    SkipReason.GIT_EMAIL_NOT_CONFIGURED: "Git user.email is not configured",
    SkipReason.GIT_NAME_NOT_CONFIGURED: "Git user.name is not configured",
    SkipReason.SHALLOW_CLONE: "Repository is a shallow clone",
    SkipReason.DIRTY_SUBMODULES: "Submodules have uncommitted changes",
    SkipReason.REBASE_IN_PROGRESS: "A rebase is in progress",
    SkipReason.MERGE_IN_PROGRESS: "A merge is in progress",
    SkipReason.CHERRY_PICK_IN_PROGRESS: "A cherry-pick is in progress",
    SkipReason.DETACHED_HEAD: "HEAD is detached (not on a branch)",
    SkipReason.NO_UPSTREAM_BRANCH: "Current branch has no upstream configured",
    SkipReason.DIVERGED_FROM_UPSTREAM: "Branch has diverged from its upstream",
    SkipReason.UNMERGED_PATHS: "Index contains unresolved merge conflicts",
    SkipReason.DIFF_CHECK_FAILED: "Git status check failed",
    SkipReason.TOO_MANY_UNTRACKED_FILES: "Too many untracked files",
}

SKIP_REASON_ACTIONS: dict[SkipReason, str] = {
    SkipReason.NOT_A_GIT_REPO: "Clone the repository again or check the configured path",
    SkipReason.GIT_EMAIL_NOT_CONFIGURED: "Run: git config --global user.email 'you@example.com'",
    SkipReason.GIT_NAME_NOT_CONFIGURED: "Run: git config --global user.name 'Your Name'",
    SkipReason.SHALLOW_CLONE: "Run: git fetch --unshallow",
    SkipReason.DIRTY_SUBMODULES: "Commit or stash changes inside submodules (git submodule status)",
    SkipReason.REBASE_IN_PROGRESS: "Finish or abort it: git rebase --continue or git rebase --abort",
    SkipReason.MERGE_IN_PROGRESS: "Finish or abort it: git merge --continue or git merge --abort",
    SkipReason.CHERRY_PICK_IN_PROGRESS: (
        "Finish or abort it: git cherry-pick --continue or git cherry-pick --abort"
    ),
    SkipReason.DETACHED_HEAD: "Check out a branch: git checkout <branch>",
    SkipReason.NO_UPSTREAM_BRANCH: (
        "Set an upstream: git branch --set-upstream-to=origin/<branch>, "
        "or use push strategy 'none'"
    ),
    SkipReason.DIVERGED_FROM_UPSTREAM: "Reconcile with upstream: git pull --rebase",
    SkipReason.UNMERGED_PATHS: "Resolve conflicts, then git add the resolved files",
    SkipReason.DIFF_CHECK_FAILED: "Run git status in the repository and fix the reported error",
    SkipReason.TOO_MANY_UNTRACKED_FILES: (
        "Clean up or .gitignore untracked files, or raise preflight.max_untracked"
    ),
}

UNKNOWN_REASON_ACTION = "Investigate and fix the issue"


def _as_reason(reason: SkipReason | str) -> SkipReason | None:
    try:
        return SkipReason(reason)
    except ValueError:
        return None


def preflight_skip_reason_message(reason: SkipReason | str) -> str:
    """Human-readable message for a skip reason."""
    known = _as_reason(reason)
    if known is None:
        return f"Unknown preflight issue: {reason}"
    return SKIP_REASON_MESSAGES[known]


def preflight_skip_reason_action(reason: SkipReason | str) -> str:
    """Remediation action for a skip reason."""
    known = _as_reason(reason)
    if known is None:
        return UNKNOWN_REASON_ACTION
    return SKIP_REASON_ACTIONS[known]


# ============================================================================
# Checks
# ============================================================================


def _is_git_work_tree(repo: Path) -> bool:
    if not repo.is_dir() or not (repo / ".git").exists():
        return False
    try:
        result = run_git_result("rev-parse", "--is-inside-work-tree", cwd=repo)
    except GitError:
        return False
    return result.returncode == 0 and result.stdout.strip() == "true"


def _is_shallow(repo: Path, git_dir: Path) -> bool:
    try:
        result = run_git_result("rev-parse", "--is-shallow-repository", cwd=repo)
    except GitError:
        result = None
    if result is not None and result.returncode == 0:
        return result.stdout.strip() == "true"
    return (git_dir / "shallow").exists()


def _has_dirty_submodules(repo: Path) -> bool:
    if not (repo / ".gitmodules").exists():
        return False
    status = run_git_result("submodule", "status", "--recursive", cwd=repo)
    if status.returncode != 0:
        return True
    # '+' checked-out commit differs from the recorded one, 'U' conflicts
    if any(line[:1] in ("+", "U") for line in status.stdout.splitlines()):
        return True
    changes = run_git_result(
        "submodule", "foreach", "--quiet", "--recursive", "git status --porcelain", cwd=repo
    )
    return changes.returncode != 0 or bool(changes.stdout.strip())


def _has_upstream(repo: Path) -> bool:
    return git_succeeds("rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}", cwd=repo)


def _is_diverged(repo: Path) -> bool:
    result = run_git_result("rev-list", "--left-right", "--count", "HEAD...@{upstream}", cwd=repo)
    if result.returncode != 0:
        return False
    try:
        ahead, behind = (int(part) for part in result.stdout.split())
    except ValueError:
        return False
    return ahead > 0 and behind > 0


def _has_unmerged_paths(repo: Path) -> bool:
    result = run_git_result("ls-files", "--unmerged", cwd=repo)
    return result.returncode == 0 and bool(result.stdout.strip())


def _status_porcelain(repo: Path) -> tuple[bool, str]:
    """Return (ok, output) for `git status --porcelain`."""
    try:
        result = run_git_result("status", "--porcelain", "--untracked-files=all", cwd=repo)
    except GitError as e:
        return False, str(e)
    if result.returncode != 0:
        return False, result.stderr.strip()
    return True, result.stdout


def _count_untracked(status_output: str) -> int:
    return sum(1 for line in status_output.splitlines() if line.startswith("??"))


def repo_preflight_check(
    repo_path: Path,
    push_strategy: str = DEFAULT_PUSH_STRATEGY,
    max_untracked: int = DEFAULT_MAX_UNTRACKED,
) -> PreflightResult:
    """Run the preflight checks against a working copy.

    Checks run in a fixed order and stop at the first failure.

    Args:
        repo_path: Path to the working copy
        push_strategy: "push" requires an upstream branch, "none" does not
        max_untracked: Maximum number of untracked files allowed

    Returns:
        PreflightResult with skip_reason None if every check passed

    Raises:
        ValueError: If push_strategy is not "push" or "none"
    """
    if push_strategy not in PUSH_STRATEGIES:
        raise ValueError(f"Unknown push strategy: {push_strategy}")

    repo = Path(repo_path)

    def fail(reason: SkipReason, detail: str = "") -> PreflightResult:
        logger.debug(f"Preflight failed for {repo}: {reason.value} {detail}".rstrip())
        return PreflightResult(repo_path=repo, skip_reason=reason, detail=detail)

    if not _is_git_work_tree(repo):
        return fail(SkipReason.NOT_A_GIT_REPO)

    try:
        if not get_config_value("user.email", cwd=repo):
            return fail(SkipReason.GIT_EMAIL_NOT_CONFIGURED)
        if not get_config_value("user.name", cwd=repo):
            return fail(SkipReason.GIT_NAME_NOT_CONFIGURED)

        git_dir = get_git_dir(repo)
        if _is_shallow(repo, git_dir):
            return fail(SkipReason.SHALLOW_CLONE)
        if _has_dirty_submodules(repo):
            return fail(SkipReason.DIRTY_SUBMODULES)

        if (git_dir / "rebase-merge").exists() or (git_dir / "rebase-apply").exists():
            return fail(SkipReason.REBASE_IN_PROGRESS)
        if (git_dir / "MERGE_HEAD").exists():
            return fail(SkipReason.MERGE_IN_PROGRESS)
        if (git_dir / "CHERRY_PICK_HEAD").exists():
            return fail(SkipReason.CHERRY_PICK_IN_PROGRESS)

        if not git_succeeds("symbolic-ref", "-q", "HEAD", cwd=repo):
            return fail(SkipReason.DETACHED_HEAD)

        has_upstream = _has_upstream(repo)
        if push_strategy == "push" and not has_upstream:
            return fail(SkipReason.NO_UPSTREAM_BRANCH)
        if has_upstream and _is_diverged(repo):
            return fail(SkipReason.DIVERGED_FROM_UPSTREAM)

        if _has_unmerged_paths(repo):
            return fail(SkipReason.UNMERGED_PATHS)
    except GitError as e:
        return fail(SkipReason.DIFF_CHECK_FAILED, str(e))

    ok, output = _status_porcelain(repo)
    if not ok:
        return fail(SkipReason.DIFF_CHECK_FAILED, output)

    untracked = _count_untracked(output)
    if untracked > max_untracked:
        return fail(
            SkipReason.TOO_MANY_UNTRACKED_FILES,
            f"{untracked} untracked files (max {max_untracked})",
        )

    return PreflightResult(repo_path=repo)
