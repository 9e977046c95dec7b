"""Preflight result model.

A preflight run yields either a pass or exactly one skip reason, the
first failing check in evaluation order.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class SkipReason(str, Enum):
    """Reasons a repository is skipped by the preflight gate, in check order."""

    NOT_A_GIT_REPO = "not_a_git_repo"
    GIT_EMAIL_NOT_CONFIGURED = "git_email_not_configured"
    GIT_NAME_NOT_CONFIGURED = "git_name_not_configured"
    SHALLOW_CLONE = "shallow_clone"
    DIRTY_SUBMODULES = "dirty_submodules"
    REBASE_IN_PROGRESS = "rebase_in_progress"
    MERGE_IN_PROGRESS = "merge_in_progress"
    CHERRY_PICK_IN_PROGRESS = "cherry_pick_in_progress"
    DETACHED_HEAD = "detached_HEAD"
    NO_UPSTREAM_BRANCH = "no_upstream_branch"
    DIVERGED_FROM_UPSTREAM = "diverged_from_upstream"
    UNMERGED_PATHS = "unmerged_paths"
    DIFF_CHECK_FAILED = "diff_check_failed"
    TOO_MANY_UNTRACKED_FILES = "too_many_untracked_files"


class PreflightResult(BaseModel):
    """Outcome of a preflight run against one working copy.

    Attributes:
        repo_path: Working copy that was checked.
        skip_reason: First failing check, or None if every check passed.
        detail: Extra context for the failure (counts, git output).
    """

    repo_path: Path = Field(description="Working copy that was checked")
    skip_reason: SkipReason | None = Field(default=None, description="First failing check")
    detail: str = Field(default="", description="Extra context for the failure")

    @property
    def passed(self) -> bool:
        """True when every check passed."""
        return self.skip_reason is None

    @property
    def skip_reason_tag(self) -> str:
        """Machine-matchable tag, empty on success."""
        return self.skip_reason.value if self.skip_reason else ""

    @property
    def message(self) -> str:
        """Human-readable message for the skip reason, empty on success."""
        from ..core.preflight import preflight_skip_reason_message

        return preflight_skip_reason_message(self.skip_reason) if self.skip_reason else ""

    @property
    def action(self) -> str:
        """Remediation action for the skip reason, empty on success."""
        from ..core.preflight import preflight_skip_reason_action

        return preflight_skip_reason_action(self.skip_reason) if self.skip_reason else ""
