"""Tests for the repository preflight gate."""

import subprocess
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from reposweep.core import preflight as preflight_module
from reposweep.core.preflight import (
    SKIP_REASON_ACTIONS,
    SKIP_REASON_MESSAGES,
    preflight_skip_reason_action,
    preflight_skip_reason_message,
    repo_preflight_check,
)
from reposweep.models import SkipReason
from reposweep.services import GitError

GitRunner = Callable[..., subprocess.CompletedProcess[str]]


def tag(repo: Path, **kwargs: object) -> str:
    return repo_preflight_check(repo, **kwargs).skip_reason_tag


class TestPassingRepo:
    """A fully prepared working copy passes."""

    def test_clean_tracked_repo_passes(self, tracked_repo: Path) -> None:
        """Configured, attached, tracked and clean: empty skip reason."""
        result = repo_preflight_check(tracked_repo)
        assert result.passed
        assert result.skip_reason_tag == ""
        assert result.message == ""
        assert result.action == ""

    def test_idempotent(self, tracked_repo: Path) -> None:
        """Two runs against an unchanged repo give the same result."""
        assert repo_preflight_check(tracked_repo) == repo_preflight_check(tracked_repo)

    def test_does_not_modify_repo(self, tracked_repo: Path, git: GitRunner) -> None:
        """Preflight only reads repository state."""
        before = git("status", "--porcelain", cwd=tracked_repo).stdout
        repo_preflight_check(tracked_repo)
        assert git("status", "--porcelain", cwd=tracked_repo).stdout == before

    def test_accepts_string_path(self, tracked_repo: Path) -> None:
        """Paths may be given as strings."""
        assert repo_preflight_check(str(tracked_repo)).passed

    def test_unknown_push_strategy(self, tracked_repo: Path) -> None:
        """Only push and none are understood."""
        with pytest.raises(ValueError, match="push strategy"):
            repo_preflight_check(tracked_repo, push_strategy="force")


class TestSkipReasons:
    """Each check is triggered on its own."""

    def test_not_a_git_repo(self, tmp_path: Path) -> None:
        """A directory with no .git fails."""
        plain = tmp_path / "plain"
        plain.mkdir()
        assert tag(plain) == "not_a_git_repo"

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A path that does not exist fails the same way."""
        assert tag(tmp_path / "nope") == "not_a_git_repo"

    def test_email_not_configured(self, tracked_repo: Path, git: GitRunner) -> None:
        """Missing user.email fails before user.name is checked."""
        git("config", "--unset", "user.email", cwd=tracked_repo)
        git("config", "--unset", "user.name", cwd=tracked_repo)
        assert tag(tracked_repo) == "git_email_not_configured"

    def test_name_not_configured(self, tracked_repo: Path, git: GitRunner) -> None:
        """Missing user.name fails."""
        git("config", "--unset", "user.name", cwd=tracked_repo)
        assert tag(tracked_repo) == "git_name_not_configured"

    def test_shallow_clone(
        self, tracked_repo: Path, remote_repo: Path, tmp_path: Path, git: GitRunner
    ) -> None:
        """A depth-limited clone fails."""
        (tracked_repo / "second.txt").write_text("more\n")
        git("add", ".", cwd=tracked_repo)
        git("commit", "-m", "Second commit", cwd=tracked_repo)
        git("push", cwd=tracked_repo)

        shallow = tmp_path / "shallow"
        git("clone", "--depth", "1", f"file://{remote_repo}", str(shallow), cwd=tmp_path)
        git("config", "user.email", "test@test.com", cwd=shallow)
        git("config", "user.name", "Test User", cwd=shallow)
        assert tag(shallow) == "shallow_clone"

    def test_dirty_submodules(self, tracked_repo: Path, tmp_path: Path, git: GitRunner) -> None:
        """Uncommitted changes inside a submodule fail."""
        lib = tmp_path / "lib"
        lib.mkdir()
        git("init", cwd=lib)
        git("config", "user.email", "test@test.com", cwd=lib)
        git("config", "user.name", "Test User", cwd=lib)
        (lib / "lib.txt").write_text("lib\n")
        git("add", ".", cwd=lib)
        git("commit", "-m", "lib", cwd=lib)

        git(
            "-c", "protocol.file.allow=always", "submodule", "add", str(lib), "lib",
            cwd=tracked_repo,
        )
        git("commit", "-m", "Add submodule", cwd=tracked_repo)
        git("push", cwd=tracked_repo)
        assert tag(tracked_repo) == ""

        (tracked_repo / "lib" / "lib.txt").write_text("changed\n")
        assert tag(tracked_repo) == "dirty_submodules"

    @pytest.mark.parametrize(
        ("marker", "expected"),
        [
            ("rebase-merge", "rebase_in_progress"),
            ("rebase-apply", "rebase_in_progress"),
            ("MERGE_HEAD", "merge_in_progress"),
            ("CHERRY_PICK_HEAD", "cherry_pick_in_progress"),
        ],
    )
    def test_operation_markers(
        self, tracked_repo: Path, git: GitRunner, marker: str, expected: str
    ) -> None:
        """In-progress operation markers fail even when all else passes."""
        git_dir = tracked_repo / ".git"
        if marker.startswith("rebase"):
            (git_dir / marker).mkdir()
        else:
            head = git("rev-parse", "HEAD", cwd=tracked_repo).stdout
            (git_dir / marker).write_text(head)
        assert tag(tracked_repo) == expected

    def test_rebase_takes_precedence_over_merge(self, tracked_repo: Path) -> None:
        """Checks stop at the first failure in order."""
        (tracked_repo / ".git" / "rebase-merge").mkdir()
        (tracked_repo / ".git" / "MERGE_HEAD").write_text("0" * 40 + "\n")
        assert tag(tracked_repo) == "rebase_in_progress"

    def test_detached_head(self, tracked_repo: Path, git: GitRunner) -> None:
        """A detached HEAD fails."""
        git("checkout", "--detach", "HEAD", cwd=tracked_repo)
        assert tag(tracked_repo) == "detached_HEAD"

    def test_no_upstream_with_push_strategy(self, git_repo: Path) -> None:
        """Without an upstream, push strategy fails and none passes."""
        assert tag(git_repo) == "no_upstream_branch"
        assert tag(git_repo, push_strategy="push") == "no_upstream_branch"
        assert tag(git_repo, push_strategy="none") == ""

    def test_diverged_from_upstream(self, tracked_repo: Path, git: GitRunner) -> None:
        """Local and upstream each having unique commits fails."""
        (tracked_repo / "a.txt").write_text("a\n")
        git("add", ".", cwd=tracked_repo)
        git("commit", "-m", "Pushed commit", cwd=tracked_repo)
        git("push", cwd=tracked_repo)
        git("reset", "--hard", "HEAD~1", cwd=tracked_repo)
        (tracked_repo / "b.txt").write_text("b\n")
        git("add", ".", cwd=tracked_repo)
        git("commit", "-m", "Local commit", cwd=tracked_repo)

        assert tag(tracked_repo) == "diverged_from_upstream"
        assert tag(tracked_repo, push_strategy="none") == "diverged_from_upstream"

    def test_ahead_only_is_not_diverged(self, tracked_repo: Path, git: GitRunner) -> None:
        """Unpushed local commits alone are fine."""
        (tracked_repo / "a.txt").write_text("a\n")
        git("add", ".", cwd=tracked_repo)
        git("commit", "-m", "Local commit", cwd=tracked_repo)
        assert tag(tracked_repo) == ""

    def test_unmerged_paths(self, tracked_repo: Path, git: GitRunner) -> None:
        """Conflicted index entries fail once the merge marker is gone."""
        git("checkout", "-b", "other", cwd=tracked_repo)
        (tracked_repo / "README.md").write_text("# Other\n")
        git("commit", "-am", "Other change", cwd=tracked_repo)
        git("checkout", "main", cwd=tracked_repo)
        (tracked_repo / "README.md").write_text("# Main\n")
        git("commit", "-am", "Main change", cwd=tracked_repo)
        merge = git("merge", "other", cwd=tracked_repo, check=False)
        assert merge.returncode != 0

        assert tag(tracked_repo) == "merge_in_progress"
        (tracked_repo / ".git" / "MERGE_HEAD").unlink()
        assert tag(tracked_repo) == "unmerged_paths"

    def test_too_many_untracked_files(self, tracked_repo: Path) -> None:
        """Untracked files above the threshold fail."""
        for i in range(10):
            (tracked_repo / f"untracked_{i}.txt").write_text("x\n")
        result = repo_preflight_check(tracked_repo, max_untracked=5)
        assert result.skip_reason is SkipReason.TOO_MANY_UNTRACKED_FILES
        assert "10 untracked files" in result.detail
        assert tag(tracked_repo, max_untracked=10) == ""

    def test_untracked_files_in_subdirectories_counted(self, tracked_repo: Path) -> None:
        """Each untracked file counts, not each untracked directory."""
        nested = tracked_repo / "build"
        nested.mkdir()
        for i in range(3):
            (nested / f"out_{i}.o").write_text("x\n")
        assert tag(tracked_repo, max_untracked=2) == "too_many_untracked_files"

    def test_status_failure(self, tracked_repo: Path) -> None:
        """A failing git status reports diff_check_failed."""
        with patch.object(
            preflight_module, "_status_porcelain", return_value=(False, "fatal: index file corrupt")
        ):
            result = repo_preflight_check(tracked_repo)
        assert result.skip_reason_tag == "diff_check_failed"
        assert result.detail == "fatal: index file corrupt"

    def test_git_error_during_checks(self, tracked_repo: Path) -> None:
        """A git timeout mid-check reports diff_check_failed."""
        with patch.object(
            preflight_module, "get_git_dir", side_effect=GitError("git rev-parse timed out")
        ):
            assert tag(tracked_repo) == "diff_check_failed"


class TestSkipReasonTables:
    """Tests for skip reason messages and actions."""

    def test_every_reason_has_message_and_action(self) -> None:
        """Both tables cover every reason with non-empty text."""
        for reason in SkipReason:
            assert SKIP_REASON_MESSAGES[reason]
            assert SKIP_REASON_ACTIONS[reason]

    def test_lookup_by_tag_or_enum(self) -> None:
        """Lookups accept the enum or its tag string."""
        assert preflight_skip_reason_message("shallow_clone") == preflight_skip_reason_message(
            SkipReason.SHALLOW_CLONE
        )
        assert "unshallow" in preflight_skip_reason_action("shallow_clone")

    def test_unknown_reason_fallbacks(self) -> None:
        """Unknown tags get generic text rather than an error."""
        assert preflight_skip_reason_message("cosmic_rays") == "Unknown preflight issue: cosmic_rays"
        assert preflight_skip_reason_action("cosmic_rays") == "Investigate and fix the issue"

    def test_result_exposes_message_and_action(self, git_repo: Path) -> None:
        """A failing result carries the table text."""
        result = repo_preflight_check(git_repo)
        assert result.message == SKIP_REASON_MESSAGES[SkipReason.NO_UPSTREAM_BRANCH]
        assert result.action == SKIP_REASON_ACTIONS[SkipReason.NO_UPSTREAM_BRANCH]
