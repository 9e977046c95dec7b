"""Git operations for reposweep.

All commands run with `--no-optional-locks` so that read-only inspection
never rewrites the index of the repository being inspected.
"""

import subprocess
from pathlib import Path

from ..constants import GIT_TIMEOUT


class GitError(Exception):
    """Git command failed."""

    pass


def _git_command(args: tuple[str, ...]) -> list[str]:
    return ["git", "--no-optional-locks", *args]


def run_git_result(
    *args: str,
    cwd: Path | None = None,
    timeout: int | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the completed process without checking it.

    Args:
        *args: Git arguments
        cwd: Working directory
        timeout: Optional timeout in seconds (default: GIT_TIMEOUT)

    Returns:
        Completed process with text stdout/stderr

    Raises:
        GitError: If git is not installed or the command times out
    """
    timeout = timeout or GIT_TIMEOUT
    try:
        return subprocess.run(
            _git_command(args),
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {args[0]} timed out after {timeout} seconds") from e
    except FileNotFoundError:
        raise GitError("git not found in PATH") from None


def run_git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command and return stripped stdout.

    Args:
        *args: Git arguments
        cwd: Working directory
        check: Raise GitError on non-zero exit

    Returns:
        Stripped stdout

    Raises:
        GitError: If check is True and the command fails
    """
    result = run_git_result(*args, cwd=cwd)
    if check and result.returncode != 0:
        raise GitError(f"git {args[0]} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def git_succeeds(*args: str, cwd: Path | None = None) -> bool:
    """Return True if the git command exits 0.

    Timeouts and a missing git binary count as failure.
    """
    try:
        return run_git_result(*args, cwd=cwd).returncode == 0
    except GitError:
        return False


def get_git_dir(cwd: Path) -> Path:
    """Get the absolute path of the repository's git directory.

    Handles worktrees and submodules where .git is a file.
    """
    return Path(run_git("rev-parse", "--absolute-git-dir", cwd=cwd))


def get_config_value(key: str, cwd: Path | None = None) -> str:
    """Get an effective git config value, empty if unset."""
    return run_git("config", "--get", key, cwd=cwd, check=False)

