"""External service integrations for reposweep.

This package provides interfaces to external tools:
- git: read-only git inspection used by the preflight gate
"""

from .git import (
    GitError,
    get_config_value,
    get_git_dir,
    git_succeeds,
    run_git,
    run_git_result,
)

__all__ = [
    "GitError",
    "get_config_value",
    "get_git_dir",
    "git_succeeds",
    "run_git",
    "run_git_result",
]
