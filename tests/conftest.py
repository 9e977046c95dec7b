"""Shared test fixtures for reposweep tests."""

import json
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

GitRunner = Callable[..., subprocess.CompletedProcess[str]]


def _git(*args: str, cwd: Path, check: bool = True) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=check,
        capture_output=True,
        text=True,
    )


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate git identity and XDG directories from the developer's machine.

    The global git config only sets the default branch, disables signing and
    allows file:// transport for submodule tests. Identity is configured per
    repository so tests can remove it.
    """
    home = tmp_path / "home"
    home.mkdir()
    gitconfig = home / ".gitconfig"
    gitconfig.write_text(
        '[init]\n\tdefaultBranch = main\n'
        '[commit]\n\tgpgsign = false\n'
        '[protocol "file"]\n\tallow = always\n'
    )
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(home / ".local" / "state"))
    for var in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def git() -> GitRunner:
    """Run git in a directory: git("status", cwd=path)."""
    return _git


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    """Empty state directory for locks and history."""
    d = tmp_path / "state"
    d.mkdir()
    return d


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository on branch main.

    Initializes a repo with local user config and an initial commit.
    The repo has no upstream.
    """
    repo = tmp_path / "repo"
    repo.mkdir()
    _git("init", cwd=repo)
    _git("symbolic-ref", "HEAD", "refs/heads/main", cwd=repo)
    _git("config", "user.email", "test@test.com", cwd=repo)
    _git("config", "user.name", "Test User", cwd=repo)

    (repo / "README.md").write_text("# Test\n")
    _git("add", ".", cwd=repo)
    _git("commit", "-m", "Initial commit", cwd=repo)
    return repo


@pytest.fixture
def remote_repo(tmp_path: Path) -> Path:
    """Empty bare repository used as origin."""
    remote = tmp_path / "remote.git"
    _git("init", "--bare", str(remote), cwd=tmp_path)
    _git("symbolic-ref", "HEAD", "refs/heads/main", cwd=remote)
    return remote


@pytest.fixture
def tracked_repo(git_repo: Path, remote_repo: Path) -> Path:
    """Git repository whose main branch tracks origin/main.

    This is the state a fully prepared working copy is in: it passes every
    preflight check with the default push strategy.
    """
    _git("remote", "add", "origin", str(remote_repo), cwd=git_repo)
    _git("push", "-u", "origin", "main", cwd=git_repo)
    return git_repo


@pytest.fixture
def graphql_response() -> dict[str, Any]:
    """Batched discovery response: one live repo, one archived, one fork."""

    def labels(*names: str) -> dict[str, Any]:
        return {"nodes": [{"name": name} for name in names]}

    def old_node(number: int, title: str) -> dict[str, Any]:
        return {
            "number": number,
            "title": title,
            "createdAt": "2025-01-01T00:00:00Z",
            "updatedAt": "2025-01-01T00:00:00Z",
            "isDraft": False,
            "labels": labels(),
        }

    return {
        "data": {
            "repo0": {
                "nameWithOwner": "octo/repo1",
                "isArchived": False,
                "isFork": False,
                "issues": {
                    "nodes": [
                        {
                            "number": 42,
                            "title": "Crash on start",
                            "createdAt": "2026-01-01T00:00:00Z",
                            "updatedAt": "2026-01-02T00:00:00Z",
                            "labels": labels("bug"),
                        }
                    ]
                },
                "pullRequests": {
                    "nodes": [
                        {
                            "number": 7,
                            "title": "Add retry option",
                            "createdAt": "2026-01-03T00:00:00Z",
                            "updatedAt": "2026-01-04T00:00:00Z",
                            "isDraft": False,
                            "labels": labels("enhancement"),
                        }
                    ]
                },
            },
            "repo1": {
                "nameWithOwner": "octo/archived",
                "isArchived": True,
                "isFork": False,
                "issues": {"nodes": [old_node(1, "Old")]},
                "pullRequests": {"nodes": []},
            },
            "repo2": {
                "nameWithOwner": "octo/forked",
                "isArchived": False,
                "isFork": True,
                "issues": {"nodes": []},
                "pullRequests": {"nodes": [old_node(3, "Fork PR")]},
            },
        }
    }


@pytest.fixture
def plan_document() -> dict[str, Any]:
    """Valid review plan document."""
    return {
        "schema_version": 1,
        "repo": "octo/repo1",
        "items": [{"type": "issue", "number": 42, "decision": "fix"}],
        "questions": [{"id": "q1", "prompt": "Apply?", "answered": False}],
        "gh_actions": [{"op": "comment", "target": "issue#42"}],
    }


@pytest.fixture
def write_plan(tmp_path: Path) -> Callable[[Any], Path]:
    """Write a plan document (or raw text) to a file and return its path."""

    def write(document: Any, name: str = "plan.json") -> Path:
        path = tmp_path / name
        path.write_text(document if isinstance(document, str) else json.dumps(document))
        return path

    return write
