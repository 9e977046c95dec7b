"""Preflight command: check working copies before automation runs."""

from pathlib import Path

import typer

from ..config import get_config_dir, load_config
from ..core import repo_preflight_check
from ..core.preflight import PUSH_STRATEGIES
from ..output import get_output_context


def preflight(
    repos: list[Path] = typer.Argument(..., help="Working copies to check"),
    push_strategy: str | None = typer.Option(
        None,
        "--push-strategy",
        help="'push' requires an upstream branch, 'none' does not",
    ),
    max_untracked: int | None = typer.Option(
        None,
        "--max-untracked",
        min=0,
        help="Maximum number of untracked files allowed",
    ),
) -> None:
    """Run repository safety checks and report the first failure per repo."""
    ctx = get_output_context()
    config = load_config(get_config_dir())

    strategy = push_strategy or config.preflight.push_strategy
    if strategy not in PUSH_STRATEGIES:
        ctx.error(f"Unknown push strategy: {strategy} (expected one of: push, none)")
        raise typer.Exit(1)
    threshold = config.preflight.max_untracked if max_untracked is None else max_untracked

    results = [
        repo_preflight_check(repo, push_strategy=strategy, max_untracked=threshold)
        for repo in repos
    ]

    if ctx.json_mode:
        ctx.emit(
            "preflight",
            {
                "results": [
                    {
                        "repo": str(r.repo_path),
                        "passed": r.passed,
                        "skip_reason": r.skip_reason_tag,
                        "message": r.message,
                        "action": r.action,
                        "detail": r.detail,
                    }
                    for r in results
                ],
            },
        )
    else:
        for r in results:
            if r.passed:
                ctx.print(f"[green]✓[/green] {r.repo_path}")
                continue
            ctx.print(f"[red]✗[/red] {r.repo_path}: {r.skip_reason_tag}")
            ctx.print(f"  {r.message}" + (f" ({r.detail})" if r.detail else ""))
            ctx.hint(r.action)

    if not all(r.passed for r in results):
        raise typer.Exit(1)
