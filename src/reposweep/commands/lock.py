"""Review lock inspection commands."""

from pathlib import Path

import typer

from ..config import get_config_dir, load_config
from ..core import check_stale_lock, get_review_lock_info_file, get_state_dir, read_lock_info
from ..output import get_output_context

lock_app = typer.Typer(help="Review lock inspection and recovery")

StateDirOption = typer.Option(None, "--state-dir", help="Directory holding the review lock")


@lock_app.command("status")
def lock_status(state_dir: Path | None = StateDirOption) -> None:
    """Show the current review lock holder, if any."""
    ctx = get_output_context()
    resolved = get_state_dir(load_config(get_config_dir()), state_dir)
    info = read_lock_info(resolved)

    if info is None:
        corrupt = get_review_lock_info_file(resolved).exists()
        ctx.result(
            {"locked": False, "corrupt_info": corrupt},
            "[yellow]Lock info unreadable[/yellow]" if corrupt else "No active review session",
        )
        return

    ctx.result(
        {"locked": True, **info.model_dump(mode="json")},
        f"[bold]Active review session[/bold]\n"
        f"  run_id: {info.run_id}\n"
        f"  pid: {info.pid}\n"
        f"  mode: {info.mode}\n"
        f"  started: {info.started_at.strftime('%Y-%m-%d %H:%M:%S')} UTC",
    )


@lock_app.command("clear-stale")
def lock_clear_stale(state_dir: Path | None = StateDirOption) -> None:
    """Remove lock info left behind by a crashed session."""
    ctx = get_output_context()
    resolved = get_state_dir(load_config(get_config_dir()), state_dir)

    if check_stale_lock(resolved):
        ctx.success("Cleared stale review lock", {"cleared": True})
    else:
        ctx.result({"cleared": False}, "Nothing to clear")
