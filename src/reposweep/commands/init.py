"""Init command implementation."""

import subprocess
from pathlib import Path

import typer

from ..config import CONFIG_FILE, get_config_dir, load_config, write_config_template
from ..constants import GIT_TIMEOUT
from ..core import LockTimeoutError, LockUnavailableError, get_state_dir, state_lock
from ..output import get_output_context


def init(
    state_dir: Path | None = typer.Option(
        None,
        "--state-dir",
        help="Directory for review locks and history",
    ),
) -> None:
    """Write a config template and prepare the state directory."""
    ctx = get_output_context()
    config_dir = get_config_dir()
    config_path = config_dir / CONFIG_FILE

    if not config_path.exists():
        write_config_template(config_dir)
        ctx.console.print(f"[green]Created config template:[/green] {config_path}")
    else:
        ctx.console.print(f"[yellow]Config already exists:[/yellow] {config_path}")

    resolved_state_dir = get_state_dir(load_config(config_dir), state_dir)
    resolved_state_dir.mkdir(parents=True, exist_ok=True)
    ctx.console.print(f"[green]State directory:[/green] {resolved_state_dir}")

    all_ok = True
    try:
        result = subprocess.run(
            ["git", "--version"], capture_output=True, text=True, timeout=GIT_TIMEOUT
        )
        if result.returncode == 0:
            ctx.console.print("[green]✓[/green] git")
        else:
            ctx.console.print(f"[red]✗[/red] git: {result.stderr.strip()[:50]}")
            all_ok = False
    except FileNotFoundError:
        ctx.console.print("[red]✗[/red] git: not found in PATH")
        all_ok = False
    except subprocess.TimeoutExpired:
        ctx.console.print("[yellow]?[/yellow] git: timed out")

    try:
        with state_lock(resolved_state_dir, timeout=1.0):
            ctx.console.print("[green]✓[/green] file locking")
    except LockTimeoutError:
        ctx.console.print("[green]✓[/green] file locking (state lock currently held)")
    except LockUnavailableError as e:
        ctx.console.print(f"[red]✗[/red] file locking: {e}")
        all_ok = False

    if not all_ok:
        ctx.console.print("\n[yellow]Warning: Some required tools are missing[/yellow]")
        raise typer.Exit(2)

    ctx.console.print("\n[bold green]reposweep initialized successfully![/bold green]")
