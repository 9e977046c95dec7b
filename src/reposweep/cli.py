"""reposweep CLI: discover, prioritize and safely apply repository reviews."""

from pathlib import Path

import typer

from reposweep import __version__

from .commands import apply, discover, init, lock_app, plan_validate, preflight
from .config import set_config_dir
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"reposweep {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="reposweep",
    help="Discover, prioritize and safely apply automated repository reviews",
    no_args_is_help=True,
)

# Sub-commands
plan_app = typer.Typer(help="Review plan commands")

app.add_typer(plan_app, name="plan")
app.add_typer(lock_app, name="lock")


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    config_dir: Path | None = typer.Option(
        None,
        "--config",
        help="Config directory (default: $XDG_CONFIG_HOME/reposweep)",
    ),
) -> None:
    """reposweep - automated repository review helper."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
    )
    set_output_context(OutputContext(console=console, json_mode=json_output))
    set_config_dir(config_dir)


app.command()(init)
app.command()(discover)
app.command()(preflight)
app.command()(apply)
plan_app.command("validate")(plan_validate)


if __name__ == "__main__":
    app()
