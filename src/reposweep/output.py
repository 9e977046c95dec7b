"""Output formatting for reposweep CLI.

Human-readable output goes to the console (stderr). Machine-readable output,
JSON documents and TSV records, goes to stdout so it can be piped.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from rich.console import Console, RenderableType


@dataclass
class OutputContext:
    """Context for output formatting."""

    console: Console
    json_mode: bool = False

    def print(self, message: RenderableType, style: str | None = None) -> None:
        """Print message or renderable unless in JSON mode."""
        if not self.json_mode:
            self.console.print(message, style=style)

    def print_json(self, data: dict[str, Any]) -> None:
        """Print JSON data."""
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def emit(self, command: str, data: dict[str, Any]) -> None:
        """Print a command's JSON document, tagged with the command name."""
        self.print_json({"command": command, **data})

    def records(self, lines: Iterable[str]) -> None:
        """Write tab-separated records to stdout, one per line."""
        for line in lines:
            print(line)

    def result(self, data: dict[str, Any], message: str = "") -> None:
        """Print result in appropriate format."""
        if self.json_mode:
            self.print_json(data)
        elif message:
            self.console.print(message)

    def hint(self, action: str) -> None:
        """Print the operator action that resolves the last failure."""
        self.print(f"  [dim]Fix:[/dim] {action}")

    def warn(self, message: str) -> None:
        """Print a non-fatal warning. JSON mode stays silent."""
        self.print(f"[yellow]Warning: {message}[/yellow]")

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Print error in appropriate format."""
        if self.json_mode:
            self.print_json({"error": message, **(data or {})})
        else:
            self.console.print(f"[red]Error: {message}[/red]")

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Print success message in appropriate format."""
        if self.json_mode:
            self.print_json({"success": message, **(data or {})})
        else:
            self.console.print(f"[green]{message}[/green]")


# Global output context (set by cli.py main callback)
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Get the current output context.

    Returns a default stderr OutputContext if not yet initialized by CLI.
    """
    if _ctx is None:
        return OutputContext(Console(stderr=True))
    return _ctx


def set_output_context(ctx: OutputContext) -> None:
    """Set the global output context. Called by CLI main callback."""
    global _ctx
    _ctx = ctx
