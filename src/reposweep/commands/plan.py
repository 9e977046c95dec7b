"""Plan validation command."""

from pathlib import Path

import typer

from ..core import validate_review_plan
from ..core.plan_validator import VALID
from ..output import get_output_context


def plan_validate(
    plan: Path = typer.Argument(..., help="Path to the review plan JSON"),
) -> None:
    """Validate a review plan before it is applied."""
    ctx = get_output_context()
    result = validate_review_plan(plan)

    if result != VALID:
        ctx.error(result, {"plan": str(plan), "valid": False})
        raise typer.Exit(1)

    ctx.result({"plan": str(plan), "valid": True, "result": VALID}, f"[green]{VALID}[/green]")
