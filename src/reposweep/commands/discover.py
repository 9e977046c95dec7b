"""Discover command: parse and rank work items."""

from pathlib import Path

import typer
from rich.table import Table

from ..config import get_config_dir, load_config
from ..core import ParseError, ReviewHistory, get_state_dir, parse_graphql_work_items
from ..core.scoring import rank_work_items
from ..models import ItemType
from ..output import get_output_context


def _read_input(source: Path) -> str:
    if str(source) == "-":
        return typer.get_text_stream("stdin").read()
    return source.read_text(encoding="utf-8")


def discover(
    source: Path = typer.Argument(
        ...,
        help="GraphQL batch response JSON file ('-' for stdin)",
    ),
    tsv: bool = typer.Option(
        False,
        "--tsv",
        help="Print tab-separated records instead of a table",
    ),
    limit: int | None = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Show only the top N items",
    ),
    state_dir: Path | None = typer.Option(
        None,
        "--state-dir",
        help="Directory holding review history",
    ),
) -> None:
    """Rank reviewable issues and pull requests from a discovery response."""
    ctx = get_output_context()
    config = load_config(get_config_dir())

    try:
        payload = _read_input(source)
    except (OSError, UnicodeDecodeError) as e:
        ctx.error(f"Cannot read discovery response: {e}")
        raise typer.Exit(1) from None

    try:
        items = parse_graphql_work_items(payload)
    except ParseError as e:
        ctx.error(str(e))
        raise typer.Exit(1) from None

    history = ReviewHistory(
        get_state_dir(config, state_dir),
        cooldown_hours=config.review.cooldown_hours,
    )
    ranked = rank_work_items(
        items,
        days_since=history.days_since,
        recently_reviewed=history.was_recently_reviewed,
        weights=config.scoring,
    )
    found = len(ranked)
    if limit is not None:
        ranked = ranked[:limit]

    if not ranked:
        ctx.console.print("[yellow]No work items need review[/yellow]")

    if ctx.json_mode:
        ctx.emit(
            "discover",
            {
                "summary": {
                    "items_found": found,
                    "by_type": {
                        "issues": sum(1 for i in items if i.type is ItemType.ISSUE),
                        "prs": sum(1 for i in items if i.type is ItemType.PR),
                    },
                },
                "count": len(ranked),
                "items": [
                    {**scored.item.model_dump(mode="json"), "score": scored.score}
                    for scored in ranked
                ],
            },
        )
        return

    if not ranked:
        return

    if tsv:
        ctx.records(f"{scored.item.to_record()}\t{scored.score}" for scored in ranked)
        return

    table = Table(title=f"Work items ({len(ranked)})")
    table.add_column("Score", justify="right")
    table.add_column("Repo")
    table.add_column("Type")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Labels")
    for scored in ranked:
        item = scored.item
        kind = f"{item.type.value} (draft)" if item.is_draft else item.type.value
        table.add_row(
            str(scored.score),
            item.repo,
            kind,
            str(item.number),
            item.title,
            ", ".join(item.labels),
        )
    ctx.print(table)
