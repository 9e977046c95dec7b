"""Work item parsing for batched GraphQL discovery responses.

The discovery query batches many repositories into one request by
aliasing each repository field (repo0, repo1, ...). The response's
`data` object is therefore a mapping from alias to repository result.
Aliases are only used for iteration order and are dropped afterwards.
"""

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from ..models import ItemType, WorkItem

logger = logging.getLogger(__name__)

# Connection field for each item type, in emission order
_CONNECTIONS = (
    (ItemType.ISSUE, "issues"),
    (ItemType.PR, "pullRequests"),
)


class ParseError(ValueError):
    """Discovery response is malformed."""


def _decode(payload: str | bytes | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(payload, Mapping):
        return payload
    try:
        document = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in discovery response: {e}") from e
    if not isinstance(document, dict):
        raise ParseError("Discovery response must be a JSON object")
    return document


def _nodes(container: Any, field: str) -> list[Any]:
    """Return `container[field].nodes` or an empty list."""
    if not isinstance(container, Mapping):
        return []
    connection = container.get(field)
    if not isinstance(connection, Mapping):
        return []
    nodes = connection.get("nodes")
    return nodes if isinstance(nodes, list) else []


def _label_names(node: Mapping[str, Any]) -> tuple[str, ...]:
    names: dict[str, None] = {}
    for label in _nodes(node, "labels"):
        if isinstance(label, Mapping):
            name = label.get("name")
            if isinstance(name, str) and name:
                names.setdefault(name, None)
    return tuple(names)


def _build_item(repo: str, item_type: ItemType, node: Mapping[str, Any]) -> WorkItem:
    return WorkItem.model_validate(
        {
            "repo": repo,
            "type": item_type,
            "number": node.get("number"),
            "title": node.get("title") or "",
            "created_at": node.get("createdAt"),
            "updated_at": node.get("updatedAt"),
            "labels": _label_names(node),
            "is_draft": item_type is ItemType.PR and node.get("isDraft") is True,
        }
    )


def _repo_items(repo: str, entry: Mapping[str, Any]) -> Iterator[WorkItem]:
    for item_type, field in _CONNECTIONS:
        for index, node in enumerate(_nodes(entry, field)):
            if not isinstance(node, Mapping):
                logger.warning(f"{repo}: skipping non-object {field} node at index {index}")
                continue
            try:
                yield _build_item(repo, item_type, node)
            except ValidationError as e:
                fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
                logger.warning(
                    f"{repo}: skipping malformed {field} node at index {index} ({fields})"
                )


def iter_graphql_work_items(payload: str | bytes | Mapping[str, Any]) -> Iterator[WorkItem]:
    """Yield work items from a batched discovery response in document order.

    Args:
        payload: JSON text or decoded response body

    Yields:
        WorkItem for every issue and pull request of each repository that is
        neither archived nor a fork

    Raises:
        ParseError: If the response or one of its repository entries is malformed
    """
    document = _decode(payload)
    if "data" not in document:
        raise ParseError("Discovery response is missing 'data'")
    data = document["data"]
    if not isinstance(data, Mapping):
        raise ParseError("Discovery response 'data' must be an object")

    # Validate every entry up front so a malformed batch yields nothing
    entries: list[Mapping[str, Any] | None] = []
    for alias, entry in data.items():
        if entry is not None and not isinstance(entry, Mapping):
            raise ParseError(f"Repository entry '{alias}' must be an object")
        entries.append(entry)

    for entry in entries:
        if entry is None:
            logger.warning("Skipping unresolved repository entry in discovery response")
            continue
        repo = entry.get("nameWithOwner")
        if not isinstance(repo, str) or not repo:
            logger.warning("Skipping repository entry without nameWithOwner")
            continue
        if entry.get("isArchived") is True or entry.get("isFork") is True:
            logger.debug(f"Skipping archived or forked repository {repo}")
            continue
        yield from _repo_items(repo, entry)


def parse_graphql_work_items(payload: str | bytes | Mapping[str, Any]) -> list[WorkItem]:
    """Parse a batched discovery response into work items.

    See iter_graphql_work_items for filtering and ordering rules.

    Raises:
        ParseError: If the response or one of its repository entries is malformed
    """
    return list(iter_graphql_work_items(payload))


def format_work_item_records(items: Iterable[WorkItem]) -> str:
    """Render work items as newline-separated tab-separated records."""
    return "\n".join(item.to_record() for item in items)
