"""Work item models produced by discovery.

A work item is one open issue or pull request surfaced for review. Items
are regenerated on every discovery run and never mutated afterwards.
"""

from datetime import UTC
from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class ItemType(str, Enum):
    """Kind of work item."""

    ISSUE = "issue"
    PR = "pr"


def _format_timestamp(value: AwareDatetime) -> str:
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def _clean_field(value: str) -> str:
    """Collapse characters that would break a tab-separated record."""
    return " ".join(value.replace("\t", " ").splitlines())


class WorkItem(BaseModel):
    """Single issue or pull request eligible for review.

    Attributes:
        repo: Repository in owner/name form.
        type: Issue or pull request.
        number: Issue or PR number, unique per repo and type.
        title: Item title.
        created_at: Creation time (UTC).
        updated_at: Last update time (UTC).
        labels: Distinct label names in document order.
        is_draft: Draft flag, always False for issues.
    """

    model_config = ConfigDict(frozen=True)

    repo: str = Field(description="Repository in owner/name form")
    type: ItemType = Field(description="issue or pr")
    number: int = Field(gt=0, description="Item number")
    title: str = Field(default="", description="Item title")
    created_at: AwareDatetime = Field(description="Creation timestamp")
    updated_at: AwareDatetime = Field(description="Last update timestamp")
    labels: tuple[str, ...] = Field(default=(), description="Label names")
    is_draft: bool = Field(default=False, description="Draft pull request")

    @property
    def key(self) -> str:
        """Stable identity used by review history."""
        return f"{self.repo}#{self.type.value}#{self.number}"

    def to_record(self) -> str:
        """Render as a tab-separated record.

        Columns: repo, type, number, title, createdAt, updatedAt,
        comma-joined labels, draft flag.
        """
        return "\t".join(
            [
                self.repo,
                self.type.value,
                str(self.number),
                _clean_field(self.title),
                _format_timestamp(self.created_at),
                _format_timestamp(self.updated_at),
                ",".join(_clean_field(label) for label in self.labels),
                "true" if self.is_draft else "false",
            ]
        )


class ScoredItem(BaseModel):
    """Work item with its priority score."""

    model_config = ConfigDict(frozen=True)

    item: WorkItem
    score: int
