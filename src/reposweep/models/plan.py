"""Review plan models.

A review plan is written by an external planning phase and describes
the mutations the apply phase intends to make. Models are strict: values
are never coerced, so `"1"` is rejected where an integer is required.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

REQUIRED_PLAN_FIELDS = ("schema_version", "repo", "items", "questions", "gh_actions")


class PlanItem(BaseModel):
    """Decision about a single issue or pull request."""

    model_config = ConfigDict(strict=True)

    type: Literal["issue", "pr"]
    number: int = Field(gt=0)
    decision: str


class PlanQuestion(BaseModel):
    """Question raised for a human during planning."""

    model_config = ConfigDict(strict=True)

    id: str
    prompt: str
    answered: bool


class GhAction(BaseModel):
    """Code-hosting operation to perform (comment, close, label, ...)."""

    model_config = ConfigDict(strict=True)

    op: str
    target: str


class ReviewPlan(BaseModel):
    """Validated review plan.

    Attributes:
        schema_version: Plan format version.
        repo: Target repository in owner/name form.
        items: Ordered item decisions, may be empty.
        questions: Ordered questions, may be empty.
        gh_actions: Ordered code-hosting operations, may be empty.
    """

    model_config = ConfigDict(strict=True)

    schema_version: int
    repo: str
    items: list[PlanItem]
    questions: list[PlanQuestion]
    gh_actions: list[GhAction]
