"""Review plan validation.

Plans come from an external planning phase and are untrusted. A plan is
either fully valid or rejected with one machine-matchable reason; it is
never partially accepted or coerced into shape.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from ..constants import PLAN_SCHEMA_VERSION
from ..models import REQUIRED_PLAN_FIELDS, ReviewPlan

VALID = "Valid"


class PlanValidationError(ValueError):
    """Review plan failed validation.

    Attributes:
        reason: Failure string, e.g. "Missing required fields: repo"
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


def _invalid_fields(error: ValidationError) -> list[str]:
    names: list[str] = []
    for err in error.errors():
        if err["loc"]:
            name = str(err["loc"][0])
            if name not in names:
                names.append(name)
    return [name for name in REQUIRED_PLAN_FIELDS if name in names]


def load_review_plan(plan_path: Path) -> ReviewPlan:
    """Load and validate a review plan.

    Args:
        plan_path: Path to the plan JSON document

    Returns:
        Validated ReviewPlan

    Raises:
        PlanValidationError: If the plan is unreadable, missing required
            fields, has ill-typed fields, or uses an unsupported schema
    """
    try:
        text = plan_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise PlanValidationError(f"Plan file not found: {plan_path}") from None
    except (OSError, UnicodeDecodeError) as e:
        raise PlanValidationError(f"Cannot read plan file {plan_path}: {e}") from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise PlanValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(document, dict):
        raise PlanValidationError("Plan must be a JSON object")

    missing = [name for name in REQUIRED_PLAN_FIELDS if name not in document]
    if missing:
        raise PlanValidationError(f"Missing required fields: {', '.join(missing)}")

    try:
        plan = ReviewPlan.model_validate_json(text)
    except ValidationError as e:
        fields = _invalid_fields(e) or ["plan"]
        raise PlanValidationError(f"Invalid field types: {', '.join(fields)}") from e

    if plan.schema_version != PLAN_SCHEMA_VERSION:
        raise PlanValidationError(f"Unsupported schema_version: {plan.schema_version}")
    return plan


def validate_review_plan(plan_path: Path) -> str:
    """Validate a review plan file.

    Args:
        plan_path: Path to the plan JSON document

    Returns:
        "Valid", or a single failure string such as
        "Missing required fields: repo, questions"
    """
    try:
        load_review_plan(plan_path)
    except PlanValidationError as e:
        return e.reason
    return VALID
