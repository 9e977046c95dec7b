"""Pydantic data models for reposweep.

This package defines the data structures shared across the pipeline:
- Discovered work items and their scores (WorkItem, ScoredItem)
- Externally authored review plans (ReviewPlan and its entries)
- Review lock holder metadata (LockInfo)
- Preflight outcomes (SkipReason, PreflightResult)

Example:
    >>> from reposweep.models import LockInfo
    >>> LockInfo(run_id="nightly", mode="apply").model_dump_json()
"""

from .lock import LockInfo
from .plan import REQUIRED_PLAN_FIELDS, GhAction, PlanItem, PlanQuestion, ReviewPlan
from .preflight import PreflightResult, SkipReason
from .work_item import ItemType, ScoredItem, WorkItem

__all__ = [
    "REQUIRED_PLAN_FIELDS",
    "GhAction",
    "ItemType",
    "LockInfo",
    "PlanItem",
    "PlanQuestion",
    "PreflightResult",
    "ReviewPlan",
    "ScoredItem",
    "SkipReason",
    "WorkItem",
]
