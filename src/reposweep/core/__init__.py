"""Core business logic for reposweep.

This package contains the discover -> score -> validate -> gate pipeline:
- work_items: Batched GraphQL response parsing into work items
- scoring: Priority scoring and ranking
- review_history: Default time and recent-review oracles for scoring
- plan_validator: Review plan schema validation
- lock_manager: State lock, atomic writes, review lock and stale detection
- preflight: Repository safety checks and their messages/actions
- apply_gate: Validate, preflight and lock around an external session
- state_dir: State directory resolution
"""

from .apply_gate import PreflightFailedError, run_gated_session
from .lock_manager import (
    LockError,
    LockTimeoutError,
    LockUnavailableError,
    ReviewLock,
    ReviewLockHeldError,
    StateLock,
    acquire_review_lock,
    acquire_state_lock,
    check_stale_lock,
    get_review_lock_file,
    get_review_lock_info_file,
    read_lock_info,
    release_review_lock,
    release_state_lock,
    review_lock,
    state_lock,
    write_json_atomic,
    write_state_file,
)
from .plan_validator import PlanValidationError, load_review_plan, validate_review_plan
from .preflight import (
    SKIP_REASON_ACTIONS,
    SKIP_REASON_MESSAGES,
    preflight_skip_reason_action,
    preflight_skip_reason_message,
    repo_preflight_check,
)
from .review_history import ReviewHistory, days_since
from .scoring import calculate_priority_score, rank_work_items, score_work_item
from .state_dir import get_state_dir
from .work_items import (
    ParseError,
    format_work_item_records,
    iter_graphql_work_items,
    parse_graphql_work_items,
)

__all__ = [
    "SKIP_REASON_ACTIONS",
    "SKIP_REASON_MESSAGES",
    "LockError",
    "LockTimeoutError",
    "LockUnavailableError",
    "ParseError",
    "PlanValidationError",
    "PreflightFailedError",
    "ReviewHistory",
    "ReviewLock",
    "ReviewLockHeldError",
    "StateLock",
    "acquire_review_lock",
    "acquire_state_lock",
    "calculate_priority_score",
    "check_stale_lock",
    "days_since",
    "format_work_item_records",
    "get_review_lock_file",
    "get_review_lock_info_file",
    "get_state_dir",
    "iter_graphql_work_items",
    "load_review_plan",
    "parse_graphql_work_items",
    "preflight_skip_reason_action",
    "preflight_skip_reason_message",
    "rank_work_items",
    "read_lock_info",
    "release_review_lock",
    "release_state_lock",
    "repo_preflight_check",
    "review_lock",
    "run_gated_session",
    "score_work_item",
    "state_lock",
    "validate_review_plan",
    "write_json_atomic",
    "write_state_file",
]
