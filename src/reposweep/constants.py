"""Constants for reposweep."""

# Subprocess timeouts (seconds)
GIT_TIMEOUT = 30
SESSION_TIMEOUT = 3600  # 1 hour for an external review session

# Lock and state artifacts (relative to the state directory)
REVIEW_LOCK_FILE = "review.lock"
REVIEW_LOCK_INFO_FILE = "review.lock.info"
STATE_LOCK_FILE = "state.lock"
REVIEW_HISTORY_FILE = "review-history.json"

# State lock wait (seconds)
STATE_LOCK_TIMEOUT = 10.0
STATE_LOCK_POLL_INTERVAL = 0.05

# Plan schema
PLAN_SCHEMA_VERSION = 1

# Preflight defaults
DEFAULT_PUSH_STRATEGY = "push"
DEFAULT_MAX_UNTRACKED = 1000
