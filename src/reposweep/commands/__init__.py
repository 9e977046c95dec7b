"""CLI command implementations for reposweep.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .apply import apply
from .discover import discover
from .init import init
from .lock import lock_app, lock_clear_stale, lock_status
from .plan import plan_validate
from .preflight import preflight

__all__ = [
    "apply",
    "discover",
    "init",
    "lock_app",
    "lock_clear_stale",
    "lock_status",
    "plan_validate",
    "preflight",
]
