"""Lock info model for the review lock.

Describes the holder of the review lock. Written next to the lock file
at acquisition and removed at release. A crashed holder leaves it behind,
which is what stale lock detection looks for.
"""

import os
from datetime import UTC, datetime

from pydantic import AwareDatetime, BaseModel, Field, field_serializer


def _utc_now() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


class LockInfo(BaseModel):
    """Review lock holder metadata written to review.lock.info.

    Attributes:
        run_id: Identifier of the review run (defaults to the holder's PID).
        started_at: When the lock was acquired (UTC).
        pid: Process ID of the lock holder.
        mode: Session mode, e.g. "plan" or "apply".
    """

    run_id: str = Field(default_factory=lambda: str(os.getpid()), description="Review run ID")
    started_at: AwareDatetime = Field(default_factory=_utc_now, description="Acquisition time")
    pid: int = Field(default_factory=os.getpid, gt=0, description="Holder process ID")
    mode: str = Field(default="plan", description="Session mode")

    @field_serializer("started_at")
    def _serialize_started_at(self, value: datetime) -> str:
        return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
