"""Review history used by the priority scorer.

Provides the two capabilities the scorer depends on: elapsed days since
a timestamp, and whether an item was reviewed within the cooldown
window. History is a small JSON file under the state directory. Each
record reloads, merges and rewrites it with the state lock held, so
concurrent writers never drop each other's entries.
"""

import json
import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path

from ..constants import REVIEW_HISTORY_FILE
from ..models import ItemType
from .lock_manager import state_lock, write_json_atomic

logger = logging.getLogger(__name__)


def days_since(timestamp: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since `timestamp`, never negative.

    Naive timestamps are taken as UTC.
    """
    now = now or datetime.now(UTC)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return max((now - timestamp).days, 0)


def history_key(repo: str, item_type: ItemType | str, number: int) -> str:
    """Key identifying an item in the history file."""
    return f"{repo}#{ItemType(item_type).value}#{number}"


class ReviewHistory:
    """Last-review timestamps per work item.

    Args:
        state_dir: Directory holding the history file and state lock
        cooldown_hours: Window during which a reviewed item counts as recent
        now: Clock override, mostly for tests
    """

    def __init__(
        self,
        state_dir: Path,
        cooldown_hours: int = 168,
        now: datetime | None = None,
    ) -> None:
        self.state_dir = state_dir
        self.path = state_dir / REVIEW_HISTORY_FILE
        self.cooldown = timedelta(hours=cooldown_hours)
        self._now = now
        self._reviewed: dict[str, datetime] = self._load()

    def now(self) -> datetime:
        return self._now or datetime.now(UTC)

    def _load(self) -> dict[str, datetime]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
            items = data["items"]
            return {key: datetime.fromisoformat(value) for key, value in items.items()}
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable review history {self.path}: {e}")
            return {}

    def last_reviewed(self, repo: str, item_type: ItemType | str, number: int) -> datetime | None:
        """Timestamp of the last recorded review, if any."""
        return self._reviewed.get(history_key(repo, item_type, number))

    def was_recently_reviewed(self, repo: str, item_type: ItemType | str, number: int) -> bool:
        """True if the item was reviewed within the cooldown window."""
        reviewed_at = self.last_reviewed(repo, item_type, number)
        if reviewed_at is None:
            return False
        if reviewed_at.tzinfo is None:
            reviewed_at = reviewed_at.replace(tzinfo=UTC)
        return self.now() - reviewed_at < self.cooldown

    def days_since(self, timestamp: datetime) -> int:
        """Whole days elapsed since `timestamp` using this history's clock."""
        return days_since(timestamp, now=self.now())

    def record_review(
        self,
        repo: str,
        item_type: ItemType | str,
        number: int,
        reviewed_at: datetime | None = None,
    ) -> None:
        """Record a review of one item and persist the history atomically.

        Raises:
            LockError: If the state lock cannot be acquired
        """
        reviewed_at = reviewed_at or self.now()
        if reviewed_at.tzinfo is None:
            reviewed_at = reviewed_at.replace(tzinfo=UTC)
        with state_lock(self.state_dir):
            self._reviewed = self._load()
            self._reviewed[history_key(repo, item_type, number)] = reviewed_at
            payload = {
                "items": {
                    key: value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
                    for key, value in sorted(self._reviewed.items())
                }
            }
            write_json_atomic(self.path, payload)
