"""Lock manager for reposweep state and review sessions.

Provides two locking disciplines built on exclusive advisory file locks
(fcntl.flock):

- State lock: short critical section around an atomic JSON write, so a
  persisted state file is never observed half-written.
- Review lock: long-held lock for a whole discovery or apply session,
  with a sibling info file describing the holder for diagnostics and
  crash recovery.

The flock is the authority for mutual exclusion. The info file is
advisory: stale detection removes info left behind by a dead holder,
and PID reuse can only make that cleanup late, never unsafe.
"""

import contextlib
import json
import logging
import os
import tempfile
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..constants import (
    REVIEW_LOCK_FILE,
    REVIEW_LOCK_INFO_FILE,
    STATE_LOCK_FILE,
    STATE_LOCK_POLL_INTERVAL,
    STATE_LOCK_TIMEOUT,
)
from ..models import LockInfo

try:
    import fcntl
except ImportError:  # pragma: no cover - non-POSIX platforms
    fcntl = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class LockError(Exception):
    """Error acquiring or managing a lock."""


class LockUnavailableError(LockError):
    """OS-level file locking is not available on this platform."""


class LockTimeoutError(LockError):
    """State lock could not be acquired within the allowed wait."""


class ReviewLockHeldError(LockError):
    """Another review session holds the review lock.

    Attributes:
        run_id: Holder's run ID, if its info file was readable.
        pid: Holder's process ID, if its info file was readable.
    """

    def __init__(self, run_id: str | None = None, pid: int | None = None) -> None:
        self.run_id = run_id
        self.pid = pid
        if run_id is None and pid is None:
            message = "Another review is running (no info available)"
        else:
            message = (
                f"Another review session is active (run_id: {run_id or 'unknown'}, "
                f"pid: {pid if pid is not None else 'unknown'})"
            )
        super().__init__(message)


def get_review_lock_file(state_dir: Path) -> Path:
    """Get path to the review lock file."""
    return state_dir / REVIEW_LOCK_FILE


def get_review_lock_info_file(state_dir: Path) -> Path:
    """Get path to the review lock info file."""
    return state_dir / REVIEW_LOCK_INFO_FILE


def get_state_lock_file(state_dir: Path) -> Path:
    """Get path to the state lock file."""
    return state_dir / STATE_LOCK_FILE


def _require_fcntl() -> None:
    if fcntl is None:
        raise LockUnavailableError("fcntl file locking is required for reposweep locks")


def _try_flock(fd: int) -> bool:
    """Attempt a non-blocking exclusive flock.

    Returns:
        True if the lock was taken, False if another holder has it
    """
    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        return True
    except BlockingIOError:
        return False


def _unlock_and_close(fd: int) -> None:
    try:
        fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)


def _open_lock_file(lock_path: Path) -> int:
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    return os.open(str(lock_path), os.O_CREAT | os.O_RDWR, 0o644)


def _is_pid_running(pid: int) -> bool:
    """Check if a process with given PID is running."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)  # Signal 0 doesn't kill, just checks
    except PermissionError:
        return True  # Exists, owned by another user
    except (OSError, OverflowError):
        return False
    return True


# ============================================================================
# State lock
# ============================================================================


@dataclass
class StateLock:
    """Handle for a held state lock. Pass it to release_state_lock."""

    path: Path
    fd: int
    released: bool = False


def acquire_state_lock(
    state_dir: Path,
    timeout: float = STATE_LOCK_TIMEOUT,
    poll_interval: float = STATE_LOCK_POLL_INTERVAL,
) -> StateLock:
    """Acquire the exclusive state lock, waiting at most `timeout` seconds.

    Args:
        state_dir: Directory holding state files
        timeout: Maximum wait in seconds
        poll_interval: Delay between non-blocking attempts

    Returns:
        StateLock handle

    Raises:
        LockUnavailableError: If fcntl is not available
        LockTimeoutError: If the lock is still held after the wait
    """
    _require_fcntl()
    lock_path = get_state_lock_file(state_dir)
    fd = _open_lock_file(lock_path)
    deadline = time.monotonic() + timeout
    try:
        while not _try_flock(fd):
            if time.monotonic() >= deadline:
                raise LockTimeoutError(
                    f"Timed out after {timeout:g}s waiting for state lock {lock_path}"
                )
            time.sleep(poll_interval)
    except BaseException:
        os.close(fd)
        raise
    return StateLock(path=lock_path, fd=fd)


def release_state_lock(lock: StateLock | None) -> None:
    """Release a state lock. Releasing twice is a no-op."""
    if lock is None or lock.released:
        return
    lock.released = True
    _unlock_and_close(lock.fd)


@contextlib.contextmanager
def state_lock(state_dir: Path, timeout: float = STATE_LOCK_TIMEOUT) -> Iterator[StateLock]:
    """Hold the state lock for the duration of the block."""
    lock = acquire_state_lock(state_dir, timeout=timeout)
    try:
        yield lock
    finally:
        release_state_lock(lock)


def write_json_atomic(path: Path, payload: Any) -> None:
    """Write JSON to `path` via a temp file and rename.

    Readers see either the old content or the new content, never a
    partial write. Callers coordinating with other writers should hold
    the state lock.

    Args:
        path: Destination file
        payload: JSON-serializable value
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def write_state_file(
    state_dir: Path,
    path: Path,
    payload: Any,
    timeout: float = STATE_LOCK_TIMEOUT,
) -> None:
    """Atomically write a JSON state file while holding the state lock."""
    with state_lock(state_dir, timeout=timeout):
        write_json_atomic(path, payload)


# ============================================================================
# Review lock
# ============================================================================


@dataclass
class ReviewLock:
    """Handle for a held review lock. Pass it to release_review_lock."""

    lock_path: Path
    info_path: Path
    fd: int
    info: LockInfo = field(default_factory=LockInfo)
    released: bool = False


def read_lock_info(state_dir: Path) -> LockInfo | None:
    """Read the current holder's info.

    Returns:
        LockInfo if the info file exists and is valid, None otherwise
    """
    info_path = get_review_lock_info_file(state_dir)
    try:
        return LockInfo.model_validate_json(info_path.read_text())
    except (OSError, ValidationError):
        return None


def _read_holder(info_path: Path) -> tuple[str | None, int | None]:
    """Best-effort holder identity from the info file.

    Only `pid` needs to be well-formed; other fields are reported as-is.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the content is not a JSON object
    """
    data = json.loads(info_path.read_text())
    if not isinstance(data, dict):
        raise ValueError("lock info is not a JSON object")
    run_id = data.get("run_id")
    pid = data.get("pid")
    return (
        str(run_id) if run_id is not None else None,
        pid if isinstance(pid, int) and not isinstance(pid, bool) else None,
    )


@contextlib.contextmanager
def _probe_review_lock(state_dir: Path) -> Iterator[bool]:
    """Hold the review flock for the block if nobody else does.

    Yields False when another session holds it. Without fcntl there is
    nothing to probe and True is yielded.
    """
    if fcntl is None:
        yield True
        return
    try:
        fd = _open_lock_file(get_review_lock_file(state_dir))
    except OSError as e:
        logger.warning(f"Could not open review lock: {e}")
        yield False
        return
    try:
        locked = _try_flock(fd)
    except OSError:
        locked = False
    if not locked:
        os.close(fd)
        yield False
        return
    try:
        yield True
    finally:
        _unlock_and_close(fd)


def check_stale_lock(state_dir: Path) -> bool:
    """Remove review lock info left behind by a dead holder.

    Never raises: corrupt or hostile info files are expected input. Info is
    only deleted while this call holds `review.lock` itself, so a session
    that took the lock after the info was read keeps its fresh info.

    Args:
        state_dir: Directory holding the review lock

    Returns:
        True if stale info was found and cleared, False if there was
        nothing to clear, the recorded holder is still alive, or a live
        session holds the review lock
    """
    info_path = get_review_lock_info_file(state_dir)
    if not info_path.exists() and not info_path.is_symlink():
        return False

    try:
        run_id, pid = _read_holder(info_path)
    except (OSError, ValueError) as e:
        logger.warning(f"Clearing unreadable review lock info {info_path}: {e}")
    else:
        if pid is not None and _is_pid_running(pid):
            return False
        logger.info(f"Clearing stale review lock (run_id: {run_id}, pid: {pid})")

    with _probe_review_lock(state_dir) as free:
        if not free:
            logger.debug("Review lock is held; leaving lock info in place")
            return False
        try:
            info_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove stale review lock info {info_path}: {e}")
    return True


def acquire_review_lock(
    state_dir: Path,
    run_id: str | None = None,
    mode: str = "plan",
) -> ReviewLock:
    """Acquire the review lock without blocking.

    Args:
        state_dir: Directory holding the review lock
        run_id: Run identifier recorded in the info file (default: PID)
        mode: Session mode recorded in the info file

    Returns:
        ReviewLock handle

    Raises:
        LockUnavailableError: If fcntl is not available
        ReviewLockHeldError: If another session holds the lock
    """
    _require_fcntl()
    state_dir.mkdir(parents=True, exist_ok=True)
    check_stale_lock(state_dir)

    lock_path = get_review_lock_file(state_dir)
    info_path = get_review_lock_info_file(state_dir)
    fd = _open_lock_file(lock_path)

    try:
        locked = _try_flock(fd)
    except BaseException:
        os.close(fd)
        raise
    if not locked:
        os.close(fd)
        try:
            holder_run_id, holder_pid = _read_holder(info_path)
        except (OSError, ValueError):
            holder_run_id, holder_pid = None, None
        raise ReviewLockHeldError(run_id=holder_run_id, pid=holder_pid)

    pid = os.getpid()
    info = LockInfo(run_id=run_id or str(pid), pid=pid, mode=mode)
    try:
        write_json_atomic(info_path, info.model_dump(mode="json"))
    except BaseException:
        _unlock_and_close(fd)
        raise
    logger.debug(f"Acquired review lock (run_id: {info.run_id}, mode: {mode})")
    return ReviewLock(lock_path=lock_path, info_path=info_path, fd=fd, info=info)


def release_review_lock(lock: ReviewLock | None) -> None:
    """Release the review lock. Safe to call when nothing is held."""
    if lock is None or lock.released:
        return
    lock.released = True
    try:
        lock.info_path.unlink(missing_ok=True)
    finally:
        _unlock_and_close(lock.fd)
    logger.debug(f"Released review lock (run_id: {lock.info.run_id})")


@contextlib.contextmanager
def review_lock(
    state_dir: Path,
    run_id: str | None = None,
    mode: str = "plan",
) -> Iterator[ReviewLock]:
    """Hold the review lock for the duration of the block."""
    lock = acquire_review_lock(state_dir, run_id=run_id, mode=mode)
    try:
        yield lock
    finally:
        release_review_lock(lock)
