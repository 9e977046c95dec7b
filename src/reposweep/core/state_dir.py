"""State directory utilities."""

import os
from pathlib import Path

from ..config import SweepConfig


def get_state_dir(config: SweepConfig | None = None, override: Path | None = None) -> Path:
    """Get the directory holding review locks and history.

    Args:
        config: Loaded configuration, consulted for review.state_dir
        override: Explicit directory, takes precedence over everything

    Returns:
        Resolved state directory (not created)
    """
    if override is not None:
        return override.expanduser()
    if config is not None and config.review.state_dir is not None:
        return config.review.state_dir.expanduser()
    xdg_state = os.environ.get("XDG_STATE_HOME")
    base = Path(xdg_state) if xdg_state else Path.home() / ".local" / "state"
    return base / "reposweep"
