"""Configuration management for reposweep."""

import os
import tomllib
from pathlib import Path
from typing import Literal

import tomli_w
from pydantic import BaseModel, Field

from .constants import DEFAULT_MAX_UNTRACKED, DEFAULT_PUSH_STRATEGY

CONFIG_FILE = "config.toml"

DEFAULT_LABEL_WEIGHTS: dict[str, int] = {
    "security": 50,
    "critical": 40,
    "bug": 30,
    "regression": 30,
    "performance": 20,
    "enhancement": 10,
    "feature": 10,
    "documentation": 5,
}


class AgeTier(BaseModel):
    """Age bonus applied once an item is at least `min_days` old."""

    min_days: int = Field(ge=0)
    bonus: int


def _default_age_tiers() -> list[AgeTier]:
    return [
        AgeTier(min_days=90, bonus=40),
        AgeTier(min_days=30, bonus=30),
        AgeTier(min_days=14, bonus=15),
    ]


class ScoringConfig(BaseModel):
    """Weights for the work item priority score."""

    pr_base: int = 20
    issue_base: int = 10
    label_weights: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_LABEL_WEIGHTS))
    age_tiers: list[AgeTier] = Field(default_factory=_default_age_tiers)
    recency_window_days: int = Field(default=3, ge=0)
    recency_bonus: int = 15
    recent_review_penalty: int = 20
    draft_penalty: int = 10


class PreflightConfig(BaseModel):
    """Configuration for the repository preflight gate."""

    push_strategy: Literal["push", "none"] = DEFAULT_PUSH_STRATEGY
    max_untracked: int = Field(default=DEFAULT_MAX_UNTRACKED, ge=0)


class ReviewConfig(BaseModel):
    """Configuration for review sessions and their state."""

    state_dir: Path | None = Field(default=None, description="Directory for locks and history")
    cooldown_hours: int = Field(default=168, ge=0, description="Recent-review window")
    mode: str = Field(default="plan", description="Default session mode")


class SweepConfig(BaseModel):
    """Root configuration for reposweep."""

    review: ReviewConfig = Field(default_factory=ReviewConfig)
    preflight: PreflightConfig = Field(default_factory=PreflightConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


def default_config_dir() -> Path:
    """Get the default config directory ($XDG_CONFIG_HOME/reposweep)."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_config) if xdg_config else Path.home() / ".config"
    return base / "reposweep"


# Config directory selected by the CLI main callback
_config_dir: Path | None = None


def get_config_dir() -> Path:
    """Get the active config directory, falling back to the default."""
    return _config_dir or default_config_dir()


def set_config_dir(config_dir: Path | None) -> None:
    """Set the active config directory. Called by CLI main callback."""
    global _config_dir
    _config_dir = config_dir


def load_config(config_dir: Path) -> SweepConfig:
    """Load config from <config_dir>/config.toml.

    Args:
        config_dir: Directory holding config.toml

    Returns:
        Loaded configuration, or defaults if config.toml doesn't exist
    """
    config_path = config_dir / CONFIG_FILE
    if not config_path.exists():
        return SweepConfig()
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return SweepConfig.model_validate(data)


def write_config_template(config_dir: Path) -> Path:
    """Write default config.toml template.

    Args:
        config_dir: Directory to write config.toml into

    Returns:
        Path to the written config file
    """
    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / CONFIG_FILE
    template = {
        "review": {"cooldown_hours": 168, "mode": "plan"},
        "preflight": {
            "push_strategy": DEFAULT_PUSH_STRATEGY,
            "max_untracked": DEFAULT_MAX_UNTRACKED,
        },
        # Scoring weights: labels are matched case-insensitively and only the
        # highest matching weight counts
        "scoring": {
            "pr_base": 20,
            "issue_base": 10,
            "recency_window_days": 3,
            "recency_bonus": 15,
            "recent_review_penalty": 20,
            "draft_penalty": 10,
            "label_weights": dict(DEFAULT_LABEL_WEIGHTS),
            "age_tiers": [tier.model_dump() for tier in _default_age_tiers()],
        },
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
