"""
taskquest.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for the few settings that shape how completion
events are interpreted.  Secrets (``DATABASE_URL``, ``JWT_SECRET``) live in
``.env`` and are never read from here.

Usage::

    from taskquest.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.timezone)          # "Europe/Berlin"
    print(cfg.tz)                # ZoneInfo('Europe/Berlin')
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class TaskQuestConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # IANA zone used to find an event's calendar day and hour
    timezone: str = "UTC"

    # Early Bird window, [start, end) in local hours
    morning_start_hour: int = 6
    morning_end_hour: int = 12

    api_port: int = 8000

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> TaskQuestConfig:
    """Read *path* and return a :class:`TaskQuestConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ValueError
        If the timezone is unknown or the morning window is empty.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    defaults = TaskQuestConfig()
    cfg = TaskQuestConfig(
        timezone=str(raw.get("timezone", defaults.timezone)),
        morning_start_hour=int(raw.get("morning_start_hour", defaults.morning_start_hour)),
        morning_end_hour=int(raw.get("morning_end_hour", defaults.morning_end_hour)),
        api_port=int(raw.get("api_port", defaults.api_port)),
    )
    _validate(cfg)
    return cfg


def load_config_or_default(path: str | Path = "config.yaml") -> TaskQuestConfig:
    """Like :func:`load_config`, but a missing file yields the defaults."""
    try:
        return load_config(path)
    except FileNotFoundError:
        logger.info("No %s found, using default configuration.", path)
        return TaskQuestConfig()


def _validate(cfg: TaskQuestConfig) -> None:
    try:
        cfg.tz
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {cfg.timezone!r}") from exc

    if not 0 <= cfg.morning_start_hour < cfg.morning_end_hour <= 24:
        raise ValueError(
            "morning_start_hour must be before morning_end_hour, both within 0–24 "
            f"(got {cfg.morning_start_hour}–{cfg.morning_end_hour})"
        )
