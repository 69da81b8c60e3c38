"""Environment-driven settings for the scheduling backend.

Values are read once via :func:`load_settings` and handed to the components
that need them.  Invalid numbers fail fast with ``RuntimeError`` so that a
misconfigured deployment never starts silently with surprising defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_HORIZON_WEEKS = 12
DEFAULT_TIMEZONE = "Asia/Singapore"
MAX_BATCH_WRITES = 500

CLEANUP_CRON = "0 0 * * *"
INACTIVITY_CRON = "*/15 * * * *"

CALENDAR_BACKENDS = ("placeholder", "google")


def _positive_int(name: str, default: int, *, maximum: Optional[int] = None) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer (got {raw!r})") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be a positive integer (got {value})")
    if maximum is not None and value > maximum:
        raise RuntimeError(f"{name} must not exceed {maximum} (got {value})")
    return value


@dataclass(frozen=True)
class Settings:
    horizon_weeks: int = DEFAULT_HORIZON_WEEKS
    timezone: str = DEFAULT_TIMEZONE
    batch_size: int = MAX_BATCH_WRITES
    inactivity_minutes: int = 30
    retention_days: int = 30
    stale_active_hours: int = 24
    calendar_backend: str = "placeholder"
    google_client_id: str = ""
    google_client_secret: str = ""
    tasks_secret: str = ""
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build :class:`Settings` from the current environment."""

    backend = os.getenv("CALENDAR_BACKEND", "placeholder").strip().lower() or "placeholder"
    if backend not in CALENDAR_BACKENDS:
        raise RuntimeError(
            f"CALENDAR_BACKEND must be one of {', '.join(CALENDAR_BACKENDS)} (got {backend!r})"
        )

    return Settings(
        horizon_weeks=_positive_int("SCHEDULE_HORIZON_WEEKS", DEFAULT_HORIZON_WEEKS),
        timezone=os.getenv("SCHEDULE_TIMEZONE", DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE,
        batch_size=_positive_int("JANITOR_BATCH_SIZE", MAX_BATCH_WRITES, maximum=MAX_BATCH_WRITES),
        inactivity_minutes=_positive_int("INACTIVITY_MINUTES", 30),
        retention_days=_positive_int("RETENTION_DAYS", 30),
        stale_active_hours=_positive_int("STALE_ACTIVE_HOURS", 24),
        calendar_backend=backend,
        google_client_id=os.getenv("GOOGLE_CLIENT_ID", "").strip(),
        google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", "").strip(),
        tasks_secret=os.getenv("TASKS_SECRET", "").strip(),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )


__all__ = [
    "CLEANUP_CRON",
    "DEFAULT_HORIZON_WEEKS",
    "DEFAULT_TIMEZONE",
    "INACTIVITY_CRON",
    "MAX_BATCH_WRITES",
    "Settings",
    "load_settings",
]
