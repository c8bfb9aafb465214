"""
Configuration - Environment-driven settings.

All values are read from environment variables with defaults. Entry points
load a .env file first (python-dotenv) so the same variables can live there.

The Settings snapshot is passed into the engine, scheduler and reducers at
construction time; nothing below the entry points reads the environment.
"""

import os
from dataclasses import dataclass
from typing import Tuple

DEFAULT_REPORT_URL = "https://thunderbird.github.io/webext-reports/all.json"
DEFAULT_FINDER_URL = "https://extension-finder.thunderbird.net/"

# Enforce a full rebuild every 24h
DEFAULT_REBUILD_INTERVAL_MINUTES = 24 * 60

BADGE_COLOR_OK = "#27ae60"
BADGE_COLOR_ALERT = "#c0392b"
BADGE_COLOR_PENDING = "blue"
BADGE_TEXT_OK = "✓"
BADGE_TEXT_PENDING = "…"

ESR_EXPERIMENT_STATUSES = ("incompatible", "warning")


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> Tuple[str, ...]:
    raw = os.environ.get(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of the service configuration."""
    report_url: str = DEFAULT_REPORT_URL
    finder_url: str = DEFAULT_FINDER_URL
    rebuild_interval_minutes: int = DEFAULT_REBUILD_INTERVAL_MINUTES
    throttle_delay: float = 1.0
    fetch_timeout: float = 30.0
    bundled_id_suffixes: Tuple[str, ...] = ("mozilla.org",)
    esr_experiment_badge_color: str = BADGE_COLOR_ALERT
    esr_experiment_status: str = "incompatible"
    debug: bool = False
    store: str = "memory"
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_database: str = "compat_db"

    def __post_init__(self):
        if self.rebuild_interval_minutes < 1:
            raise ValueError("rebuild_interval_minutes must be >= 1")
        if self.throttle_delay < 0:
            raise ValueError("throttle_delay must be >= 0")
        if self.esr_experiment_status not in ESR_EXPERIMENT_STATUSES:
            raise ValueError(
                f"esr_experiment_status must be one of {ESR_EXPERIMENT_STATUSES}, "
                f"got '{self.esr_experiment_status}'"
            )
        if self.store not in ("memory", "mongo"):
            raise ValueError(f"store must be 'memory' or 'mongo', got '{self.store}'")


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    return Settings(
        report_url=os.environ.get("COMPAT_REPORT_URL", DEFAULT_REPORT_URL),
        finder_url=os.environ.get("COMPAT_FINDER_URL", DEFAULT_FINDER_URL),
        rebuild_interval_minutes=int(
            os.environ.get("COMPAT_REBUILD_INTERVAL_MINUTES", str(DEFAULT_REBUILD_INTERVAL_MINUTES))
        ),
        throttle_delay=float(os.environ.get("COMPAT_THROTTLE_DELAY", "1")),
        fetch_timeout=float(os.environ.get("COMPAT_FETCH_TIMEOUT", "30")),
        bundled_id_suffixes=_env_list("COMPAT_BUNDLED_ID_SUFFIXES", "mozilla.org"),
        esr_experiment_badge_color=os.environ.get(
            "COMPAT_ESR_EXPERIMENT_BADGE_COLOR", BADGE_COLOR_ALERT
        ),
        esr_experiment_status=os.environ.get("COMPAT_ESR_EXPERIMENT_STATUS", "incompatible"),
        debug=_env_bool("COMPAT_DEBUG"),
        store=os.environ.get("COMPAT_STORE", "memory"),
        mongo_uri=os.environ.get("MONGODB_URI", "mongodb://localhost:27017"),
        mongo_database=os.environ.get("MONGODB_DATABASE", "compat_db"),
    )
