"""Settings read from environment variables (and an optional .env file)."""

import logging
import os
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from pathlib import Path
from typing import Mapping, Optional, Union

from dateutil import tz
from dotenv import load_dotenv

from .calculations import DateThresholds, DistanceThresholds
from .errors import ConfigError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_DIR = Path(__file__).parent.parent / "snapshots"


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Settings:
    """Runtime configuration, passed explicitly to the CLI, client and web app."""

    api_base_url: Optional[str] = None
    api_token: Optional[str] = None
    timeout: float = 10.0
    timezone: tzinfo = field(default_factory=lambda: tz.UTC)
    snapshot_dir: Path = DEFAULT_SNAPSHOT_DIR
    secret_key: str = "dev-secret-key-change-in-prod"
    maintenance_dates: DateThresholds = field(default_factory=lambda: DateThresholds(7, 30))
    expense_dates: DateThresholds = field(default_factory=lambda: DateThresholds(7, 14))
    distances: DistanceThresholds = field(default_factory=DistanceThresholds)

    def today(self) -> date:
        """Current calendar date in the configured timezone."""
        return datetime.now(self.timezone).date()

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from a mapping (os.environ by default)."""
        env = os.environ if env is None else env

        zone_name = env.get("FLEETLOG_TIMEZONE") or "UTC"
        zone = tz.gettz(zone_name)
        if zone is None:
            raise ConfigError(f"Unknown timezone: {zone_name!r}")

        try:
            maintenance_dates = DateThresholds(
                _int(env, "FLEETLOG_MAINT_URGENT_DAYS", 7),
                _int(env, "FLEETLOG_MAINT_SOON_DAYS", 30),
            )
            expense_dates = DateThresholds(
                _int(env, "FLEETLOG_EXPENSE_URGENT_DAYS", 7),
                _int(env, "FLEETLOG_EXPENSE_SOON_DAYS", 14),
            )
            distances = DistanceThresholds(
                _int(env, "FLEETLOG_URGENT_KM", 500),
                _int(env, "FLEETLOG_SOON_KM", 1000),
            )
        except ValidationError as e:
            raise ConfigError(str(e)) from e

        base_url = env.get("FLEETLOG_API_BASE_URL") or None
        return cls(
            api_base_url=base_url.rstrip("/") if base_url else None,
            api_token=env.get("FLEETLOG_API_TOKEN") or None,
            timeout=_float(env, "FLEETLOG_TIMEOUT", 10.0),
            timezone=zone,
            snapshot_dir=Path(env.get("FLEETLOG_SNAPSHOT_DIR") or DEFAULT_SNAPSHOT_DIR),
            secret_key=env.get("SECRET_KEY") or "dev-secret-key-change-in-prod",
            maintenance_dates=maintenance_dates,
            expense_dates=expense_dates,
            distances=distances,
        )


def load_settings(env_file: Optional[Union[str, Path]] = None) -> Settings:
    """Load .env (if present) into the environment, then read settings."""
    if env_file is not None:
        loaded = load_dotenv(env_file)
    else:
        loaded = load_dotenv()
    if loaded:
        logger.debug("Loaded environment from %s", env_file or ".env")
    return Settings.from_env()
