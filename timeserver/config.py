"""Application settings and environment loading utilities."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from timeserver.rate_limit import RateConfig


def _load_dotenv() -> None:
    env_path = Path(".env")
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


_load_dotenv()


def _positive_int(value: Optional[str], name: str, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {value!r}") from exc
    if parsed <= 0:
        raise RuntimeError(f"{name} must be positive, got {parsed}")
    return parsed


def _split_addresses(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime configuration derived from environment variables."""

    host: str = "0.0.0.0"
    port: int = 9980
    rate_limit_requests: int = 100
    rate_limit_period_seconds: int = 3600
    tracked_clients: Tuple[str, ...] = ()
    timezone: str = "UTC"
    log_level: str = "INFO"

    @property
    def rate_config(self) -> RateConfig:
        return RateConfig(self.rate_limit_requests, self.rate_limit_period_seconds)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.getenv("TIMESERVER_HOST", "0.0.0.0"),
            port=_positive_int(os.getenv("TIMESERVER_PORT"), "TIMESERVER_PORT", 9980),
            rate_limit_requests=_positive_int(
                os.getenv("TIMESERVER_RATE_LIMIT_REQUESTS"),
                "TIMESERVER_RATE_LIMIT_REQUESTS",
                100,
            ),
            rate_limit_period_seconds=_positive_int(
                os.getenv("TIMESERVER_RATE_LIMIT_PERIOD_SECONDS"),
                "TIMESERVER_RATE_LIMIT_PERIOD_SECONDS",
                3600,
            ),
            tracked_clients=_split_addresses(os.getenv("TIMESERVER_TRACKED_CLIENTS")),
            timezone=os.getenv("TIMESERVER_TIMEZONE", "UTC"),
            log_level=os.getenv("TIMESERVER_LOG_LEVEL", "INFO").upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings.from_env()
