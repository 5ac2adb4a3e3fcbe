"""Application package exports commonly used helpers for convenience."""

from .config import Settings, get_settings
from .logging_config import configure_logging
from .rate_limit import RateConfig, RateLimiter
from .utils import derive_client_identity

__all__ = [
    "RateConfig",
    "RateLimiter",
    "Settings",
    "configure_logging",
    "derive_client_identity",
    "get_settings",
]
