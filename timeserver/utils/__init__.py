"""Utility helpers."""
from .addresses import derive_client_identity  # noqa: F401
from .time import resolve_timezone, sortable_timestamp  # noqa: F401
