"""Client address helpers."""
from __future__ import annotations

import re

_DOTTED_QUAD = re.compile(r"\b([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\b")


def derive_client_identity(address: str | None) -> int:
    """Pack the first IPv4 literal in ``address`` into a 32-bit integer.

    Returns ``0`` when no dotted quad is present or one of its octets does not
    fit in a byte. ``0.0.0.0`` also maps to ``0``.
    """

    if not address:
        return 0
    match = _DOTTED_QUAD.search(address)
    if match is None:
        return 0

    identity = 0
    for group in match.groups():
        octet = int(group)
        if octet > 255:
            return 0
        identity = (identity << 8) | octet
    return identity
