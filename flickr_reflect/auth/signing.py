"""Request signing for the Flickr API."""

from __future__ import annotations

import hashlib
from typing import Any, Mapping


def stringify(value: Any) -> str:
    """Render a parameter value the way it is sent on the wire."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def sign(secret: str, params: Mapping[str, Any]) -> str:
    """Compute ``api_sig`` for a parameter set.

    The secret is followed by every ``key + value`` pair, sorted by key and
    then by the joined string, with no separators. The server recomputes the
    same digest, so the result only depends on the set of pairs and never on
    insertion order.
    """
    pairs = sorted((key, key + stringify(value)) for key, value in params.items())
    payload = secret + "".join(joined for _, joined in pairs)
    return hashlib.md5(payload.encode("utf-8")).hexdigest()
