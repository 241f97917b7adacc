"""Configuration helpers for the flickr-reflect client."""

from __future__ import annotations

import os

DEFAULT_REST_URL = os.environ.get("FLICKR_REST_URL", "https://api.flickr.com/services/rest/")
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_CONCURRENCY = 8

# Prefix the server puts in front of every method name.
METHOD_PREFIX = "flickr"
# Namespace holding the frob/token exchange; always discovered.
AUTH_NAMESPACE = "auth"

REFLECTION_GET_METHODS = "flickr.reflection.getMethods"
REFLECTION_GET_METHOD_INFO = "flickr.reflection.getMethodInfo"


def sanitize_url(url: str) -> str:
    """Ensure the REST endpoint always ends with exactly one trailing slash."""

    return url.rstrip("/") + "/"
