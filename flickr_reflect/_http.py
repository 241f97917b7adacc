"""Shared HTTP request utilities for sync and async clients."""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

import httpx

from .auth.signing import sign, stringify
from .auth.types import Credentials
from .exceptions import APIError, MissingSharedSecret, TransportError

FORCE_SIGN = "force_sign"

# Characters left alone by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_headers() -> dict[str, str]:
    """Build request headers identifying the client."""
    from . import __version__

    return {
        "Accept": "*/*",
        "User-Agent": f"flickr-reflect/{__version__}",
    }


def standard_params(method: str, api_key: str) -> dict[str, str]:
    return {
        "format": "json",
        "api_key": api_key,
        "nojsoncallback": "1",
        "method": method,
    }


def build_url(
    rest_url: str,
    method: str,
    credentials: Credentials,
    params: Mapping[str, Any] | None = None,
    *,
    sign_required: bool = False,
) -> str:
    """Build the request URL for a REST method.

    Caller params come first, then the standard params, then ``api_sig``.
    The query order is cosmetic; the signature sorts its own input.
    """
    query: dict[str, Any] = dict(params or {})
    query.update(standard_params(method, credentials.api_key))

    if sign_required:
        if not credentials.can_sign:
            raise MissingSharedSecret(f"{method} must be signed but no shared secret was configured")
        query["api_sig"] = sign(credentials.shared_secret, query)

    encoded = "&".join(
        f"{key}={quote(stringify(value), safe=_URI_COMPONENT_SAFE)}" for key, value in query.items()
    )
    return f"{rest_url}?{encoded}"


def split_options(
    options: Mapping[str, Any] | None,
    sign_required: bool,
    auth_required: bool,
) -> tuple[dict[str, Any], bool, bool]:
    """Copy caller options and apply the reserved ``force_sign`` key.

    When present, ``force_sign`` sets both flags for this call only and is never sent.
    """
    params = dict(options or {})
    if FORCE_SIGN in params:
        sign_required = auth_required = bool(params.pop(FORCE_SIGN))
    return params, sign_required, auth_required


def handle_response(response: httpx.Response, url: str) -> dict[str, Any]:
    """Decode the JSON envelope, raising APIError when ``stat`` is not ``ok``."""
    try:
        data = response.json()
    except ValueError as e:
        raise APIError(
            message=f"Invalid JSON response (HTTP {response.status_code})",
            url=url,
            status_code=response.status_code,
        ) from e

    if not isinstance(data, dict):
        raise APIError(message="Unexpected response envelope", url=url, status_code=response.status_code)

    if data.get("stat") != "ok":
        raise APIError(
            message=data.get("message") or "Flickr API call failed",
            code=data.get("code"),
            url=url,
            status_code=response.status_code,
        )
    return data


def transport_error(e: httpx.HTTPError, url: str) -> TransportError:
    """Wrap an httpx failure (timeouts included) into a TransportError."""
    return TransportError(f"Request failed: {e.__class__.__name__}: {e}", url=url)


def extract_content(data: Mapping[str, Any], *path: str) -> str:
    """Follow ``path`` into a response and return its ``_content`` string."""
    node: Any = data
    for key in path:
        if not isinstance(node, Mapping) or key not in node:
            raise APIError(message=f"Response is missing {'.'.join(path)}")
        node = node[key]
    if isinstance(node, Mapping):
        node = node.get("_content")
    if not isinstance(node, str):
        raise APIError(message=f"Response is missing {'.'.join(path)}")
    return node
