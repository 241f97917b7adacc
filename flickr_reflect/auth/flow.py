"""Frob/token authentication flow for Flickr.

Implements the desktop flow: obtain a frob -> the user grants access in a
browser -> exchange the frob for a long-lived token. Both secrets are cached
through :class:`CredentialStore` so the exchange runs at most once.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable
from urllib.parse import urlencode

from .._http import extract_content
from ..exceptions import APIError, ManualAuthorizationRequired, MissingSharedSecret, StorageError
from .constants import AUTH_PERMS, AUTH_URL, ERROR_NO_SECRET, FROB, GET_FROB_METHOD, GET_TOKEN_METHOD, TOKEN
from .credentials import CredentialStore
from .signing import sign
from .types import AuthStatus, Credentials

logger = logging.getLogger(__name__)

# (method, sign_required, params) -> decoded response; never authenticates itself.
RequestFn = Callable[[str, bool, dict[str, Any]], dict[str, Any]]
AsyncRequestFn = Callable[[str, bool, dict[str, Any]], Awaitable[dict[str, Any]]]


def build_auth_url(credentials: Credentials, frob: str, base_url: str = AUTH_URL) -> str:
    """Build the URL where the user grants ``read`` access for a frob."""
    params: dict[str, str] = {
        "api_key": credentials.api_key,
        "perms": AUTH_PERMS,
        "frob": frob,
    }
    params["api_sig"] = sign(credentials.shared_secret or "", params)
    return f"{base_url}?{urlencode(params)}"


def _mask(value: str) -> str:
    if len(value) >= 12:
        return value[:4] + "..." + value[-4:]
    return "***"


def _remember(store: CredentialStore, name: str, value: str) -> None:
    try:
        store.write(name, value)
    except StorageError as e:
        logger.warning("Could not persist %s, keeping it for this process only: %s", name, e)


def _cached_token(store: CredentialStore) -> str | None:
    try:
        return store.read(TOKEN)
    except StorageError as e:
        logger.warning("Ignoring unreadable token cache for an unauthenticated call: %s", e)
        return None


def get_auth_status(store: CredentialStore) -> AuthStatus:
    """Report whether a token is cached. Never prints directly."""
    token = store.read(TOKEN)
    return AuthStatus(
        authenticated=token is not None,
        masked_token=_mask(token) if token else None,
        has_frob=store.read(FROB) is not None,
        cache_dir=str(store.cache_dir),
    )


class AuthFlow:
    """Synchronous frob -> token state machine."""

    def __init__(self, credentials: Credentials, store: CredentialStore, request: RequestFn) -> None:
        self._credentials = credentials
        self._store = store
        self._request = request
        self._lock = threading.Lock()

    def get_frob(self) -> str:
        frob = self._store.read(FROB)
        if frob:
            return frob

        logger.debug("No cached frob, requesting a new one")
        data = self._request(GET_FROB_METHOD, True, {})
        frob = extract_content(data, "frob")
        _remember(self._store, FROB, frob)
        return frob

    def get_token(self, frob: str) -> str:
        token = self._store.read(TOKEN)
        if token:
            return token

        try:
            data = self._request(GET_TOKEN_METHOD, True, {"frob": frob})
        except APIError as e:
            logger.info("Token exchange refused (%s), manual authorization needed", e.message)
            raise ManualAuthorizationRequired(build_auth_url(self._credentials, frob)) from e

        token = extract_content(data, "auth", "token")
        _remember(self._store, TOKEN, token)
        return token

    def authenticate(self, required: bool) -> str | None:
        """Return a session token, or None when one is optional and missing."""
        if not required:
            return _cached_token(self._store)

        if not self._credentials.can_sign:
            raise MissingSharedSecret(ERROR_NO_SECRET)

        with self._lock:
            frob = self.get_frob()
            return self.get_token(frob)


class AsyncAuthFlow:
    """Asynchronous frob -> token state machine.

    Cache file access runs in a worker thread so the event loop never blocks.
    """

    def __init__(self, credentials: Credentials, store: CredentialStore, request: AsyncRequestFn) -> None:
        self._credentials = credentials
        self._store = store
        self._request = request
        self._lock = asyncio.Lock()

    async def get_frob(self) -> str:
        frob = await asyncio.to_thread(self._store.read, FROB)
        if frob:
            return frob

        logger.debug("No cached frob, requesting a new one")
        data = await self._request(GET_FROB_METHOD, True, {})
        frob = extract_content(data, "frob")
        await asyncio.to_thread(_remember, self._store, FROB, frob)
        return frob

    async def get_token(self, frob: str) -> str:
        token = await asyncio.to_thread(self._store.read, TOKEN)
        if token:
            return token

        try:
            data = await self._request(GET_TOKEN_METHOD, True, {"frob": frob})
        except APIError as e:
            logger.info("Token exchange refused (%s), manual authorization needed", e.message)
            raise ManualAuthorizationRequired(build_auth_url(self._credentials, frob)) from e

        token = extract_content(data, "auth", "token")
        await asyncio.to_thread(_remember, self._store, TOKEN, token)
        return token

    async def authenticate(self, required: bool) -> str | None:
        if not required:
            return await asyncio.to_thread(_cached_token, self._store)

        if not self._credentials.can_sign:
            raise MissingSharedSecret(ERROR_NO_SECRET)

        async with self._lock:
            frob = await self.get_frob()
            return await self.get_token(frob)
