"""Asynchronous HTTP client for the Flickr API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import httpx

from ._async import discover
from ._http import build_headers, build_url, handle_response, split_options, transport_error
from .auth.constants import ERROR_NO_API_KEY
from .auth.credentials import CredentialStore, resolve_api_key, resolve_shared_secret
from .auth.flow import AsyncAuthFlow
from .auth.types import Credentials
from .config import DEFAULT_MAX_CONCURRENCY, DEFAULT_REST_URL, DEFAULT_TIMEOUT_SECONDS, sanitize_url
from .exceptions import ConfigurationError
from .surface import CallSurface, MethodBinding, make_method, normalize_apis

logger = logging.getLogger(__name__)


class AsyncFlickrClient:
    """Asynchronous client for the Flickr REST API.

    Example:
        >>> import asyncio
        >>> from flickr_reflect import AsyncFlickrClient
        >>>
        >>> async def main():
        ...     async with AsyncFlickrClient(api_key="abc") as client:
        ...         api = await client.discover(["test"])
        ...         print(await api.test.echo(foo="bar"))
        >>>
        >>> asyncio.run(main())
    """

    def __init__(
        self,
        api_key: str | None = None,
        secret: str | None = None,
        *,
        rest_url: str = DEFAULT_REST_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        cache_dir: Path | str | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        """Initialize the async Flickr client.

        Takes the same arguments as :class:`flickr_reflect.FlickrClient`.

        Raises:
            ConfigurationError: If no API key is provided or found in environment.
        """
        api_key = resolve_api_key(api_key)
        if not api_key:
            raise ConfigurationError(ERROR_NO_API_KEY)

        self.credentials = Credentials(api_key=api_key, shared_secret=resolve_shared_secret(secret))
        self._rest_url = sanitize_url(rest_url)
        self._max_concurrency = max_concurrency
        self._client = httpx.AsyncClient(timeout=timeout)

        self.store = CredentialStore(cache_dir)
        self.auth = AsyncAuthFlow(self.credentials, self.store, self._request)

    def build_url(self, method: str, sign_required: bool = False, params: Mapping[str, Any] | None = None) -> str:
        return build_url(self._rest_url, method, self.credentials, params, sign_required=sign_required)

    async def execute(self, url: str) -> dict[str, Any]:
        try:
            response = await self._client.get(url, headers=build_headers())
        except httpx.HTTPError as e:
            raise transport_error(e, url) from e
        return handle_response(response, url)

    async def _request(self, method: str, sign_required: bool, params: dict[str, Any]) -> dict[str, Any]:
        url = self.build_url(method, sign_required, params)
        logger.debug("Calling %s (signed=%s)", method, sign_required)
        return await self.execute(url)

    async def invoke(
        self,
        method: str,
        sign_required: bool = False,
        auth_required: bool = False,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Call a remote method by name. See :meth:`FlickrClient.invoke`."""
        params, sign_required, auth_required = split_options(options, sign_required, auth_required)
        token = await self.auth.authenticate(auth_required)
        if token and auth_required:
            params["auth_token"] = token
        return await self._request(method, sign_required, params)

    def method(self, name: str, sign_required: bool = False, auth_required: bool = False) -> MethodBinding:
        return make_method(self, name, sign_required, auth_required)

    async def discover(self, apis: Iterable[str] | str, *, strict: bool = False) -> CallSurface:
        return await discover(self, apis, strict=strict, max_concurrency=self._max_concurrency)

    async def close(self) -> None:
        """Release the underlying HTTP client resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncFlickrClient:
        return self

    async def __aexit__(self, exc_type: type | None, exc: BaseException | None, traceback: Any) -> None:
        await self.close()


async def async_connect(
    key: str | None = None,
    secret: str | None = None,
    apis: Iterable[str] | str | None = None,
    *,
    strict: bool = False,
    **client_options: Any,
) -> CallSurface:
    """Async counterpart of :func:`flickr_reflect.connect`."""
    apis = normalize_apis(apis)
    client = AsyncFlickrClient(key, secret, **client_options)
    try:
        return await client.discover(apis, strict=strict)
    except BaseException:
        await client.close()
        raise
