"""Synchronous HTTP client for the Flickr API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import httpx

from ._http import build_headers, build_url, handle_response, split_options, transport_error
from ._sync import discover
from .auth.constants import ERROR_NO_API_KEY
from .auth.credentials import CredentialStore, resolve_api_key, resolve_shared_secret
from .auth.flow import AuthFlow
from .auth.types import Credentials
from .config import DEFAULT_MAX_CONCURRENCY, DEFAULT_REST_URL, DEFAULT_TIMEOUT_SECONDS, sanitize_url
from .exceptions import ConfigurationError
from .surface import CallSurface, MethodBinding, make_method, normalize_apis

logger = logging.getLogger(__name__)


class FlickrClient:
    """Synchronous client for the Flickr REST API.

    Example:
        >>> from flickr_reflect import FlickrClient
        >>> with FlickrClient(api_key="abc", secret="s3cr3t") as client:
        ...     api = client.discover(["photos"])
        ...     print(api.photos.search(text="harbour"))

    Methods are not hard-coded: ``discover`` asks the server which methods exist
    and builds a :class:`CallSurface` mirroring its namespaces. A single method
    can also be bound directly with ``client.method(name, ...)``.
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
        """Initialize the Flickr client.

        Args:
            api_key: Your Flickr API key. If not provided, reads from the
                FLICKR_API_KEY environment variable.
            secret: Shared secret used to sign requests. If not provided, reads
                from FLICKR_API_SECRET; without one signed calls are refused.
            rest_url: REST endpoint (default: https://api.flickr.com/services/rest/).
            timeout: Per-request timeout in seconds (default: 30).
            cache_dir: Directory for the frob/token cache
                (default: FLICKR_CACHE_DIR or ~/.flickr_reflect/cache).
            max_concurrency: Parallel method descriptions during discovery.

        Raises:
            ConfigurationError: If no API key is provided or found in environment.
        """
        api_key = resolve_api_key(api_key)
        if not api_key:
            raise ConfigurationError(ERROR_NO_API_KEY)

        self.credentials = Credentials(api_key=api_key, shared_secret=resolve_shared_secret(secret))
        self._rest_url = sanitize_url(rest_url)
        self._max_concurrency = max_concurrency
        self._client = httpx.Client(timeout=timeout)

        self.store = CredentialStore(cache_dir)
        self.auth = AuthFlow(self.credentials, self.store, self._request)

    def build_url(self, method: str, sign_required: bool = False, params: Mapping[str, Any] | None = None) -> str:
        return build_url(self._rest_url, method, self.credentials, params, sign_required=sign_required)

    def execute(self, url: str) -> dict[str, Any]:
        """Issue a request for a prepared URL and return the decoded body."""
        try:
            response = self._client.get(url, headers=build_headers())
        except httpx.HTTPError as e:
            raise transport_error(e, url) from e
        return handle_response(response, url)

    def _request(self, method: str, sign_required: bool, params: dict[str, Any]) -> dict[str, Any]:
        url = self.build_url(method, sign_required, params)
        logger.debug("Calling %s (signed=%s)", method, sign_required)
        return self.execute(url)

    def invoke(
        self,
        method: str,
        sign_required: bool = False,
        auth_required: bool = False,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Call a remote method by name.

        Args:
            method: Fully qualified method name, e.g. "flickr.test.echo".
            sign_required: Append ``api_sig`` to the request.
            auth_required: Obtain a session token and send it as ``auth_token``.
            options: Method parameters. The reserved ``force_sign`` key turns on
                both signing and authentication for this call and is not sent.

        Returns:
            The decoded JSON response.
        """
        params, sign_required, auth_required = split_options(options, sign_required, auth_required)
        token = self.auth.authenticate(auth_required)
        if token and auth_required:
            params["auth_token"] = token
        return self._request(method, sign_required, params)

    def method(self, name: str, sign_required: bool = False, auth_required: bool = False) -> MethodBinding:
        """Bind a single remote method without running discovery."""
        return make_method(self, name, sign_required, auth_required)

    def discover(self, apis: Iterable[str] | str, *, strict: bool = False) -> CallSurface:
        """Build the call surface for the given namespaces (``auth`` is always included)."""
        return discover(self, apis, strict=strict, max_workers=self._max_concurrency)

    def close(self) -> None:
        """Release the underlying HTTP client resources."""
        self._client.close()

    def __enter__(self) -> FlickrClient:
        return self

    def __exit__(self, exc_type: type | None, exc: BaseException | None, traceback: Any) -> None:
        self.close()


def connect(
    key: str | None = None,
    secret: str | None = None,
    apis: Iterable[str] | str | None = None,
    *,
    strict: bool = False,
    **client_options: Any,
) -> CallSurface:
    """Create a client and discover the requested namespaces in one step.

    Configuration errors are raised before any request is made. The returned
    surface keeps the client on ``surface.client``; close it when done.
    """
    apis = normalize_apis(apis)
    client = FlickrClient(key, secret, **client_options)
    try:
        return client.discover(apis, strict=strict)
    except BaseException:
        client.close()
        raise
