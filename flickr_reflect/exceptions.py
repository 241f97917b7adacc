"""Custom exceptions raised by the flickr-reflect client."""

from __future__ import annotations

from typing import Mapping, Optional


class FlickrSDKError(Exception):
    """Base exception for all client specific failures."""


class ConfigurationError(FlickrSDKError):
    """Raised before any network activity when the client is misconfigured."""


class MissingSharedSecret(ConfigurationError):
    """Raised when a signed or authenticated call is made without a shared secret."""


class StorageError(FlickrSDKError):
    """Raised when the credential cache directory or one of its files cannot be used."""


class ManualAuthorizationRequired(FlickrSDKError):
    """Raised when the user has to grant access in a browser before a token can be issued."""

    def __init__(self, auth_url: str):
        super().__init__(f"Need to link to account - Open this url in your browser: {auth_url}")
        self.auth_url = auth_url


class APIError(FlickrSDKError):
    """Raised when the Flickr API answers with ``stat != "ok"`` or an unreadable body."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.url = url
        self.status_code = status_code

    def __str__(self) -> str:  # pragma: no cover - repr helper
        text = f"Flickr: {self.message}"
        if self.code is not None:
            text += f" - {self.code}"
        if self.url:
            text += f" on {self.url}"
        return text


class TransportError(FlickrSDKError):
    """Raised when the HTTP request itself fails (connection error, timeout)."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class DiscoveryError(FlickrSDKError):
    """Raised by strict discovery when one or more method descriptions failed."""

    def __init__(self, failures: Mapping[str, Exception]):
        names = ", ".join(sorted(failures))
        super().__init__(f"Could not describe {len(failures)} method(s): {names}")
        self.failures = dict(failures)


class SurfaceConflictError(FlickrSDKError):
    """Raised when a method's path is already taken by a namespace or another method."""
