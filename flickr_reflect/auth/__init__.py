"""Authentication utilities for the flickr-reflect client."""

from .credentials import CredentialStore, get_cache_dir, resolve_api_key, resolve_shared_secret
from .flow import AsyncAuthFlow, AuthFlow, build_auth_url, get_auth_status
from .signing import sign
from .types import AuthStatus, Credentials

__all__ = [
    "AsyncAuthFlow",
    "AuthFlow",
    "AuthStatus",
    "CredentialStore",
    "Credentials",
    "build_auth_url",
    "get_auth_status",
    "get_cache_dir",
    "resolve_api_key",
    "resolve_shared_secret",
    "sign",
]
