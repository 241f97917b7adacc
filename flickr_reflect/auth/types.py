"""Typed values for authentication operations."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Credentials:
    """API key and optional shared secret; without a secret no call can be signed."""

    api_key: str
    shared_secret: str | None = None

    @property
    def can_sign(self) -> bool:
        return bool(self.shared_secret)


@dataclass
class AuthStatus:
    """Current authentication status."""

    authenticated: bool
    masked_token: str | None = None
    has_frob: bool = False
    cache_dir: str | None = None
