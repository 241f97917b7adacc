"""Credential storage for the flickr-reflect client.

Frob and token are cached in two tiers: an in-process dictionary and one flat
file per secret under ``~/.flickr_reflect/cache`` (override with
``FLICKR_CACHE_DIR``). The directory is created with mode 0700 and files are
written atomically with mode 0600.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path

from ..exceptions import StorageError
from .constants import CACHE_DIR, CACHE_SUBDIR, SECRET_NAMES

logger = logging.getLogger(__name__)


def get_cache_dir() -> Path:
    override = os.environ.get("FLICKR_CACHE_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / CACHE_DIR / CACHE_SUBDIR


class CredentialStore:
    """Two-tier cache for the ``frob`` and ``token`` secrets.

    The memory tier is always consulted first and a successful disk read
    populates it. Reads return ``None`` when nothing is stored; any other
    storage failure raises :class:`StorageError`.
    """

    def __init__(self, cache_dir: Path | str | None = None) -> None:
        self.cache_dir = Path(cache_dir) if cache_dir is not None else get_cache_dir()
        self._memory: dict[str, str] = {}
        self._lock = threading.Lock()

    def _path(self, name: str) -> Path:
        if name not in SECRET_NAMES:
            raise ValueError(f"Unknown secret name: {name!r}")
        return self.cache_dir / name

    def ensure_dir(self) -> None:
        """Create the cache directory (mode 0700) if it does not exist yet.

        An existing directory is used as is; its mode is left alone.
        """
        if self.cache_dir.is_dir():
            return
        try:
            self.cache_dir.mkdir(parents=True)
            os.chmod(self.cache_dir, 0o700)
        except FileExistsError as e:
            if not self.cache_dir.is_dir():
                raise StorageError(f"Cache path {self.cache_dir} exists and is not a directory") from e
        except OSError as e:
            raise StorageError(f"Could not create cache directory {self.cache_dir}: {e}") from e

    def read(self, name: str) -> str | None:
        """Return the cached secret, or None if it has never been stored."""
        with self._lock:
            if name in self._memory:
                return self._memory[name]

        path = self._path(name)
        self.ensure_dir()
        try:
            value = path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Could not read {path}: {e}") from e

        if not value:
            return None
        with self._lock:
            self._memory[name] = value
        return value

    def write(self, name: str, value: str) -> None:
        """Cache a secret in memory, then persist it.

        A persistence failure raises :class:`StorageError` but leaves the
        in-memory value in place so the current process can keep using it.
        """
        path = self._path(name)
        with self._lock:
            self._memory[name] = value

        self.ensure_dir()
        fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, prefix=f".{name}_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Could not write {path}: {e}") from e
        logger.debug("Persisted %s to %s", name, path)

    def invalidate(self, name: str) -> bool:
        """Forget a secret in both tiers. Returns True if anything was removed."""
        path = self._path(name)
        with self._lock:
            removed = self._memory.pop(name, None) is not None
        try:
            path.unlink()
            removed = True
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Could not remove {path}: {e}") from e
        return removed

    def clear(self) -> bool:
        """Forget every cached secret."""
        removed = False
        for name in SECRET_NAMES:
            removed = self.invalidate(name) or removed
        return removed


_PLACEHOLDER_VALUES = frozenset({"YOUR_API_KEY", "YOUR_API_SECRET"})


def _is_real_value(value: str | None) -> bool:
    return bool(value and value.strip() and value.strip() not in _PLACEHOLDER_VALUES)


def resolve_api_key(api_key: str | None = None) -> str | None:
    """Resolve an API key: explicit parameter > FLICKR_API_KEY env var.

    Placeholder values like ``"YOUR_API_KEY"`` are treated as missing.
    Returns None if no key is found (caller decides error behavior).
    """
    if _is_real_value(api_key):
        return api_key

    env_key = os.environ.get("FLICKR_API_KEY")
    if _is_real_value(env_key):
        return env_key

    return None


def resolve_shared_secret(secret: str | None = None) -> str | None:
    """Resolve the shared secret: explicit parameter > FLICKR_API_SECRET env var."""
    if _is_real_value(secret):
        return secret

    env_secret = os.environ.get("FLICKR_API_SECRET")
    if _is_real_value(env_secret):
        return env_secret

    return None
