"""Test configuration for flickr-reflect tests."""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from flickr_reflect import FlickrClient


def _response(payload: Any, status_code: int = 200) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


def ok(**body: Any) -> dict[str, Any]:
    return {"stat": "ok", **body}


class FakeFlickr:
    """Stand-in for the REST endpoint, answering by the ``method`` query param."""

    def __init__(self) -> None:
        self.handlers: dict[str, Callable[[dict[str, str]], Any]] = {}
        self.calls: list[dict[str, str]] = []
        self.urls: list[str] = []
        self.headers: list[dict[str, str]] = []

    def on(self, method: str, payload: Any) -> None:
        """Register a dict, an exception to raise, or a ``query -> dict`` callable."""
        self.handlers[method] = payload if callable(payload) else (lambda query: payload)

    def reflect(self, methods: dict[str, tuple[int, int]]) -> None:
        """Serve getMethods/getMethodInfo for ``{name: (needssigning, needslogin)}``."""
        self.on(
            "flickr.reflection.getMethods",
            ok(methods={"method": [{"_content": name} for name in methods]}),
        )

        def method_info(query: dict[str, str]) -> dict[str, Any]:
            name = query["method_name"]
            signing, login = methods[name]
            return ok(method={"name": name, "needssigning": signing, "needslogin": login})

        self.on("flickr.reflection.getMethodInfo", method_info)

    def methods_called(self) -> list[str]:
        return [query["method"] for query in self.calls]

    def __call__(self, url: str, headers: dict[str, str] | None = None, **kwargs: Any) -> MagicMock:
        query = {k: v[0] for k, v in parse_qs(urlparse(url).query, keep_blank_values=True).items()}
        self.calls.append(query)
        self.urls.append(url)
        self.headers.append(headers or {})

        handler = self.handlers.get(query.get("method", ""))
        if handler is None:
            payload: Any = {"stat": "fail", "code": 112, "message": f'Method "{query.get("method")}" not found'}
        else:
            payload = handler(query)
        if isinstance(payload, httpx.HTTPError):
            raise payload
        return _response(payload)


@pytest.fixture(autouse=True)
def cache_dir(tmp_path, monkeypatch):
    """Point the credential cache at a temp directory and clear credential env vars."""
    path = tmp_path / "cache"
    monkeypatch.setenv("FLICKR_CACHE_DIR", str(path))
    monkeypatch.delenv("FLICKR_API_KEY", raising=False)
    monkeypatch.delenv("FLICKR_API_SECRET", raising=False)
    return path


@pytest.fixture
def make_response():
    return _response


@pytest.fixture
def fake_flickr():
    """FakeFlickr patched in as ``httpx.Client.get``."""
    fake = FakeFlickr()
    with patch.object(httpx.Client, "get", side_effect=fake):
        yield fake


@pytest.fixture
def async_fake_flickr():
    """FakeFlickr patched in as ``httpx.AsyncClient.get``."""
    fake = FakeFlickr()
    with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock, side_effect=fake):
        yield fake


@pytest.fixture
def client():
    """Shared FlickrClient fixture for sync tests."""
    client = FlickrClient(api_key="abc", secret="s3cr3t")
    yield client
    client.close()
