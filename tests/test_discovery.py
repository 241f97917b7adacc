"""Tests for building the call surface through the reflection API (sync)."""

from __future__ import annotations

import logging

import httpx
import pytest

from flickr_reflect import (
    APIError,
    CallSurface,
    ConfigurationError,
    DiscoveryError,
    FlickrClient,
    MethodBinding,
    Namespace,
    SurfaceConflictError,
    TransportError,
    connect,
)
from flickr_reflect.surface import MethodDescriptor, SurfaceBuilder, method_path, select_methods


class TestHelpers:
    def test_method_path_strips_prefix(self):
        assert method_path("flickr.photos.comments.getList") == ("photos", "comments", "getList")
        assert method_path("test.echo") == ("test", "echo")

    def test_select_methods_always_keeps_auth(self):
        names = ["flickr.test.echo", "flickr.auth.getFrob", "flickr.photos.search", "flickr.auth.oauth.checkToken"]
        assert select_methods(names, ["test"]) == [
            "flickr.test.echo",
            "flickr.auth.getFrob",
            "flickr.auth.oauth.checkToken",
        ]

    def test_select_methods_matches_leading_segment_only(self):
        assert select_methods(["flickr.photos.people.add", "flickr.people.getInfo"], ["people"]) == [
            "flickr.people.getInfo"
        ]

    def test_descriptor_forces_signing_for_auth(self):
        info = {"stat": "ok", "method": {"name": "flickr.auth.getFrob", "needssigning": 0, "needslogin": 0}}
        descriptor = MethodDescriptor.from_method_info(info)
        assert descriptor.needs_signing is True
        assert descriptor.needs_login is False

    def test_descriptor_reads_flags(self):
        info = {"stat": "ok", "method": {"name": "flickr.photos.delete", "needssigning": 1, "needslogin": "1"}}
        descriptor = MethodDescriptor.from_method_info(info)
        assert descriptor == MethodDescriptor("flickr.photos.delete", True, True)

    def test_descriptor_missing_method_raises(self):
        with pytest.raises(APIError):
            MethodDescriptor.from_method_info({"stat": "ok"})

    def test_builder_rejects_collisions(self, client):
        builder = SurfaceBuilder()
        builder.add(MethodBinding(client, MethodDescriptor("flickr.a.b")))
        with pytest.raises(SurfaceConflictError):
            builder.add(MethodBinding(client, MethodDescriptor("flickr.a.b.c")))


class TestDiscover:
    def test_filter_keeps_requested_namespace_and_auth(self, client, fake_flickr):
        fake_flickr.reflect({
            "flickr.test.echo": (0, 0),
            "flickr.auth.getFrob": (0, 0),
            "flickr.photos.search": (0, 0),
        })

        surface = client.discover(["test"])

        assert isinstance(surface, CallSurface)
        assert set(surface) == {"test", "auth"}
        assert isinstance(surface.test.echo, MethodBinding)
        assert surface.auth.getFrob.needs_signing is True
        assert "photos" not in surface
        described = [q["method_name"] for q in fake_flickr.calls if q["method"] == "flickr.reflection.getMethodInfo"]
        assert sorted(described) == ["flickr.auth.getFrob", "flickr.test.echo"]

    def test_two_methods_under_namespace(self, client, fake_flickr):
        fake_flickr.reflect({"flickr.test.echo": (0, 0), "flickr.test.login": (1, 1)})

        surface = client.discover(["test"])

        assert sorted(surface.test) == ["echo", "login"]
        assert len(surface.test) == 2
        assert surface.test.login.needs_login is True
        assert fake_flickr.methods_called().count("flickr.reflection.getMethods") == 1
        assert fake_flickr.methods_called().count("flickr.reflection.getMethodInfo") == 2
        assert surface.complete

    def test_reflection_calls_are_unsigned(self, client, fake_flickr):
        fake_flickr.reflect({"flickr.test.echo": (0, 0)})
        client.discover("test")
        assert all("api_sig" not in query for query in fake_flickr.calls)

    def test_nested_namespaces(self, client, fake_flickr):
        fake_flickr.reflect({
            "flickr.photos.search": (0, 0),
            "flickr.photos.comments.getList": (0, 0),
            "flickr.photos.comments.addComment": (1, 1),
        })

        surface = client.discover(["photos"])

        assert isinstance(surface.photos.comments, Namespace)
        assert surface.photos.comments.path == ("photos", "comments")
        assert surface["photos"]["comments"]["addComment"].needs_signing is True
        assert sorted(name for name, _ in surface.walk()) == [
            "flickr.photos.comments.addComment",
            "flickr.photos.comments.getList",
            "flickr.photos.search",
        ]

    def test_discovered_method_is_callable(self, client, fake_flickr):
        fake_flickr.reflect({"flickr.test.echo": (0, 0)})
        surface = client.discover(["test"])
        fake_flickr.on("flickr.test.echo", lambda query: {"stat": "ok", "foo": {"_content": query["foo"]}})

        assert surface.test.echo(foo="bar")["foo"] == {"_content": "bar"}
        assert surface.test.echo({"foo": "baz"})["foo"] == {"_content": "baz"}

    def test_no_matching_methods_gives_auth_only(self, client, fake_flickr):
        fake_flickr.reflect({"flickr.auth.getFrob": (0, 0), "flickr.photos.search": (0, 0)})
        surface = client.discover(["galleries"])
        assert list(surface) == ["auth"]

    def test_surface_is_read_only(self, client, fake_flickr):
        fake_flickr.reflect({"flickr.test.echo": (0, 0)})
        surface = client.discover(["test"])

        with pytest.raises(AttributeError):
            surface.test = "replaced"
        with pytest.raises(AttributeError):
            surface.test.echo2 = surface.test.echo
        with pytest.raises(TypeError):
            surface.test.children["x"] = surface.test.echo

    def test_unknown_attribute_raises_attribute_error(self, client, fake_flickr):
        fake_flickr.reflect({"flickr.test.echo": (0, 0)})
        surface = client.discover(["test"])
        with pytest.raises(AttributeError, match="test.null"):
            surface.test.null

    def test_method_list_failure_aborts(self, client, fake_flickr):
        fake_flickr.on("flickr.reflection.getMethods", {"stat": "fail", "code": 100, "message": "Invalid API Key"})
        with pytest.raises(APIError) as exc_info:
            client.discover(["test"])
        assert exc_info.value.code == 100
        assert fake_flickr.methods_called() == ["flickr.reflection.getMethods"]

    def test_method_list_transport_failure_aborts(self, client, fake_flickr):
        fake_flickr.on("flickr.reflection.getMethods", httpx.ConnectError("refused"))
        with pytest.raises(TransportError):
            client.discover(["test"])

    def test_description_failure_excludes_method(self, client, fake_flickr, caplog):
        fake_flickr.reflect({"flickr.test.echo": (0, 0), "flickr.test.login": (1, 1)})
        describe = fake_flickr.handlers["flickr.reflection.getMethodInfo"]

        def flaky(query):
            if query["method_name"] == "flickr.test.login":
                return {"stat": "fail", "code": 1, "message": "Method not found"}
            return describe(query)

        fake_flickr.on("flickr.reflection.getMethodInfo", flaky)

        with caplog.at_level(logging.WARNING, logger="flickr_reflect._sync.discovery"):
            surface = client.discover(["test"])

        assert list(surface.test) == ["echo"]
        assert list(surface.failures) == ["flickr.test.login"]
        assert isinstance(surface.failures["flickr.test.login"], APIError)
        assert not surface.complete
        assert "flickr.test.login" in caplog.text

    def test_description_failure_strict(self, client, fake_flickr):
        fake_flickr.reflect({"flickr.test.echo": (0, 0), "flickr.test.login": (1, 1)})
        describe = fake_flickr.handlers["flickr.reflection.getMethodInfo"]
        fake_flickr.on(
            "flickr.reflection.getMethodInfo",
            lambda query: httpx.ReadTimeout("slow") if query["method_name"] == "flickr.test.echo" else describe(query),
        )

        with pytest.raises(DiscoveryError) as exc_info:
            client.discover(["test"], strict=True)
        assert list(exc_info.value.failures) == ["flickr.test.echo"]
        # Every description was still dispatched before the error was raised.
        assert fake_flickr.methods_called().count("flickr.reflection.getMethodInfo") == 2

    def test_method_under_another_method_is_recorded_as_failure(self, client, fake_flickr, caplog):
        fake_flickr.reflect({"flickr.test.echo": (0, 0), "flickr.test.echo.twice": (0, 0)})

        with caplog.at_level(logging.WARNING, logger="flickr_reflect._sync.discovery"):
            surface = client.discover(["test"])

        assert list(surface.test) == ["echo"]
        assert isinstance(surface.failures["flickr.test.echo.twice"], SurfaceConflictError)
        assert "flickr.test.echo.twice" in caplog.text
        with pytest.raises(DiscoveryError):
            client.discover(["test"], strict=True)

    def test_unsigned_discovery_with_unusable_cache(self, tmp_path, fake_flickr):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        fake_flickr.reflect({"flickr.test.echo": (0, 0)})

        with FlickrClient(api_key="abc", cache_dir=blocker / "cache") as client:
            surface = client.discover(["test"])
            assert surface.test.echo.needs_signing is False

        assert fake_flickr.methods_called() == ["flickr.reflection.getMethods", "flickr.reflection.getMethodInfo"]

    def test_many_methods_none_lost(self, fake_flickr):
        methods = {f"flickr.test.m{i}": (0, 0) for i in range(40)}
        fake_flickr.reflect(methods)

        surface = connect(key="abc", apis=["test"], max_concurrency=4)
        try:
            assert sorted(name for name, _ in surface.walk()) == sorted(methods)
        finally:
            surface.client.close()

    def test_empty_apis_rejected_before_network(self, client, fake_flickr):
        with pytest.raises(ConfigurationError):
            client.discover([])
        assert fake_flickr.calls == []


class TestConnect:
    def test_connect_returns_surface_with_client(self, fake_flickr):
        fake_flickr.reflect({"flickr.test.echo": (0, 0), "flickr.auth.getToken": (0, 0)})
        surface = connect(key="abc", secret="s3cr3t", apis=["test"])
        try:
            assert surface.client.credentials.shared_secret == "s3cr3t"
            assert surface.auth.getToken.needs_signing is True
        finally:
            surface.client.close()

    def test_missing_key_fails_before_network(self, fake_flickr):
        with pytest.raises(ConfigurationError):
            connect(apis=["test"])
        assert fake_flickr.calls == []

    def test_missing_apis_fails_before_network(self, fake_flickr):
        with pytest.raises(ConfigurationError):
            connect(key="abc")
        assert fake_flickr.calls == []

    def test_failed_connect_closes_client(self, fake_flickr):
        fake_flickr.on("flickr.reflection.getMethods", {"stat": "fail", "code": 100, "message": "Invalid API Key"})
        with pytest.raises(APIError):
            connect(key="abc", apis=["test"])
