"""The call surface: a frozen tree of namespaces whose leaves call remote methods.

Example:
    >>> api = client.discover(["test"])
    >>> api.test.echo(foo="bar")
    >>> api["auth"]["getFrob"]()
    >>> sorted(name for name, _ in api.walk())
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Mapping, Union

from .auth.constants import ERROR_NO_APIS
from .config import AUTH_NAMESPACE, METHOD_PREFIX
from .exceptions import APIError, ConfigurationError, SurfaceConflictError

if TYPE_CHECKING:
    from .async_client import AsyncFlickrClient
    from .client import FlickrClient


def method_path(name: str, prefix: str = METHOD_PREFIX) -> tuple[str, ...]:
    """Split a fully qualified method name into namespace segments.

    ``flickr.photos.comments.getList`` -> ``("photos", "comments", "getList")``
    """
    head = prefix + "."
    if name.startswith(head):
        name = name[len(head):]
    return tuple(name.split("."))


def _flag(value: Any) -> bool:
    return str(value) in ("1", "true", "True")


@dataclass(frozen=True)
class MethodDescriptor:
    """Metadata the server reports for one method."""

    name: str
    needs_signing: bool = False
    needs_login: bool = False

    @property
    def path(self) -> tuple[str, ...]:
        return method_path(self.name)

    @property
    def namespace(self) -> str:
        return self.path[0]

    @classmethod
    def from_method_info(cls, data: Mapping[str, Any]) -> MethodDescriptor:
        """Build a descriptor from a ``flickr.reflection.getMethodInfo`` response.

        Methods in the auth namespace are reported as unsigned by the server
        but are rejected unless signed, so signing is forced for them.
        """
        info = data.get("method")
        if not isinstance(info, Mapping):
            raise APIError(message="Response is missing method")
        name = info.get("name")
        if isinstance(name, Mapping):
            name = name.get("_content")
        if not isinstance(name, str) or not name:
            raise APIError(message="Response is missing method.name")

        descriptor = cls(
            name=name,
            needs_signing=_flag(info.get("needssigning")),
            needs_login=_flag(info.get("needslogin")),
        )
        if descriptor.namespace == AUTH_NAMESPACE:
            descriptor = replace(descriptor, needs_signing=True)
        return descriptor


def parse_method_names(data: Mapping[str, Any]) -> list[str]:
    """Read the method list out of a ``flickr.reflection.getMethods`` response."""
    methods = data.get("methods")
    items = methods.get("method") if isinstance(methods, Mapping) else None
    if not isinstance(items, list):
        raise APIError(message="Response is missing methods.method")
    names = []
    for item in items:
        name = item.get("_content") if isinstance(item, Mapping) else item
        if not isinstance(name, str):
            raise APIError(message=f"Unexpected method entry: {item!r}")
        names.append(name)
    return names


def select_methods(names: Iterable[str], apis: Iterable[str]) -> list[str]:
    """Keep the methods whose first namespace segment was asked for.

    The auth namespace is always kept because the token exchange lives there.
    """
    wanted = set(apis) | {AUTH_NAMESPACE}
    return [name for name in names if method_path(name)[0] in wanted]


class MethodBinding:
    """Leaf of the call surface, bound to the client that executes it.

    Called as ``binding(options=None, **params)``. On a :class:`FlickrClient`
    the decoded response is returned; on an :class:`AsyncFlickrClient` the
    call returns an awaitable.
    """

    __slots__ = ("descriptor", "_client")

    def __init__(self, client: Union[FlickrClient, AsyncFlickrClient], descriptor: MethodDescriptor) -> None:
        self.descriptor = descriptor
        self._client = client

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def needs_signing(self) -> bool:
        return self.descriptor.needs_signing

    @property
    def needs_login(self) -> bool:
        return self.descriptor.needs_login

    def __call__(self, options: Mapping[str, Any] | None = None, **params: Any) -> Any:
        merged = {**(options or {}), **params}
        return self._client.invoke(
            self.descriptor.name,
            sign_required=self.descriptor.needs_signing,
            auth_required=self.descriptor.needs_login,
            options=merged,
        )

    def __repr__(self) -> str:
        return (
            f"<MethodBinding {self.name} signing={self.needs_signing} login={self.needs_login}>"
        )


def make_method(
    client: Union[FlickrClient, AsyncFlickrClient],
    name: str,
    sign_required: bool = False,
    auth_required: bool = False,
) -> MethodBinding:
    """Create a callable bound to ``client`` for a single remote method."""
    return MethodBinding(client, MethodDescriptor(name, sign_required, auth_required))


Node = Union["Namespace", MethodBinding]


class Namespace:
    """Internal node of the call surface. Children are reachable as attributes or items.

    Item access always works, even for a child whose name matches one of the
    attributes defined here (``path``, ``children``, ``walk``).
    """

    def __init__(self, path: tuple[str, ...], children: Mapping[str, Node]) -> None:
        object.__setattr__(self, "_path", path)
        object.__setattr__(self, "_children", MappingProxyType(dict(children)))

    @property
    def path(self) -> tuple[str, ...]:
        return self._path

    @property
    def children(self) -> Mapping[str, Node]:
        return self._children

    def __getattr__(self, name: str) -> Node:
        if name.startswith("__") or name in ("_path", "_children"):
            raise AttributeError(name)
        try:
            return self._children[name]
        except KeyError:
            dotted = ".".join(self._path + (name,))
            raise AttributeError(f"No namespace or method named {dotted!r}") from None

    def __getitem__(self, name: str) -> Node:
        return self._children[name]

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __contains__(self, name: object) -> bool:
        return name in self._children

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._children))

    def walk(self) -> Iterator[tuple[str, MethodBinding]]:
        """Yield ``(qualified name, binding)`` for every leaf below this node."""
        for child in self._children.values():
            if isinstance(child, Namespace):
                yield from child.walk()
            else:
                yield child.name, child

    def __repr__(self) -> str:
        label = ".".join(self._path) or "<root>"
        return f"<Namespace {label} children={sorted(self._children)}>"


class CallSurface(Namespace):
    """Root of the call surface returned by discovery.

    ``client`` is the client every binding calls through; close it when done.
    ``failures`` maps the name of every method whose description could not be
    fetched to the exception raised; those methods are absent from the tree.
    """

    def __init__(
        self,
        children: Mapping[str, Node],
        failures: Mapping[str, Exception] | None = None,
        client: Union[FlickrClient, AsyncFlickrClient, None] = None,
    ) -> None:
        super().__init__((), children)
        object.__setattr__(self, "client", client)
        object.__setattr__(self, "failures", MappingProxyType(dict(failures or {})))

    @property
    def complete(self) -> bool:
        return not self.failures


class SurfaceBuilder:
    """Mutable staging area for the call surface; ``build()`` freezes it."""

    def __init__(self) -> None:
        self._root: dict[str, Any] = {}
        self._failures: dict[str, Exception] = {}

    def add(self, binding: MethodBinding) -> None:
        *parents, leaf = binding.descriptor.path
        level = self._root
        for part in parents:
            child = level.setdefault(part, {})
            if isinstance(child, MethodBinding):
                raise SurfaceConflictError(f"{binding.name} collides with method {child.name}")
            level = child
        if isinstance(level.get(leaf), dict):
            raise SurfaceConflictError(f"{binding.name} collides with a namespace of the same name")
        level[leaf] = binding

    def fail(self, name: str, error: Exception) -> None:
        self._failures[name] = error

    @property
    def failures(self) -> dict[str, Exception]:
        return dict(self._failures)

    def build(self, client: Union[FlickrClient, AsyncFlickrClient, None] = None) -> CallSurface:
        return CallSurface(self._freeze(self._root, ()).children, self._failures, client)

    def _freeze(self, level: dict[str, Any], path: tuple[str, ...]) -> Namespace:
        children: dict[str, Node] = {}
        for key, value in level.items():
            if isinstance(value, dict):
                children[key] = self._freeze(value, path + (key,))
            else:
                children[key] = value
        return Namespace(path, children)


def normalize_apis(apis: Iterable[str] | str | None) -> list[str]:
    """Validate the namespace filter given to discovery."""
    if isinstance(apis, str):
        apis = [apis]
    selected = [api for api in (apis or []) if api]
    if not selected:
        raise ConfigurationError(ERROR_NO_APIS)
    return selected
