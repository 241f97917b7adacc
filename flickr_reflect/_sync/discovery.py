"""Method discovery through the reflection API (sync)."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Iterable

from ..config import DEFAULT_MAX_CONCURRENCY, REFLECTION_GET_METHOD_INFO, REFLECTION_GET_METHODS
from ..exceptions import DiscoveryError, FlickrSDKError
from ..surface import (
    CallSurface,
    MethodBinding,
    MethodDescriptor,
    SurfaceBuilder,
    normalize_apis,
    parse_method_names,
    select_methods,
)

if TYPE_CHECKING:
    from ..client import FlickrClient

logger = logging.getLogger(__name__)


def describe(client: FlickrClient, name: str) -> MethodDescriptor:
    data = client.invoke(REFLECTION_GET_METHOD_INFO, options={"method_name": name})
    return MethodDescriptor.from_method_info(data)


def discover(
    client: FlickrClient,
    apis: Iterable[str] | str,
    *,
    strict: bool = False,
    max_workers: int = DEFAULT_MAX_CONCURRENCY,
) -> CallSurface:
    """Build the call surface for ``apis`` plus the auth namespace.

    The method list is fetched first; if that fails nothing is returned. Each
    retained method is then described on a worker thread. All futures are
    collected before any result is read, and the pool is joined before the
    surface is frozen, so the surface never misses a method that succeeded.

    A method whose description fails, or whose path collides with another, is left out and recorded in
    ``CallSurface.failures``; with ``strict=True`` a :class:`DiscoveryError`
    listing every failure is raised instead.
    """
    apis = normalize_apis(apis)
    names = select_methods(parse_method_names(client.invoke(REFLECTION_GET_METHODS)), apis)
    logger.debug("Describing %d methods for %s", len(names), ", ".join(apis))

    builder = SurfaceBuilder()
    if names:
        with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(names)))) as pool:
            futures = [(name, pool.submit(describe, client, name)) for name in names]

        for name, future in futures:
            try:
                builder.add(MethodBinding(client, future.result()))
            except FlickrSDKError as e:
                logger.warning("Leaving %s out: %s", name, e)
                builder.fail(name, e)

    if strict and builder.failures:
        raise DiscoveryError(builder.failures)

    surface = builder.build(client)
    logger.info("Discovered %d methods in %d namespaces", sum(1 for _ in surface.walk()), len(surface))
    return surface
