"""Method discovery through the reflection API (async)."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Iterable

from ..config import DEFAULT_MAX_CONCURRENCY, REFLECTION_GET_METHOD_INFO, REFLECTION_GET_METHODS
from ..exceptions import DiscoveryError, FlickrSDKError, SurfaceConflictError
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
    from ..async_client import AsyncFlickrClient

logger = logging.getLogger(__name__)


async def discover(
    client: AsyncFlickrClient,
    apis: Iterable[str] | str,
    *,
    strict: bool = False,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> CallSurface:
    """Build the call surface for ``apis`` plus the auth namespace.

    Same contract as the sync version; descriptions run as one task per
    method, gathered together and bounded by ``max_concurrency``.
    """
    apis = normalize_apis(apis)
    names = select_methods(parse_method_names(await client.invoke(REFLECTION_GET_METHODS)), apis)
    logger.debug("Describing %d methods for %s", len(names), ", ".join(apis))

    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def describe(name: str) -> MethodDescriptor:
        async with semaphore:
            data = await client.invoke(REFLECTION_GET_METHOD_INFO, options={"method_name": name})
        return MethodDescriptor.from_method_info(data)

    results = await asyncio.gather(*(describe(name) for name in names), return_exceptions=True)

    builder = SurfaceBuilder()
    for name, result in zip(names, results):
        if isinstance(result, MethodDescriptor):
            try:
                builder.add(MethodBinding(client, result))
                continue
            except SurfaceConflictError as e:
                result = e
        if not isinstance(result, FlickrSDKError):
            raise result
        logger.warning("Leaving %s out: %s", name, result)
        builder.fail(name, result)

    if strict and builder.failures:
        raise DiscoveryError(builder.failures)

    surface = builder.build(client)
    logger.info("Discovered %d methods in %d namespaces", sum(1 for _ in surface.walk()), len(surface))
    return surface
