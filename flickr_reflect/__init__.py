"""flickr-reflect - Flickr API client that builds itself from the reflection API."""

from importlib.metadata import PackageNotFoundError, version

from .async_client import AsyncFlickrClient, async_connect
from .client import FlickrClient, connect
from .exceptions import (
    APIError,
    ConfigurationError,
    DiscoveryError,
    FlickrSDKError,
    ManualAuthorizationRequired,
    MissingSharedSecret,
    StorageError,
    SurfaceConflictError,
    TransportError,
)
from .surface import CallSurface, MethodBinding, MethodDescriptor, Namespace, make_method

__all__ = [
    "FlickrClient",
    "AsyncFlickrClient",
    "connect",
    "async_connect",
    "CallSurface",
    "Namespace",
    "MethodBinding",
    "MethodDescriptor",
    "make_method",
    "FlickrSDKError",
    "ConfigurationError",
    "MissingSharedSecret",
    "StorageError",
    "ManualAuthorizationRequired",
    "APIError",
    "TransportError",
    "DiscoveryError",
    "SurfaceConflictError",
]

try:
    __version__ = version("flickr-reflect")
except PackageNotFoundError:
    __version__ = "0.1.0"
