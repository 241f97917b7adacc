"""Synchronous discovery for the flickr-reflect client."""

from .discovery import discover

__all__ = ["discover"]
