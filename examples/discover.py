#!/usr/bin/env python
"""
Discover part of the Flickr API and call one of the generated methods.

The client asks flickr.reflection.getMethods which methods exist, describes
the ones in the requested namespaces concurrently, and returns a tree of
callables. Methods that need a login trigger the frob/token exchange; the
first run prints a URL to open in a browser.

Usage:
    export FLICKR_API_KEY=... FLICKR_API_SECRET=...
    python examples/discover.py --api test --api photos
"""

import argparse
import asyncio
import json
import logging

from flickr_reflect import AsyncFlickrClient, ManualAuthorizationRequired


async def main(apis: list[str]) -> None:
    async with AsyncFlickrClient() as client:
        api = await client.discover(apis)

        for name, binding in sorted(api.walk()):
            flags = [flag for flag, on in (("signed", binding.needs_signing), ("login", binding.needs_login)) if on]
            print(f"{name:50} {' '.join(flags)}")

        for name, error in api.failures.items():
            print(f"skipped {name}: {error}")

        if "test" in api:
            print(json.dumps(await api.test.echo(hello="world"), indent=2))
            try:
                print(json.dumps(await api.test.login(), indent=2))
            except ManualAuthorizationRequired as e:
                print(f"Grant access, then run again: {e.auth_url}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--api", action="append", default=[], help="namespace to discover (repeatable)")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    asyncio.run(main(args.api or ["test"]))
