"""Per-invocation wiring shared by the CLI commands.

Each command resolves its :class:`~postfetch.models.GlobalConfig` once in
the root callback and then opens a :class:`~postfetch.service.PostService`
through :func:`open_service`: store, cache, and client live exactly as
long as the command.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any, NoReturn, Optional, TypeVar

import httpx
import typer

from postfetch.cache import ReadThroughCache, open_store
from postfetch.client import UpstreamClient
from postfetch.config import get_cache_dir, resolve_config
from postfetch.exceptions import PostfetchError
from postfetch.models import Envelope, GlobalConfig
from postfetch.output import debug, print_envelope
from postfetch.service import PostService

T = TypeVar("T")


def get_config(ctx: typer.Context) -> GlobalConfig:
    """Return the config resolved by the root callback.

    If the callback could not resolve it, resolution is retried here with
    the same CLI flags so that its
    :class:`~postfetch.exceptions.ConfigError` reaches the caller.
    """
    obj = ctx.ensure_object(dict)
    config = obj.get("config")
    if config is None:
        config = resolve_config(
            cli_base_url=obj.get("base_url"),
            cli_no_cache=obj.get("no_cache", False),
        )
        obj["config"] = config
    return config


def get_transport(ctx: typer.Context) -> Optional[httpx.AsyncBaseTransport]:
    """Return the httpx transport injected through ``ctx.obj`` (tests only)."""
    obj = ctx.obj or {}
    return obj.get("transport")


@asynccontextmanager
async def open_service(
    config: GlobalConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[PostService]:
    """Open the store, cache, and upstream client for one command.

    The cache hit and miss counts are reported on the debug stream when
    the command finishes.
    """
    store = open_store(config.cache, get_cache_dir())
    cache = ReadThroughCache(store)
    try:
        async with UpstreamClient(config.upstream, transport=transport) as client:
            yield PostService(client, cache)
    finally:
        stats = cache.stats()
        debug(f"Cache: {stats['hits']} hits, {stats['misses']} misses ({stats['backend']})")
        store.close()


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Drive a coroutine to completion from synchronous command code."""
    return asyncio.run(coro)


def fail(message: str, exc: PostfetchError) -> NoReturn:
    """Print an error envelope for *exc* and exit with its exit code.

    The envelope carries only *message*; the underlying error goes to the
    debug stream.
    """
    debug(str(exc))
    print_envelope(Envelope.error(message))
    raise typer.Exit(code=exc.exit_code)
