"""Cache commands -- inspect and clear the read-through cache store."""

from __future__ import annotations

import typer

from postfetch.output import format_response, info, success
from postfetch.runtime import get_config

cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show statistics of the configured cache store.

    Example::

        postfetch cache stats --json
    """
    from postfetch.cache import open_store
    from postfetch.config import get_cache_dir

    config = get_config(ctx)
    store = open_store(config.cache, get_cache_dir())
    try:
        stats = store.stats()
    finally:
        store.close()
    format_response({"enabled": config.cache.enabled, **stats})


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Remove every entry from the on-disk cache.

    The disk store is cleared even when caching is disabled or the memory
    backend is selected, since it is the only store that outlives a
    command.

    Example::

        postfetch cache clear
    """
    from postfetch.cache import DiskStore
    from postfetch.config import get_cache_dir

    config = get_config(ctx)
    store = DiskStore(get_cache_dir() / "store", ttl_seconds=config.cache.ttl_seconds)
    try:
        removed = store.clear()
    finally:
        store.close()
    if removed:
        success(f"Cleared {removed} cached entries.")
    else:
        info("Cache is already empty.")
