"""Read-through caching for postfetch.

This package provides :class:`ReadThroughCache`, which memoizes named
upstream operations by explicit key parts, and the key-value stores it can
be backed by (:class:`DiskStore` via :mod:`diskcache`, :class:`MemoryStore`,
and :class:`NullStore`).

The store is chosen by the ``cache`` section of the global configuration
(:class:`~postfetch.models.CacheConfig`) through :func:`open_store`.
"""

from postfetch.cache.read_through import ReadThroughCache, make_key
from postfetch.cache.store import (
    MISSING,
    DiskStore,
    KeyValueStore,
    MemoryStore,
    NullStore,
    open_store,
)

__all__ = [
    "MISSING",
    "DiskStore",
    "KeyValueStore",
    "MemoryStore",
    "NullStore",
    "ReadThroughCache",
    "make_key",
    "open_store",
]
