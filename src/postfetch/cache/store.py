"""Key-value stores backing the read-through cache.

:class:`~postfetch.cache.read_through.ReadThroughCache` never talks to a
storage engine directly; it is handed an object implementing
:class:`KeyValueStore`. Three implementations ship with postfetch:

* :class:`DiskStore` -- persists entries with :mod:`diskcache`, expiring
  them after ``ttl_seconds``. Shared across CLI invocations.
* :class:`MemoryStore` -- an in-process dict; entries live as long as the
  process.
* :class:`NullStore` -- stores nothing, so every lookup misses.

Eviction is entirely the store's business. :func:`open_store` picks the
implementation from a :class:`~postfetch.models.CacheConfig`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import diskcache

from postfetch.exceptions import ConfigError
from postfetch.models import CacheConfig

logger = logging.getLogger(__name__)


MISSING: Any = object()
"""Returned by :meth:`KeyValueStore.get` on a miss, so that ``None`` can be cached."""


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal storage interface used by the read-through cache."""

    def get(self, key: str, default: Any = MISSING) -> Any:
        """Return the value stored under *key*, or *default*."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous value."""
        ...

    def clear(self) -> int:
        """Remove every entry and return how many were removed."""
        ...

    def stats(self) -> dict[str, Any]:
        """Return backend-specific statistics."""
        ...

    def close(self) -> None:
        """Release any resources held by the store."""
        ...


class DiskStore:
    """Disk-backed store built on :class:`diskcache.Cache`.

    Values are pickled by diskcache, so anything picklable (including the
    frozen pydantic models) round-trips.

    Args:
        directory: Directory for the cache files; created if missing.
        ttl_seconds: Expiry applied to every write. ``0`` keeps entries
            until they are cleared.
    """

    def __init__(self, directory: str | Path, ttl_seconds: int = 300) -> None:
        self._directory = Path(directory)
        self._ttl = ttl_seconds
        self._cache = diskcache.Cache(str(self._directory))

    def get(self, key: str, default: Any = MISSING) -> Any:
        return self._cache.get(key, default=default)

    def set(self, key: str, value: Any) -> None:
        expire = self._ttl if self._ttl > 0 else None
        self._cache.set(key, value, expire=expire)

    def clear(self) -> int:
        return self._cache.clear()

    def stats(self) -> dict[str, Any]:
        return {
            "backend": "disk",
            "size": len(self._cache),
            "directory": str(self._directory),
            "ttl_seconds": self._ttl,
        }

    def close(self) -> None:
        self._cache.close()


def _detach(value: Any) -> Any:
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return dict(value)
    return value


class MemoryStore:
    """In-process dict store. Entries never expire.

    Lists and dicts are shallow-copied on the way in and out, so a caller
    mutating a result cannot change the stored entry.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = MISSING) -> Any:
        if key not in self._data:
            return default
        return _detach(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = _detach(value)

    def clear(self) -> int:
        count = len(self._data)
        self._data.clear()
        return count

    def stats(self) -> dict[str, Any]:
        return {"backend": "memory", "size": len(self._data)}

    def close(self) -> None:
        pass


class NullStore:
    """A store that forgets everything. Used when caching is disabled."""

    def get(self, key: str, default: Any = MISSING) -> Any:
        return default

    def set(self, key: str, value: Any) -> None:
        pass

    def clear(self) -> int:
        return 0

    def stats(self) -> dict[str, Any]:
        return {"backend": "none", "size": 0}

    def close(self) -> None:
        pass


def open_store(config: CacheConfig, cache_dir: str | Path) -> KeyValueStore:
    """Create the store selected by *config*.

    Args:
        config: Cache settings (``enabled``, ``backend``, ``ttl_seconds``).
        cache_dir: Root cache directory; the disk store lives in its
            ``store/`` subdirectory.

    Raises:
        ConfigError: If ``backend`` is neither ``disk`` nor ``memory``.
    """
    if not config.enabled:
        logger.debug("Caching disabled, using null store")
        return NullStore()
    backend = config.backend.lower()
    if backend == "disk":
        return DiskStore(Path(cache_dir) / "store", ttl_seconds=config.ttl_seconds)
    if backend == "memory":
        return MemoryStore()
    raise ConfigError(f"Unknown cache backend: {config.backend} (expected disk or memory)")
