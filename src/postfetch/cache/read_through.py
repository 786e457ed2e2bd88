"""Read-through memoization of named upstream operations.

:class:`ReadThroughCache` answers one question: has *this* operation already
been computed for *these* inputs? The caller names the operation and lists
exactly the inputs that identify a result (``key_parts``); the cache derives
a deterministic key from them, returns the stored value on a hit, and on a
miss awaits ``compute()`` and stores the result.

Properties worth knowing:

* No freshness check. Expiry belongs to the injected
  :class:`~postfetch.cache.store.KeyValueStore`.
* No negative caching. If ``compute`` raises, nothing is stored and the
  next call computes again.
* No single-flight. Two concurrent misses on the same key both compute and
  the last write wins.
* No invalidation API. Clearing is done on the store.
"""

from __future__ import annotations

import hashlib
import json
import logging
import typing
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Optional, TypeVar

from postfetch.cache.store import MISSING, KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

KeyParts = Sequence[tuple[str, Any]]


def _canonical(value: Any) -> Any:
    """Reduce a key part to a JSON-serialisable, order-stable form."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if value is Any or typing.get_origin(value) is not None:
        # Generic aliases such as list[Post]; repr is stable and distinct.
        return repr(value)
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return repr(value)


def make_key(operation_name: str, key_parts: KeyParts) -> str:
    """Derive the store key for an operation and its identifying inputs.

    The key is ``<operation>:<sha256>`` where the digest covers the
    operation name and the canonical JSON of *key_parts*. Mapping values
    are serialised with sorted keys, so ``{"a": 1, "b": 2}`` and
    ``{"b": 2, "a": 1}`` produce the same key; the order of *key_parts*
    itself is significant.

    Example::

        >>> make_key("post", [("id", 1)]) == make_key("post", [("id", 1)])
        True
        >>> make_key("post", [("id", 1)]) == make_key("post", [("id", "1")])
        False
    """
    parts = [[name, _canonical(value)] for name, value in key_parts]
    canonical = json.dumps(parts, sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(f"{operation_name}|{canonical}".encode()).hexdigest()
    return f"{operation_name}:{digest}"


class ReadThroughCache:
    """Memoize awaited computations in a :class:`KeyValueStore`.

    Args:
        store: The backing store. Shared by every operation.

    Example::

        cache = ReadThroughCache(MemoryStore())
        post = await cache.get("post", [("id", 1)], lambda: client.fetch_by_id(1))
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._hits = 0
        self._misses = 0

    @property
    def store(self) -> KeyValueStore:
        return self._store

    async def get(
        self,
        operation_name: str,
        key_parts: KeyParts,
        compute: Callable[[], Awaitable[T]],
        unless: Optional[Callable[[T], bool]] = None,
    ) -> T:
        """Return the stored result for the key, computing it on a miss.

        Args:
            operation_name: Namespace of the operation (``"post"``,
                ``"apiData"``, ...).
            key_parts: Ordered ``(name, value)`` pairs identifying the
                result within the operation.
            compute: Zero-argument coroutine function producing the value.
            unless: Optional predicate; a computed value for which it
                returns ``True`` is returned but not stored.

        Returns:
            The stored or freshly computed value.

        Raises:
            Exception: Whatever ``compute`` raises. Nothing is stored.
        """
        key = make_key(operation_name, key_parts)
        cached = self._store.get(key, MISSING)
        if cached is not MISSING:
            self._hits += 1
            logger.debug("Cache hit for %s %s", operation_name, list(key_parts))
            return cached

        self._misses += 1
        logger.debug("Cache miss for %s %s", operation_name, list(key_parts))
        value = await compute()

        if unless is not None and unless(value):
            logger.debug("Result for %s %s not stored", operation_name, list(key_parts))
            return value

        self._store.set(key, value)
        return value

    def stats(self) -> dict[str, Any]:
        """Return hit/miss counters for this instance plus the store's own stats."""
        return {"hits": self._hits, "misses": self._misses, **self._store.stats()}
