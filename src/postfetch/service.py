"""Cached post lookups: the upstream client bound to its cache keys.

:class:`PostService` is the composition root for reads. Each method names
the cache operation and the exact inputs that identify its result, then
delegates the miss path to :class:`~postfetch.client.UpstreamClient`:

======================  ===============  ===========================
method                  operation        key parts
======================  ===============  ===========================
``all_posts``           ``posts``        (none)
``post_by_id``          ``post``         ``id``
``posts_by_owner``      ``postsByOwner`` ``ownerId``
``fetch``               ``apiData``      ``path``, ``shape``, ``params``
======================  ===============  ===========================

The generic ``fetch`` includes the result shape in its key so that two
calls on the same path decoding into different shapes never share an
entry.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from postfetch.cache import ReadThroughCache
from postfetch.client import UpstreamClient
from postfetch.models import Post

logger = logging.getLogger(__name__)

OP_ALL_POSTS = "posts"
OP_POST = "post"
OP_POSTS_BY_OWNER = "postsByOwner"
OP_API_DATA = "apiData"


def _is_not_found(post: Post) -> bool:
    return not post.is_found


class PostService:
    """Read posts through the cache.

    Args:
        client: An entered :class:`~postfetch.client.UpstreamClient`.
        cache: The read-through cache shared by all operations.
    """

    def __init__(self, client: UpstreamClient, cache: ReadThroughCache) -> None:
        self._client = client
        self._cache = cache

    @property
    def cache(self) -> ReadThroughCache:
        return self._cache

    async def all_posts(self) -> list[Post]:
        """All posts. Raises :class:`~postfetch.exceptions.UpstreamError` on failure."""
        return await self._cache.get(OP_ALL_POSTS, [], self._client.fetch_all)

    async def post_by_id(self, post_id: int) -> Post:
        """One post, or the not-found sentinel. Never raises.

        The sentinel is returned but not stored, so a transient upstream
        failure does not pin the id to "not found".
        """
        return await self._cache.get(
            OP_POST,
            [("id", post_id)],
            lambda: self._client.fetch_by_id(post_id),
            unless=_is_not_found,
        )

    async def posts_by_owner(self, owner_id: int) -> list[Post]:
        """Posts owned by *owner_id*. Raises on upstream failure."""
        return await self._cache.get(
            OP_POSTS_BY_OWNER,
            [("ownerId", owner_id)],
            lambda: self._client.fetch_by_owner(owner_id),
        )

    async def fetch(
        self,
        path_template: str,
        result_shape: Any = Any,
        path_params: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Generic cached read of any templated upstream path.

        Raises:
            UpstreamError: On any upstream failure; nothing is stored.
        """
        params = dict(path_params or {})
        return await self._cache.get(
            OP_API_DATA,
            [("path", path_template), ("shape", result_shape), ("params", params)],
            lambda: self._client.fetch_generic(path_template, result_shape, params),
        )
