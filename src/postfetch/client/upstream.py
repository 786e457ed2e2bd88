"""Asynchronous client for the upstream JSONPlaceholder API.

This module provides :class:`UpstreamClient`, a thin wrapper around
:class:`httpx.AsyncClient` bound to a single base URL. Every operation is a
read-only GET whose JSON body is decoded with a :class:`pydantic.TypeAdapter`.

Two failure policies coexist on purpose:

* **strict** -- :meth:`~UpstreamClient.fetch_all`,
  :meth:`~UpstreamClient.fetch_by_owner`, and
  :meth:`~UpstreamClient.fetch_generic` raise
  :class:`~postfetch.exceptions.UpstreamError` on any network, status, or
  decode failure.
* **lenient** -- :meth:`~UpstreamClient.fetch_by_id` never raises; it
  returns :meth:`Post.not_found() <postfetch.models.Post.not_found>` and
  lets the caller tell "missing" apart by the absent ``id``.

There is no retry and no timeout beyond the one configured on the
underlying httpx client.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Any, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from postfetch.exceptions import UpstreamError
from postfetch.models import Post, UpstreamConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")
_POST_LIST: Any = list[Post]


@lru_cache(maxsize=64)
def _adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


def expand_path(path_template: str, path_params: Mapping[str, str]) -> str:
    """Substitute ``{name}`` placeholders in *path_template*.

    Values are percent-encoded so they stay inside their path segment or
    query value. Parameters without a placeholder are ignored.

    Raises:
        UpstreamError: If a placeholder has no matching parameter.

    Example::

        >>> expand_path("/posts/{id}", {"id": "7"})
        '/posts/7'
    """

    def _sub(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in path_params:
            raise UpstreamError(
                f"Missing value for path variable '{name}' in {path_template}"
            )
        return quote(str(path_params[name]), safe="")

    return _PLACEHOLDER.sub(_sub, path_template)


def build_query_template(path: str, names: Sequence[str]) -> str:
    """Build a templated query endpoint such as ``/comments?postId={postId}``.

    The result is meant for :meth:`UpstreamClient.fetch_generic` with the
    query values passed as path variables, so that they become part of the
    cache key.

    Names are percent-encoded on the key side, so a name holding ``&`` or
    ``=`` cannot split the query. Names must not contain braces.
    """
    base = "/" + path.strip("/")
    if not names:
        return base
    query = "&".join(f"{quote(name, safe='')}={{{name}}}" for name in names)
    return f"{base}?{query}"


class UpstreamClient:
    """Asynchronous read-only client for the upstream API.

    Must be used as an async context manager so that the underlying
    :class:`httpx.AsyncClient` is opened and closed.

    Args:
        config: Base URL, timeout, and SSL settings.
        transport: Optional httpx transport, used by tests to stub the
            network with :class:`httpx.MockTransport`.

    Example::

        async with UpstreamClient(UpstreamConfig()) as client:
            posts = await client.fetch_by_owner(1)
    """

    def __init__(
        self,
        config: Optional[UpstreamConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or UpstreamConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._config.base_url

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> UpstreamClient:
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            headers={"Accept": "application/json"},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Typed operations
    # ------------------------------------------------------------------ #

    async def fetch_all(self) -> list[Post]:
        """GET ``/posts``.

        Returns:
            Every post, or an empty list when the upstream body is absent.

        Raises:
            UpstreamError: On network, status, or decode failure.
        """
        logger.info("Fetching all posts")
        posts = await self._get("/posts", _POST_LIST, label="all posts")
        return posts if posts is not None else []

    async def fetch_by_id(self, post_id: int) -> Post:
        """GET ``/posts/{id}``, returning the not-found sentinel on any failure."""
        logger.info("Fetching post with ID: %s", post_id)
        try:
            post = await self._get(
                expand_path("/posts/{id}", {"id": str(post_id)}),
                Post,
                label=f"post {post_id}",
            )
        except UpstreamError as exc:
            logger.error("Error fetching post with ID %s: %s", post_id, exc)
            return Post.not_found()
        return post if post is not None else Post.not_found()

    async def fetch_by_owner(self, owner_id: int) -> list[Post]:
        """GET ``/posts?userId={owner_id}``.

        Raises:
            UpstreamError: On network, status, or decode failure.
        """
        logger.info("Fetching posts for owner with ID: %s", owner_id)
        posts = await self._get(
            expand_path("/posts?userId={userId}", {"userId": str(owner_id)}),
            _POST_LIST,
            label=f"posts for owner {owner_id}",
        )
        return posts if posts is not None else []

    # ------------------------------------------------------------------ #
    # Generic operation
    # ------------------------------------------------------------------ #

    async def fetch_generic(
        self,
        path_template: str,
        result_shape: Any,
        path_params: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """GET an arbitrary templated path and decode it into *result_shape*.

        Args:
            path_template: Path relative to the base URL, with optional
                ``{name}`` placeholders (also allowed in a query string).
            result_shape: Any type a :class:`pydantic.TypeAdapter` accepts,
                e.g. ``Post``, ``list[Post]``, ``dict``, or ``Any``.
            path_params: Values for the placeholders.

        Returns:
            The decoded body.

        Raises:
            UpstreamError: On a missing placeholder value, network error,
                non-2xx status, absent body, or decode failure.
        """
        params = dict(path_params or {})
        if params:
            logger.info("Fetching data from endpoint: %s with variables: %s", path_template, params)
        else:
            logger.info("Fetching data from endpoint: %s", path_template)
        path = expand_path(path_template, params)
        value = await self._get(path, result_shape, label=path)
        if value is None:
            raise UpstreamError(f"Upstream returned no body for {path}")
        return value

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _get(self, path: str, shape: Any, label: str) -> Any:
        """Send the GET and decode the body.

        Returns ``None`` when the body is empty or JSON ``null``.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        try:
            response = await self._client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise UpstreamError(
                f"Upstream returned HTTP {status} for {label}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Failed to fetch {label}: {exc}") from exc

        if not response.content:
            return None
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Upstream body for {label} is not valid JSON") from exc
        if payload is None:
            return None
        try:
            return _adapter(shape).validate_python(payload)
        except ValidationError as exc:
            raise UpstreamError(
                f"Upstream body for {label} does not match the expected shape: "
                f"{exc.error_count()} error(s)"
            ) from exc
