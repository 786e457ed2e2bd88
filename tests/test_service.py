"""Tests for postfetch.service -- upstream reads bound to cache keys."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from postfetch.cache import MemoryStore, ReadThroughCache
from postfetch.client import UpstreamClient
from postfetch.exceptions import UpstreamError
from postfetch.models import Post
from postfetch.service import PostService


def _run(upstream, config, op, store=None):
    """Run ``op(service)`` against the fake upstream with a shared store."""
    store = store if store is not None else MemoryStore()

    async def _main():
        async with UpstreamClient(config, transport=upstream.transport) as client:
            return await op(PostService(client, ReadThroughCache(store)))

    return asyncio.run(_main())


class TestAllPosts:
    def test_cached_after_first_call(self, upstream, upstream_config, sample_posts) -> None:
        upstream.add("/posts", sample_posts)

        async def _twice(service):
            await service.all_posts()
            return await service.all_posts()

        posts = _run(upstream, upstream_config, _twice)
        assert len(posts) == 3
        assert upstream.calls("/posts") == 1

    def test_failure_not_cached(self, upstream, upstream_config, sample_posts) -> None:
        store = MemoryStore()
        upstream.add("/posts", {}, status=503)
        with pytest.raises(UpstreamError):
            _run(upstream, upstream_config, lambda s: s.all_posts(), store)
        assert store.stats()["size"] == 0

        upstream.add("/posts", sample_posts)
        posts = _run(upstream, upstream_config, lambda s: s.all_posts(), store)
        assert len(posts) == 3
        assert upstream.calls("/posts") == 2


class TestPostById:
    def test_keyed_by_id(self, upstream, upstream_config, sample_posts) -> None:
        upstream.add("/posts/1", sample_posts[0])
        upstream.add("/posts/2", sample_posts[1])

        async def _lookups(service):
            return [await service.post_by_id(i) for i in (1, 2, 1, 2)]

        posts = _run(upstream, upstream_config, _lookups)
        assert [p.id for p in posts] == [1, 2, 1, 2]
        assert upstream.calls("/posts/1") == 1
        assert upstream.calls("/posts/2") == 1

    def test_sentinel_is_not_cached(self, upstream, upstream_config, sample_posts) -> None:
        store = MemoryStore()
        first = _run(upstream, upstream_config, lambda s: s.post_by_id(1), store)
        assert first.is_found is False
        assert store.stats()["size"] == 0

        upstream.add("/posts/1", sample_posts[0])
        second = _run(upstream, upstream_config, lambda s: s.post_by_id(1), store)
        assert second.id == 1


class TestPostsByOwner:
    def test_keyed_by_owner(self, upstream, upstream_config, sample_posts) -> None:
        upstream.add("/posts?userId=1", sample_posts[:2])
        upstream.add("/posts?userId=2", sample_posts[2:])

        async def _lookups(service):
            a = await service.posts_by_owner(1)
            b = await service.posts_by_owner(2)
            c = await service.posts_by_owner(1)
            return a, b, c

        a, b, c = _run(upstream, upstream_config, _lookups)
        assert [p.id for p in a] == [1, 2]
        assert [p.id for p in b] == [3]
        assert a == c
        assert upstream.calls("/posts?userId=1") == 1


class TestFetch:
    def test_same_path_different_shape_does_not_collide(
        self, upstream, upstream_config, sample_posts
    ) -> None:
        upstream.add("/posts", sample_posts)

        async def _both(service):
            raw = await service.fetch("/posts", Any)
            typed = await service.fetch("/posts", list[Post])
            return raw, typed

        raw, typed = _run(upstream, upstream_config, _both)
        assert isinstance(raw[0], dict)
        assert isinstance(typed[0], Post)
        assert upstream.calls("/posts") == 2

    def test_keyed_by_params(self, upstream, upstream_config) -> None:
        upstream.add("/comments?postId=1", [{"id": 1}])
        upstream.add("/comments?postId=2", [{"id": 2}])

        async def _lookups(service):
            template = "/comments?postId={postId}"
            return [
                await service.fetch(template, Any, {"postId": "1"}),
                await service.fetch(template, Any, {"postId": "2"}),
                await service.fetch(template, Any, {"postId": "1"}),
            ]

        results = _run(upstream, upstream_config, _lookups)
        assert results == [[{"id": 1}], [{"id": 2}], [{"id": 1}]]
        assert upstream.calls("/comments?postId=1") == 1

    def test_failure_raises(self, upstream, upstream_config) -> None:
        with pytest.raises(UpstreamError):
            _run(upstream, upstream_config, lambda s: s.fetch("/missing"))
