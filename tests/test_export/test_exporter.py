"""Tests for postfetch.export.exporter -- selection and export of posts."""

from __future__ import annotations

import asyncio

import pytest

from postfetch.cache import MemoryStore, ReadThroughCache
from postfetch.client import UpstreamClient
from postfetch.exceptions import NotFoundError, UnsupportedFormatError
from postfetch.export import DocumentFormat, ExportedDocument, export_posts, select_posts
from postfetch.models import Post
from postfetch.service import PostService


def _select(upstream, config, **kwargs):
    async def _main():
        async with UpstreamClient(config, transport=upstream.transport) as client:
            service = PostService(client, ReadThroughCache(MemoryStore()))
            return await select_posts(service, **kwargs)

    return asyncio.run(_main())


# ------------------------------------------------------------------ #
# export_posts
# ------------------------------------------------------------------ #


class TestExportPosts:
    def test_rtf_document(self) -> None:
        doc = export_posts([Post(id=1, owner_id=42, title="Title", body="Body")], "rtf")
        assert isinstance(doc, ExportedDocument)
        assert doc.format is DocumentFormat.RTF
        assert doc.media_type == "application/rtf"
        assert doc.filename == "posts.rtf"
        assert doc.content.startswith(b"{\\rtf1")

    def test_pdf_filename(self) -> None:
        doc = export_posts([Post(id=1, title="T", body="B")], DocumentFormat.PDF)
        assert doc.filename == "posts.pdf"
        assert doc.content.startswith(b"%PDF")

    @pytest.mark.parametrize("fmt", ["pdf", "docx", "rtf", "odt"])
    def test_empty_is_not_found_regardless_of_format(self, fmt) -> None:
        with pytest.raises(NotFoundError, match="No posts found") as exc_info:
            export_posts([], fmt)
        assert exc_info.value.exit_code == 4

    def test_only_sentinels_is_not_found(self) -> None:
        with pytest.raises(NotFoundError):
            export_posts([Post.not_found()], "rtf")

    def test_sentinels_are_dropped(self) -> None:
        doc = export_posts([Post.not_found(), Post(id=1, title="Kept", body="b")], "rtf")
        assert doc.content.count(b"\\b\\fs28 ") == 1
        assert b"Untitled" not in doc.content

    def test_unsupported_format(self) -> None:
        with pytest.raises(UnsupportedFormatError, match="Unsupported format: odt"):
            export_posts([Post(id=1)], "odt")


# ------------------------------------------------------------------ #
# select_posts
# ------------------------------------------------------------------ #


class TestSelectPosts:
    def test_post_id_wins(self, upstream, upstream_config, sample_posts) -> None:
        upstream.add("/posts/3", sample_posts[2])
        posts = _select(upstream, upstream_config, post_id=3, owner_id=1)
        assert [p.id for p in posts] == [3]
        assert upstream.calls("/posts?userId=1") == 0

    def test_missing_post_is_empty(self, upstream, upstream_config) -> None:
        assert _select(upstream, upstream_config, post_id=99) == []

    def test_owner(self, upstream, upstream_config, sample_posts) -> None:
        upstream.add("/posts?userId=1", sample_posts[:2])
        posts = _select(upstream, upstream_config, owner_id=1)
        assert [p.id for p in posts] == [1, 2]

    def test_all(self, upstream, upstream_config, sample_posts) -> None:
        upstream.add("/posts", sample_posts)
        assert len(_select(upstream, upstream_config)) == 3


def test_owner_export_scenario(upstream, upstream_config) -> None:
    """Posts of owner 42 exported as RTF carry the title as a level-2 heading."""
    upstream.add(
        "/posts?userId=42", [{"id": 1, "userId": 42, "title": "Title", "body": "Body"}]
    )
    posts = _select(upstream, upstream_config, owner_id=42)
    doc = export_posts(posts, "rtf")
    assert b"\\b\\fs28 Title\\b0\\fs20\\par" in doc.content
    assert b"Body\\par" in doc.content
