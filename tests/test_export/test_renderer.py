"""Tests for postfetch.export.renderer -- the intermediate HTML document."""

from __future__ import annotations

from postfetch.export import render_html
from postfetch.models import Post


class TestRenderHtml:
    def test_structure(self) -> None:
        html = render_html([Post(id=1, owner_id=1, title="Hello", body="World")])
        assert html.startswith("<!DOCTYPE html><html><head><title>Posts</title></head><body>")
        assert "<h1>Posts</h1>" in html
        assert "<div class='post'>" in html
        assert "<h2>Hello</h2>" in html
        assert "<p>World</p>" in html
        assert html.rstrip().endswith("</body></html>")

    def test_one_block_per_post(self) -> None:
        posts = [Post(id=i, title=f"T{i}", body="b") for i in range(1, 4)]
        assert render_html(posts).count("<div class='post'>") == 3

    def test_missing_fields_use_placeholders(self) -> None:
        html = render_html([Post(id=1)])
        assert "<h2>Untitled</h2>" in html
        assert "<p>No content</p>" in html

    def test_values_are_escaped(self) -> None:
        html = render_html([Post(id=1, title="<b>bold</b>", body="a & b")])
        assert "<b>bold</b>" not in html
        assert "&lt;b&gt;bold&lt;/b&gt;" in html
        assert "a &amp; b" in html

    def test_custom_heading(self) -> None:
        assert "<h1>Owner 1</h1>" in render_html([Post(id=1)], heading="Owner 1")
