"""Turn a selection of posts into a downloadable document."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from postfetch.exceptions import NotFoundError
from postfetch.export.converters import convert
from postfetch.export.formats import DocumentFormat
from postfetch.export.renderer import render_html
from postfetch.models import Post
from postfetch.service import PostService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportedDocument:
    """Bytes of an exported document plus what a caller needs to save or serve it."""

    content: bytes
    format: DocumentFormat

    @property
    def media_type(self) -> str:
        return self.format.media_type

    @property
    def filename(self) -> str:
        return f"posts.{self.format.extension}"


def export_posts(posts: Sequence[Post], fmt: str | DocumentFormat) -> ExportedDocument:
    """Render *posts* and convert them to *fmt*.

    Not-found sentinels are dropped first. An empty selection is reported
    as not found whatever the format, before the format is looked at.

    Raises:
        NotFoundError: If no real post is left.
        UnsupportedFormatError: If *fmt* is not a known format.
        RenderError: If rendering or conversion fails.
    """
    found = [post for post in posts if post.is_found]
    if not found:
        raise NotFoundError("No posts found")
    target = DocumentFormat.parse(fmt)
    logger.info("Exporting %d posts as %s", len(found), target.value)
    return ExportedDocument(content=convert(render_html(found), target), format=target)


async def select_posts(
    service: PostService,
    post_id: Optional[int] = None,
    owner_id: Optional[int] = None,
) -> list[Post]:
    """Pick the posts to export.

    A post id wins over an owner id; with neither, every post is selected.
    A missing post yields an empty list.
    """
    if post_id is not None:
        post = await service.post_by_id(post_id)
        return [post] if post.is_found else []
    if owner_id is not None:
        return await service.posts_by_owner(owner_id)
    return await service.all_posts()
