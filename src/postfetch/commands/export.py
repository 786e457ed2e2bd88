"""Export command -- write posts as a PDF, DOCX, or RTF document.

The selection is fetched through the cache (one post, one owner's posts,
or every post), rendered to HTML, and converted. The document is written
to a file rather than stdout.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from postfetch.exceptions import PostfetchError, UpstreamError
from postfetch.export import export_posts, select_posts
from postfetch.models import Post
from postfetch.output import error, success
from postfetch.runtime import get_config, get_transport, open_service, run

logger = logging.getLogger(__name__)


def export_command(
    ctx: typer.Context,
    fmt: Optional[str] = typer.Option(
        None, "--format", "-F", help="pdf, docx, or rtf (default from config)."
    ),
    owner: Optional[int] = typer.Option(None, "--owner", help="Only posts of this owner."),
    post: Optional[int] = typer.Option(None, "--post", help="Only this post."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output file (default posts.<ext>)."
    ),
) -> None:
    """Export posts as a document.

    ``--post`` wins over ``--owner``; with neither, every post is exported.
    Exits with code 4 when nothing is selected and code 2 for an
    unsupported format.

    Example::

        postfetch export --format rtf --owner 1 -o owner1.rtf
    """
    config, transport = get_config(ctx), get_transport(ctx)
    fmt = fmt or config.export.default_format

    async def _select() -> list[Post]:
        async with open_service(config, transport) as service:
            return await select_posts(service, post_id=post, owner_id=owner)

    try:
        posts = run(_select())
    except UpstreamError as exc:
        logger.error("Error fetching posts for export: %s", exc)
        error(f"Failed to retrieve posts: {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    try:
        document = export_posts(posts, fmt)
    except PostfetchError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    target = output or Path.cwd() / document.filename
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(document.content)
    success(f"Wrote {len(document.content)} bytes ({document.media_type}) to {target}")
