"""Render posts to the intermediate HTML document.

Every export starts here: posts are rendered with the ``posts.html.j2``
Jinja2 template, and the converters in :mod:`postfetch.export.converters`
turn the HTML into the requested format. The RTF converter works on the
literal markup this template produces, so the element layout (``<h1>``,
``<div class='post'>``, ``<h2>``, ``<p>``) is part of its contract.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from postfetch.exceptions import RenderError
from postfetch.models import Post

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``export/templates/``)."""

DEFAULT_HEADING = "Posts"


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for export templates.

    Autoescape is on for ``.html.j2`` templates so that post titles and
    bodies cannot inject markup.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
    )


_env = _create_jinja_env()


def render_html(posts: Sequence[Post], heading: str = DEFAULT_HEADING) -> str:
    """Render *posts* into a standalone HTML document.

    Missing titles render as ``Untitled`` and missing bodies as
    ``No content``.

    Raises:
        RenderError: If the template fails to load or render.
    """
    logger.info("Rendering %d posts to HTML", len(posts))
    try:
        return _env.get_template("posts.html.j2").render(posts=posts, heading=heading)
    except TemplateError as exc:
        logger.exception("Error rendering posts to HTML")
        raise RenderError(f"Failed to render posts to HTML: {exc}") from exc
