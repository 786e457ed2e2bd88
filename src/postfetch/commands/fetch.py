"""Fetch command -- generic cached proxy to any upstream path.

``postfetch fetch comments`` reads ``/comments``; with an ID it reads
``/comments/{id}``; ``--param postId=1`` turns the path into the query
template ``/comments?postId={postId}``. Every value is passed as a path
variable, so it is URL-quoted and becomes part of the cache key.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import typer

from postfetch.client import build_query_template
from postfetch.exceptions import InvalidUsageError, UpstreamError
from postfetch.models import Envelope
from postfetch.output import error, print_envelope
from postfetch.runtime import fail, get_config, get_transport, open_service, run

logger = logging.getLogger(__name__)


def parse_params(pairs: list[str]) -> dict[str, str]:
    """Parse ``key=value`` strings into a dict.

    Raises:
        InvalidUsageError: If an item has no ``=``, an empty key, or a key
            containing braces.
    """
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip() or "{" in key or "}" in key:
            raise InvalidUsageError(f"Invalid --param '{pair}', expected key=value")
        params[key.strip()] = value
    return params


def build_template(path: str, item_id: Optional[str], names: list[str]) -> str:
    """Build the upstream path template for a resource, item, and query names."""
    resource = path.strip("/")
    if item_id is not None:
        resource = f"{resource}/{{id}}"
    return build_query_template(resource, names)


def fetch_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="Resource path, e.g. 'comments' or 'users'."),
    item_id: Optional[str] = typer.Argument(None, help="Optional item ID."),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-P", help="Query parameter as key=value (repeatable)."
    ),
) -> None:
    """Fetch any upstream resource through the cache.

    Example::

        postfetch fetch users 3
        postfetch fetch comments --param postId=1
    """
    try:
        params = parse_params(param or [])
    except InvalidUsageError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if item_id is not None and "id" in params:
        exc = InvalidUsageError("Pass the item ID either as ITEM_ID or as --param id=..., not both")
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)

    template = build_template(path, item_id, list(params))
    variables = dict(params)
    if item_id is not None:
        variables["id"] = item_id

    config, transport = get_config(ctx), get_transport(ctx)

    async def _fetch() -> Any:
        async with open_service(config, transport) as service:
            return await service.fetch(template, Any, variables)

    try:
        data = run(_fetch())
    except UpstreamError as exc:
        logger.error("Error fetching data from path %s: %s", template, exc)
        fail("Failed to retrieve data", exc)
    print_envelope(Envelope.success(data))
