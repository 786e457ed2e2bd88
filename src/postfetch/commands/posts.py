"""Posts commands -- list, get, and filter posts by owner.

Every command prints a response envelope on stdout. Strict lookups that
fail upstream print an error envelope and exit with
:data:`~postfetch.exit_codes.EXIT_UPSTREAM_ERROR`; a missing post exits
with :data:`~postfetch.exit_codes.EXIT_NOT_FOUND`.
"""

from __future__ import annotations

import logging

import typer

from postfetch.exceptions import NotFoundError, UpstreamError
from postfetch.models import Envelope, Post
from postfetch.output import print_envelope
from postfetch.runtime import fail, get_config, get_transport, open_service, run

logger = logging.getLogger(__name__)

posts_app = typer.Typer(no_args_is_help=True)


def _wire(posts: list[Post]) -> list[dict]:
    return [post.to_wire() for post in posts]


@posts_app.command("list")
def posts_list(ctx: typer.Context) -> None:
    """List every post.

    Example::

        postfetch posts list --json
    """
    config, transport = get_config(ctx), get_transport(ctx)

    async def _fetch() -> list[Post]:
        async with open_service(config, transport) as service:
            return await service.all_posts()

    try:
        posts = run(_fetch())
    except UpstreamError as exc:
        logger.error("Error fetching all posts: %s", exc)
        fail("Failed to retrieve posts", exc)
    print_envelope(Envelope.success(_wire(posts)))


@posts_app.command("get")
def posts_get(
    ctx: typer.Context,
    post_id: int = typer.Argument(help="Post ID."),
) -> None:
    """Show one post.

    Exits with code 4 and an error envelope when the post does not exist
    or cannot be fetched.

    Example::

        postfetch posts get 1
    """
    config, transport = get_config(ctx), get_transport(ctx)

    async def _fetch() -> Post:
        async with open_service(config, transport) as service:
            return await service.post_by_id(post_id)

    post = run(_fetch())
    if not post.is_found:
        message = f"Post not found with ID: {post_id}"
        fail(message, NotFoundError(message))
    print_envelope(Envelope.success(post.to_wire()))


@posts_app.command("by-owner")
def posts_by_owner(
    ctx: typer.Context,
    owner_id: int = typer.Argument(help="Owner (user) ID."),
) -> None:
    """List the posts owned by one user.

    Example::

        postfetch posts by-owner 1
    """
    config, transport = get_config(ctx), get_transport(ctx)

    async def _fetch() -> list[Post]:
        async with open_service(config, transport) as service:
            return await service.posts_by_owner(owner_id)

    try:
        posts = run(_fetch())
    except UpstreamError as exc:
        logger.error("Error fetching posts for owner with ID %s: %s", owner_id, exc)
        fail("Failed to retrieve posts for user", exc)
    print_envelope(Envelope.success(_wire(posts)))
