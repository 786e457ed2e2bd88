"""HTTP client module for postfetch.

Provides :class:`UpstreamClient`, a non-blocking client backed by
:class:`httpx.AsyncClient` that performs the typed and generic reads
against the upstream API.

Example::

    from postfetch.client import UpstreamClient

    async with UpstreamClient(config) as client:
        post = await client.fetch_by_id(1)
"""

from postfetch.client.upstream import UpstreamClient, build_query_template, expand_path

__all__ = ["UpstreamClient", "build_query_template", "expand_path"]
