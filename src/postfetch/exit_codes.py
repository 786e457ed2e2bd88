"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~postfetch.exceptions.PostfetchError` subclass.
Shell wrappers can inspect the exit code to tell a missing post from an
upstream outage without parsing stderr.

Example::

    $ postfetch posts get 9999
    $ echo $?
    4   # EXIT_NOT_FOUND -- the upstream has no such post
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, including an unsupported export format."""

EXIT_NOT_FOUND = 4
"""The requested post was not found, or an export selected no posts."""

EXIT_UPSTREAM_ERROR = 5
"""The upstream API failed: network error, non-2xx status, or undecodable body."""

EXIT_RENDER_ERROR = 7
"""A document could not be rendered or converted."""
