"""Exception hierarchy for postfetch.

All exceptions inherit from :class:`PostfetchError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`postfetch.exit_codes`.
The top-level error handler in :func:`postfetch.app.main` catches
``PostfetchError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    PostfetchError (exit 1)
    +-- InvalidUsageError          (exit 2)
    |   +-- UnsupportedFormatError (exit 2)
    +-- NotFoundError              (exit 4)
    +-- UpstreamError              (exit 5)
    +-- RenderError                (exit 7)
    +-- ConfigError                (exit 1)
"""

from __future__ import annotations

from typing import Optional

from postfetch.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_RENDER_ERROR,
    EXIT_UPSTREAM_ERROR,
)


class PostfetchError(Exception):
    """Base exception for all postfetch errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(PostfetchError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class UnsupportedFormatError(InvalidUsageError):
    """Raised when an export is requested in a format other than pdf, docx, or rtf."""

    def __init__(self, fmt: str):
        super().__init__(f"Unsupported format: {fmt}")
        self.format = fmt


class NotFoundError(PostfetchError):
    """Raised when a lookup or export selection yields no posts."""

    exit_code = EXIT_NOT_FOUND


class UpstreamError(PostfetchError):
    """Raised when a strict upstream read fails.

    Covers network errors, non-2xx responses, and bodies that cannot be
    decoded into the expected shape. ``status_code`` is set when the
    upstream answered with an HTTP error.
    """

    exit_code = EXIT_UPSTREAM_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RenderError(PostfetchError):
    """Raised when the export pipeline cannot render or convert a document."""

    exit_code = EXIT_RENDER_ERROR


class ConfigError(PostfetchError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
