"""Canonical Pydantic models shared across all postfetch modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Domain models** -- decoded from the upstream API or produced for output:
    :class:`Post`, :class:`EnvelopeStatus`, and :class:`Envelope`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`UpstreamConfig`, :class:`CacheConfig`, :class:`OutputConfig`,
    :class:`ExportConfig`, and :class:`GlobalConfig`.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


DEFAULT_BASE_URL = "https://jsonplaceholder.typicode.com"


# --- Domain models ---


class Post(BaseModel):
    """A post as served by the upstream ``/posts`` resource.

    The upstream names the owning user ``userId``; the model exposes it as
    ``owner_id`` and serialises it back under the wire name. Posts are
    frozen once decoded.

    A post with no ``id`` is the *not-found sentinel* returned by the
    lenient single-post lookup. It must never be rendered into a document.

    Example::

        post = Post.model_validate({"id": 1, "userId": 42, "title": "t", "body": "b"})
        assert post.owner_id == 42
        assert Post.not_found().is_found is False
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: Optional[int] = None
    owner_id: Optional[int] = Field(default=None, alias="userId")
    title: Optional[str] = None
    body: Optional[str] = None

    @classmethod
    def not_found(cls) -> Post:
        """Return the sentinel post with every field absent."""
        return cls()

    @property
    def is_found(self) -> bool:
        """``True`` unless this is the not-found sentinel."""
        return self.id is not None

    def to_wire(self) -> dict[str, Any]:
        """Serialise using the upstream field names (``userId``)."""
        return self.model_dump(mode="json", by_alias=True)


class EnvelopeStatus(str, enum.Enum):
    """Outcome marker carried by every :class:`Envelope`."""

    SUCCESS = "success"
    ERROR = "error"


class Envelope(BaseModel):
    """Uniform wrapper printed by every non-document command.

    Exactly one of ``data`` and ``message`` is meaningful: a ``success``
    envelope carries ``data`` and no message, an ``error`` envelope carries a
    ``message`` and no data. Use :meth:`success` and :meth:`error` rather
    than the constructor.
    """

    status: EnvelopeStatus
    data: Any = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one_of_data_or_message(self) -> Envelope:
        if self.status == EnvelopeStatus.SUCCESS and self.message is not None:
            raise ValueError("a success envelope cannot carry a message")
        if self.status == EnvelopeStatus.ERROR:
            if self.message is None:
                raise ValueError("an error envelope requires a message")
            if self.data is not None:
                raise ValueError("an error envelope cannot carry data")
        return self

    @classmethod
    def success(cls, data: Any) -> Envelope:
        return cls(status=EnvelopeStatus.SUCCESS, data=data)

    @classmethod
    def error(cls, message: str) -> Envelope:
        return cls(status=EnvelopeStatus.ERROR, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Dump as ``{status, data}`` or ``{status, message}``.

        Nested posts are serialised with their wire field names.
        """
        dumped = self.model_dump(mode="json", by_alias=True)
        if self.status == EnvelopeStatus.SUCCESS:
            return {"status": dumped["status"], "data": dumped["data"]}
        return {"status": dumped["status"], "message": dumped["message"]}


# --- Configuration models ---


class UpstreamConfig(BaseModel):
    """Connection settings for the upstream API."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Upstream base URL")
    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class CacheConfig(BaseModel):
    """Read-through cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Enable the read-through cache")
    backend: str = Field(default="disk", description="Backing store: disk or memory")
    ttl_seconds: int = Field(
        default=300, description="Entry lifetime in seconds (0 keeps entries until cleared)"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class ExportConfig(BaseModel):
    """Document export defaults."""

    default_format: str = Field(
        default="pdf", description="Export format used when --format is omitted"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/postfetch/config.json``.

    Loaded and saved by :func:`~postfetch.config.load_global_config` and
    :func:`~postfetch.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~postfetch.config.resolve_config`
    for the full precedence chain.
    """

    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
