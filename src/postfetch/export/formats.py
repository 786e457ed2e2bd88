"""Supported export formats."""

from __future__ import annotations

import enum

from postfetch.exceptions import UnsupportedFormatError


class DocumentFormat(str, enum.Enum):
    """A document format postfetch can export to.

    Each member knows its media type and file extension. Use :meth:`parse`
    to turn user input into a member.
    """

    PDF = "pdf"
    DOCX = "docx"
    RTF = "rtf"

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str | DocumentFormat) -> DocumentFormat:
        """Case-insensitive lookup.

        Raises:
            UnsupportedFormatError: If *value* names no known format.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedFormatError(str(value)) from None


_MEDIA_TYPES = {
    DocumentFormat.PDF: "application/pdf",
    DocumentFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    DocumentFormat.RTF: "application/rtf",
}
