"""Convert the rendered HTML document into PDF, DOCX or RTF bytes.

RTF is produced by a fixed, ordered tag substitution over the markup
emitted by ``posts.html.j2``; the output is byte-for-byte deterministic.
PDF (reportlab) and DOCX (python-docx) are built from the document's
heading and paragraph blocks, which are pulled out of the HTML with
BeautifulSoup.
"""

from __future__ import annotations

import html
import io
import logging
import re
from xml.sax.saxutils import escape as xml_escape

from bs4 import BeautifulSoup
from docx import Document
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate

from postfetch.exceptions import RenderError
from postfetch.export.formats import DocumentFormat

logger = logging.getLogger(__name__)

RTF_HEADER = (
    "{\\rtf1\\ansi\\deff0\n"
    "{\\fonttbl{\\f0\\fswiss\\fcharset0 Arial;}}\n"
    "\\viewkind4\\uc1\\pard\\f0\\fs20\n"
)
RTF_FOOTER = "}"

# Applied in order. Only the exact markup of posts.html.j2 is recognised.
RTF_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("<html>", ""),
    ("</html>", ""),
    ("<body>", ""),
    ("</body>", ""),
    ("<h1>", "\\b\\fs32 "),
    ("</h1>", "\\b0\\fs20\\par\n"),
    ("<h2>", "\\b\\fs28 "),
    ("</h2>", "\\b0\\fs20\\par\n"),
    ("<p>", ""),
    ("</p>", "\\par\n"),
    ("<b>", "\\b "),
    ("</b>", "\\b0 "),
    ("<i>", "\\i "),
    ("</i>", "\\i0 "),
    ("<div class='post'>", ""),
    ("</div>", "\\par\n"),
    ("<ul>", "\\par\n"),
    ("</ul>", "\\par\n"),
    ("<ol>", "\\par\n"),
    ("</ol>", "\\par\n"),
    ("<li>", "\\bullet "),
    ("</li>", "\\par\n"),
    ("<head>", ""),
    ("</head>", ""),
    ("<title>", ""),
    ("</title>", ""),
    ("<!DOCTYPE html>", ""),
)

_ENTITY = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")

_BLOCK_TAGS = ("h1", "h2", "h3", "p", "li")


def _rtf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("{", "\\{").replace("}", "\\}")


def _rtf_unicode(text: str) -> str:
    """Encode non-ASCII characters as ``\\uN?`` control words."""
    out = []
    for ch in text:
        code = ord(ch)
        if code < 0x80:
            out.append(ch)
            continue
        units = ch.encode("utf-16-be")
        for i in range(0, len(units), 2):
            unit = int.from_bytes(units[i : i + 2], "big")
            out.append(f"\\u{unit - 0x10000 if unit >= 0x8000 else unit}?")
    return "".join(out)


def html_to_rtf(document: str) -> bytes:
    """Convert rendered HTML to an RTF document.

    Backslashes and braces in the text are escaped first so that they
    cannot open RTF groups; entities left by HTML escaping are decoded
    last and their results escaped in turn.
    """
    content = _rtf_escape(document)
    for tag, replacement in RTF_SUBSTITUTIONS:
        content = content.replace(tag, replacement)
    content = _ENTITY.sub(lambda m: _rtf_escape(html.unescape(m.group(0))), content)
    return (RTF_HEADER + _rtf_unicode(content) + RTF_FOOTER).encode("ascii")


def _blocks(document: str) -> tuple[str, list[tuple[str, str]]]:
    """Return the document title and its ``(tag, text)`` blocks in order."""
    soup = BeautifulSoup(document, "html.parser")
    title = soup.title.get_text(strip=True) if soup.title else ""
    root = soup.body or soup
    blocks = [
        (element.name, element.get_text(" ", strip=True))
        for element in root.find_all(_BLOCK_TAGS)
    ]
    return title, blocks


def html_to_pdf(document: str) -> bytes:
    """Lay out the document's headings and paragraphs as a PDF with reportlab."""
    title, blocks = _blocks(document)
    styles = getSampleStyleSheet()
    style_for = {
        "h1": styles["Heading1"],
        "h2": styles["Heading2"],
        "h3": styles["Heading3"],
    }
    story = [
        Paragraph(xml_escape(text), style_for.get(tag, styles["BodyText"]))
        for tag, text in blocks
    ]
    buffer = io.BytesIO()
    SimpleDocTemplate(buffer, pagesize=A4, title=title).build(story)
    return buffer.getvalue()


def html_to_docx(document: str) -> bytes:
    """Build a Word document from the document's headings and paragraphs."""
    title, blocks = _blocks(document)
    word = Document()
    if title:
        word.core_properties.title = title
    for tag, text in blocks:
        if tag in ("h1", "h2", "h3"):
            word.add_heading(text, level=int(tag[1]))
        elif tag == "li":
            word.add_paragraph(text, style="List Bullet")
        else:
            word.add_paragraph(text)
    buffer = io.BytesIO()
    word.save(buffer)
    return buffer.getvalue()


_CONVERTERS = {
    DocumentFormat.PDF: html_to_pdf,
    DocumentFormat.DOCX: html_to_docx,
    DocumentFormat.RTF: html_to_rtf,
}


def convert(document: str, fmt: str | DocumentFormat) -> bytes:
    """Convert rendered HTML into *fmt*.

    Raises:
        UnsupportedFormatError: If *fmt* is not a known format.
        RenderError: If the converter fails.
    """
    target = DocumentFormat.parse(fmt)
    logger.info("Converting HTML to %s", target.value.upper())
    try:
        return _CONVERTERS[target](document)
    except Exception as exc:
        logger.exception("Error converting HTML to %s", target.value.upper())
        raise RenderError(f"Failed to convert HTML to {target.value.upper()}: {exc}") from exc
