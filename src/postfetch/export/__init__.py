"""Export posts as PDF, DOCX or RTF documents."""

from postfetch.export.converters import convert, html_to_docx, html_to_pdf, html_to_rtf
from postfetch.export.exporter import ExportedDocument, export_posts, select_posts
from postfetch.export.formats import DocumentFormat
from postfetch.export.renderer import render_html

__all__ = [
    "DocumentFormat",
    "ExportedDocument",
    "convert",
    "export_posts",
    "html_to_docx",
    "html_to_pdf",
    "html_to_rtf",
    "render_html",
    "select_posts",
]
