"""Markdown to Word conversion."""

from __future__ import annotations

from typing import Callable

from .backends import ConverterDependencies
from .errors import ConversionFailure, EmptyInputError
from .formatting import FormattingConfig, build_html_document

__all__ = [
    "ItemConverter",
    "SINGLE_SOURCE_NAME",
    "convert_markdown_to_docx",
    "make_markdown_converter",
    "normalize_dashes",
    "render_markdown_document",
]

ItemConverter = Callable[[str, bytes], bytes]

SINGLE_SOURCE_NAME = "converted_document.md"

# Longest sequences first: the mis-encoded forms are UTF-8 dashes decoded as
# cp1252 and must be replaced before their trailing bytes are touched.
_DASH_SEQUENCES = (
    "â€”",
    "â€“",
    "&#x2014;",
    "&#x2013;",
    "&#8212;",
    "&#8211;",
    "&mdash;",
    "&ndash;",
    "—",
    "–",
)


def normalize_dashes(html: str) -> str:
    """Replace em/en dashes (literal, entity or mis-encoded) with ``-``."""

    for sequence in _DASH_SEQUENCES:
        html = html.replace(sequence, "-")
    return html


def convert_markdown_to_docx(
    text: str,
    cfg: FormattingConfig,
    dependencies: ConverterDependencies,
    *,
    breaks: bool = True,
    file_name: str = SINGLE_SOURCE_NAME,
) -> bytes:
    """Convert a Markdown buffer into DOCX bytes.

    Raises :class:`EmptyInputError` for blank input and
    :class:`ConversionFailure` when any backend step fails.
    """

    if not text.strip():
        raise EmptyInputError("Markdown input cannot be empty.")
    return render_markdown_document(
        text, cfg, dependencies, breaks=breaks, file_name=file_name
    )


def render_markdown_document(
    text: str,
    cfg: FormattingConfig,
    dependencies: ConverterDependencies,
    *,
    breaks: bool,
    file_name: str,
) -> bytes:
    try:
        raw_html = dependencies.parse_markdown(text, breaks)
        clean_html = dependencies.sanitize_html(raw_html)
        document = build_html_document(normalize_dashes(clean_html), cfg)
        return dependencies.encode_document(document)
    except Exception as exc:
        message = str(exc) or "Conversion failed"
        raise ConversionFailure(file_name, message) from exc


def make_markdown_converter(
    cfg: FormattingConfig,
    dependencies: ConverterDependencies,
    *,
    breaks: bool = True,
) -> ItemConverter:
    """Return the batch converter for Markdown files.

    Blank files fail with ``File is empty`` on their own item instead of
    raising :class:`EmptyInputError`.
    """

    def convert(name: str, data: bytes) -> bytes:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ConversionFailure(
                name, "File is not valid UTF-8 text"
            ) from exc
        if not text.strip():
            raise ConversionFailure(name, "File is empty")
        return render_markdown_document(
            text, cfg, dependencies, breaks=breaks, file_name=name
        )

    return convert
