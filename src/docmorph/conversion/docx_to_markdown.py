"""Word to Markdown conversion."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from docmorph.core.files import matches_extension

from .backends import ConverterDependencies
from .errors import ConversionFailure, UnsupportedFormatError
from .formatting import TranscriptionConfig
from .modes import ConversionMode

__all__ = [
    "TextConverter",
    "convert_docx_to_markdown",
    "make_docx_converter",
]

TextConverter = Callable[[str, bytes], str]

_LOGGER = logging.getLogger(__name__)


def convert_docx_to_markdown(
    data: bytes,
    cfg: TranscriptionConfig,
    dependencies: ConverterDependencies,
    *,
    file_name: str = "document.docx",
    logger: Optional[logging.Logger] = None,
) -> str:
    """Decode a Word document and transcribe it to Markdown.

    Decoder warnings (dropped images, unknown styles) are logged at debug
    level only.
    """

    log = logger or _LOGGER
    extensions = ConversionMode.WORD_TO_MARKDOWN.source_extensions
    if not matches_extension(file_name, extensions):
        raise UnsupportedFormatError(
            f"Unsupported file type for '{file_name}'. "
            "Only .docx or .doc files are allowed.",
            names=(file_name,),
        )

    try:
        decoded = dependencies.decode_document(data)
        for message in decoded.messages:
            log.debug(
                "Decoder warning",
                extra={"source": file_name, "warning": message},
            )
        transcribe = dependencies.build_transcriber(cfg)
        return transcribe(decoded.html)
    except Exception as exc:
        message = str(exc) or "Conversion failed"
        raise ConversionFailure(file_name, message) from exc


def make_docx_converter(
    cfg: TranscriptionConfig,
    dependencies: ConverterDependencies,
    *,
    logger: Optional[logging.Logger] = None,
) -> TextConverter:
    """Return the batch converter for Word files."""

    def convert(name: str, data: bytes) -> str:
        return convert_docx_to_markdown(
            data, cfg, dependencies, file_name=name, logger=logger
        )

    return convert
