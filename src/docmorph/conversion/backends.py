"""Dependency seams for the conversion libraries.

Conversion functions never reach for a library directly; they receive a
:class:`ConverterDependencies` bundle. :func:`build_default_dependencies`
wires the production libraries and tests substitute plain callables.
"""

from __future__ import annotations

import importlib
import io
from dataclasses import dataclass, field
from typing import Callable, Mapping

from .errors import DependencyError
from .formatting import HeadingStyle, TranscriptionConfig

__all__ = [
    "ConverterDependencies",
    "DecodedDocument",
    "SANITIZER_PROFILES",
    "SanitizerProfile",
    "build_default_dependencies",
    "make_docx_decoder",
    "make_docx_encoder",
    "make_markdown_parser",
    "make_sanitizer",
    "make_transcriber_factory",
]

MarkdownParser = Callable[[str, bool], str]
Sanitizer = Callable[[str], str]
DocumentEncoder = Callable[[str], bytes]
Transcriber = Callable[[str], str]


@dataclass(frozen=True)
class DecodedDocument:
    """HTML produced by the decoder plus any non-fatal warnings."""

    html: str
    messages: tuple[str, ...] = ()


DocumentDecoder = Callable[[bytes], DecodedDocument]
TranscriberFactory = Callable[[TranscriptionConfig], Transcriber]


@dataclass(frozen=True)
class ConverterDependencies:
    """Callable seams for every external conversion library."""

    parse_markdown: MarkdownParser
    sanitize_html: Sanitizer
    encode_document: DocumentEncoder
    decode_document: DocumentDecoder
    build_transcriber: TranscriberFactory


@dataclass(frozen=True)
class SanitizerProfile:
    """Allowed tags and per-tag attributes for the HTML sanitizer."""

    tags: frozenset[str]
    attributes: Mapping[str, frozenset[str]] = field(default_factory=dict)
    url_schemes: frozenset[str] = frozenset({"http", "https", "mailto"})


_HTML_TAGS = frozenset(
    {
        "a",
        "abbr",
        "b",
        "blockquote",
        "br",
        "code",
        "del",
        "div",
        "em",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "hr",
        "i",
        "img",
        "kbd",
        "li",
        "ol",
        "p",
        "pre",
        "s",
        "span",
        "strong",
        "sub",
        "sup",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "tr",
        "ul",
    }
)

SANITIZER_PROFILES: Mapping[str, SanitizerProfile] = {
    "html": SanitizerProfile(
        tags=_HTML_TAGS,
        attributes={
            "a": frozenset({"href", "title"}),
            "img": frozenset({"src", "alt", "title"}),
            "code": frozenset({"class"}),
            "ol": frozenset({"start"}),
            "td": frozenset({"colspan", "rowspan"}),
            "th": frozenset({"colspan", "rowspan"}),
        },
    ),
}


def build_default_dependencies(
    *, sanitizer_profile: str = "html"
) -> ConverterDependencies:
    """Return the production dependency bundle."""

    return ConverterDependencies(
        parse_markdown=make_markdown_parser(),
        sanitize_html=make_sanitizer(sanitizer_profile),
        encode_document=make_docx_encoder(),
        decode_document=make_docx_decoder(),
        build_transcriber=make_transcriber_factory(),
    )


def make_markdown_parser() -> MarkdownParser:
    """GitHub-flavoured Markdown rendering via markdown-it-py."""

    module = _import_module("markdown_it", "MarkdownIt")
    engines: dict[bool, object] = {}

    def parse(text: str, breaks: bool) -> str:
        engine = engines.get(breaks)
        if engine is None:
            engine = module.MarkdownIt("gfm-like", {"breaks": breaks})
            engines[breaks] = engine
        return engine.render(text)

    return parse


def make_sanitizer(profile: str = "html") -> Sanitizer:
    """HTML sanitizer backed by nh3 restricted to ``profile``."""

    try:
        selected = SANITIZER_PROFILES[profile]
    except KeyError as exc:
        raise ValueError(f"Unknown sanitizer profile '{profile}'.") from exc
    module = _import_module("nh3", "clean")
    attributes = {
        tag: set(names) for tag, names in selected.attributes.items()
    }

    def sanitize(html: str) -> str:
        return module.clean(
            html,
            tags=set(selected.tags),
            attributes=attributes,
            url_schemes=set(selected.url_schemes),
        )

    return sanitize


def make_docx_encoder() -> DocumentEncoder:
    """HTML document to DOCX encoder (python-docx)."""

    module = _import_module(
        "docmorph.conversion.docx_writer", "encode_html_document"
    )
    return module.encode_html_document


def make_docx_decoder() -> DocumentDecoder:
    """DOCX to HTML decoder backed by mammoth."""

    module = _import_module("mammoth", "convert_to_html")

    def decode(data: bytes) -> DecodedDocument:
        result = module.convert_to_html(io.BytesIO(data))
        messages = tuple(
            str(getattr(message, "message", message))
            for message in result.messages
        )
        return DecodedDocument(html=result.value, messages=messages)

    return decode


def make_transcriber_factory() -> TranscriberFactory:
    """Build markdownify converters configured from a TranscriptionConfig."""

    module = _import_module("markdownify", "MarkdownConverter")

    class _Converter(module.MarkdownConverter):
        # markdownify doubles ``strong_em_symbol`` for strong text; strong
        # stays ``**`` whatever the emphasis delimiter is.
        def convert_b(self, el, text, *args, **kwargs):
            symbol = self.options["strong_em_symbol"]
            self.options["strong_em_symbol"] = module.ASTERISK
            try:
                return super().convert_b(el, text, *args, **kwargs)
            finally:
                self.options["strong_em_symbol"] = symbol

        convert_strong = convert_b

    def build(cfg: TranscriptionConfig) -> Transcriber:
        heading_style = (
            module.ATX
            if cfg.heading_style is HeadingStyle.ATX
            else module.SETEXT
        )
        converter = _Converter(
            heading_style=heading_style,
            bullets=cfg.bullet_list_marker,
            strong_em_symbol=cfg.em_delimiter,
            code_language="",
            escape_underscores=False,
        )
        return converter.convert

    return build


def _import_module(module: str, required_attribute: str | None = None):
    try:
        imported = importlib.import_module(module)
    except ImportError as exc:
        package = (exc.name or module).split(".", 1)[0]
        raise DependencyError(_missing_dependency_message(package)) from exc

    if required_attribute is not None and not hasattr(
        imported, required_attribute
    ):
        raise DependencyError(
            f"Dependency '{module}' is installed but missing the "
            f"'{required_attribute}' attribute. Upgrade or reinstall it."
        )
    return imported


def _missing_dependency_message(package: str) -> str:
    return (
        f"Library '{package}' is required for document conversion. "
        "Reinstall docmorph with `pip install docmorph` to pull in its "
        "dependencies."
    )
