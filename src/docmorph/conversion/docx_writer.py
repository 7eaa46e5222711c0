"""HTML document to DOCX encoder built on python-docx.

The encoder reads the document's ``<style>`` block so the styling chosen in
:class:`~docmorph.conversion.formatting.FormattingConfig` lands in the Word
styles themselves:

- ``body`` font family and size become the ``Normal`` style; headings inherit
  the family.
- ``h1``-``h6`` weight and style become the bold/italic flags of the
  ``Heading 1``-``Heading 6`` styles.
- ``pre`` font family is used for code blocks and inline code.

Supported markup: headings, paragraphs, inline bold/italic/strike/code/links,
line breaks, bullet and numbered lists (three levels), code blocks,
blockquotes, horizontal rules and tables. Images are dropped.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Optional

from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)
from docx import Document
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Length, Pt, RGBColor

__all__ = ["encode_html_document", "parse_style_rules"]

StyleRules = Mapping[str, Mapping[str, str]]

_RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LENGTH_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*(pt|px)?$")
_HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{6})$")
_WHITESPACE_RE = re.compile(r"\s+")

_HEADINGS = {f"h{level}": level for level in range(1, 7)}
_BLOCK_TAGS = frozenset(
    {
        *_HEADINGS,
        "p",
        "ul",
        "ol",
        "pre",
        "blockquote",
        "hr",
        "table",
        "div",
        "section",
        "article",
        "main",
        "header",
        "footer",
    }
)
_CONTAINER_TAGS = frozenset(
    {"div", "section", "article", "main", "header", "footer"}
)
_SKIPPED_NODES = (Comment, Declaration, Doctype, ProcessingInstruction)
_THEME_FONT_ATTRS = (
    "w:asciiTheme",
    "w:hAnsiTheme",
    "w:eastAsiaTheme",
    "w:cstheme",
)
_LINK_COLOR = RGBColor(0x00, 0x66, 0xCC)
_DEFAULT_MONOSPACE = "Courier New"


def parse_style_rules(css: str) -> dict[str, dict[str, str]]:
    """Parse flat CSS into ``{selector: {property: value}}``.

    Only simple selector lists are understood, which covers the style block
    docmorph generates. Later declarations win.
    """

    rules: dict[str, dict[str, str]] = {}
    for selectors, body in _RULE_RE.findall(_COMMENT_RE.sub("", css)):
        declarations: dict[str, str] = {}
        for declaration in body.split(";"):
            prop, sep, value = declaration.partition(":")
            if sep and prop.strip():
                declarations[prop.strip().lower()] = value.strip()
        for selector in selectors.split(","):
            key = selector.strip().lower()
            if key:
                rules.setdefault(key, {}).update(declarations)
    return rules


def encode_html_document(html: str) -> bytes:
    """Render a complete HTML document into DOCX bytes."""

    soup = BeautifulSoup(html, "html.parser")
    css = "\n".join(tag.get_text() for tag in soup.find_all("style"))
    rules = parse_style_rules(css)

    document = Document()
    _apply_document_styles(document, rules)

    for tag in soup.find_all(["style", "script", "title"]):
        tag.decompose()
    if soup.head is not None:
        soup.head.decompose()
    root = soup.body or soup

    monospace = _first_font_family(rules.get("pre", {}).get("font-family"))
    _Renderer(document, monospace=monospace or _DEFAULT_MONOSPACE).render(root)

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _apply_document_styles(document, rules: StyleRules) -> None:
    body = rules.get("body", {})
    family = _first_font_family(body.get("font-family"))
    size = _parse_length(body.get("font-size"))
    color = _parse_color(body.get("color"))

    normal = document.styles["Normal"]
    if family:
        _set_font_family(normal, family)
    if size is not None:
        normal.font.size = size
    if color is not None:
        normal.font.color.rgb = color

    names = {style.name for style in document.styles}
    for selector, level in _HEADINGS.items():
        style_name = f"Heading {level}"
        if style_name not in names:
            continue
        style = document.styles[style_name]
        declarations = rules.get(selector, {})
        if family:
            _set_font_family(style, family)
        weight = declarations.get("font-weight")
        if weight:
            style.font.bold = _is_bold(weight)
        font_style = declarations.get("font-style")
        if font_style:
            style.font.italic = font_style.lower() in ("italic", "oblique")
        heading_color = _parse_color(declarations.get("color"))
        if heading_color is not None:
            style.font.color.rgb = heading_color


def _set_font_family(style, family: str) -> None:
    style.font.name = family
    # Theme font attributes take precedence over explicit names in Word.
    rfonts = style.element.get_or_add_rPr().get_or_add_rFonts()
    for attr in _THEME_FONT_ATTRS:
        rfonts.attrib.pop(qn(attr), None)


def _first_font_family(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    first = value.split(",", 1)[0].strip().strip("'\"")
    return first.replace("\\'", "'") or None


def _parse_length(value: Optional[str]) -> Optional[Length]:
    if not value:
        return None
    match = _LENGTH_RE.match(value.strip().lower())
    if match is None:
        return None
    amount = float(match.group(1))
    if match.group(2) == "px":
        amount *= 0.75
    return Pt(amount)


def _parse_color(value: Optional[str]) -> Optional[RGBColor]:
    if not value:
        return None
    match = _HEX_COLOR_RE.match(value.strip())
    if match is None:
        return None
    return RGBColor.from_string(match.group(1).upper())


def _is_bold(weight: str) -> bool:
    normalized = weight.strip().lower()
    if normalized in ("bold", "bolder"):
        return True
    return normalized.isdigit() and int(normalized) >= 600


@dataclass(frozen=True)
class _RunFormat:
    bold: bool = False
    italic: bool = False
    strike: bool = False
    code: bool = False
    link: bool = False


class _Renderer:
    def __init__(self, document, *, monospace: str) -> None:
        self._document = document
        self._monospace = monospace
        self._style_names = {style.name for style in document.styles}
        self._at_line_start = True

    def render(self, root: Tag) -> None:
        self._render_children(root, quote=False)

    def _render_children(self, parent: Tag, *, quote: bool) -> None:
        pending: list = []
        for node in parent.children:
            if isinstance(node, Tag) and node.name in _BLOCK_TAGS:
                self._flush_inline(pending, quote=quote)
                pending = []
                self._render_block(node, quote=quote)
            else:
                pending.append(node)
        self._flush_inline(pending, quote=quote)

    def _flush_inline(self, nodes: list, *, quote: bool) -> None:
        if not any(_has_content(node) for node in nodes):
            return
        paragraph = self._paragraph("Quote" if quote else None)
        self._add_inline(paragraph, nodes, _RunFormat())

    def _render_block(self, tag: Tag, *, quote: bool) -> None:
        name = tag.name
        if name in _HEADINGS:
            paragraph = self._paragraph(f"Heading {_HEADINGS[name]}")
            self._add_inline(paragraph, tag.children, _RunFormat())
        elif name == "p":
            paragraph = self._paragraph("Quote" if quote else None)
            self._add_inline(paragraph, tag.children, _RunFormat())
        elif name in ("ul", "ol"):
            self._render_list(tag, depth=1)
        elif name == "pre":
            self._render_code_block(tag)
        elif name == "blockquote":
            self._render_children(tag, quote=True)
        elif name == "hr":
            self._render_rule()
        elif name == "table":
            self._render_table(tag)
        elif name in _CONTAINER_TAGS:
            self._render_children(tag, quote=quote)

    def _render_list(self, tag: Tag, *, depth: int) -> None:
        base = "List Number" if tag.name == "ol" else "List Bullet"
        style_name = base if depth == 1 else f"{base} {min(depth, 3)}"
        for item in tag.find_all("li", recursive=False):
            self._render_list_item(item, style_name=style_name, depth=depth)

    def _render_list_item(
        self, item: Tag, *, style_name: str, depth: int
    ) -> None:
        # Only the first paragraph of an item carries the list style; text
        # after a nested block continues as a plain paragraph.
        inline: list = []
        started = False

        def flush() -> None:
            nonlocal started
            if started and not any(_has_content(node) for node in inline):
                return
            paragraph = self._paragraph(None if started else style_name)
            self._add_inline(paragraph, inline, _RunFormat())
            started = True
            inline.clear()

        for child in item.children:
            if isinstance(child, Tag) and child.name == "p":
                if inline:
                    inline.append(NavigableString(" "))
                inline.extend(child.children)
            elif isinstance(child, Tag) and child.name in _BLOCK_TAGS:
                flush()
                inline.clear()
                if child.name in ("ul", "ol"):
                    self._render_list(child, depth=depth + 1)
                else:
                    self._render_block(child, quote=False)
            else:
                inline.append(child)
        flush()

    def _render_code_block(self, tag: Tag) -> None:
        lines = tag.get_text().rstrip("\n").split("\n")
        paragraph = self._paragraph(None)
        for index, line in enumerate(lines):
            run = paragraph.add_run(line)
            run.font.name = self._monospace
            if index < len(lines) - 1:
                run.add_break()

    def _render_rule(self) -> None:
        paragraph = self._paragraph(None)
        borders = OxmlElement("w:pBdr")
        bottom = OxmlElement("w:bottom")
        bottom.set(qn("w:val"), "single")
        bottom.set(qn("w:sz"), "6")
        bottom.set(qn("w:space"), "1")
        bottom.set(qn("w:color"), "auto")
        borders.append(bottom)
        paragraph._p.get_or_add_pPr().append(borders)

    def _render_table(self, tag: Tag) -> None:
        rows = [
            row.find_all(["th", "td"], recursive=False)
            for row in tag.find_all("tr")
        ]
        rows = [cells for cells in rows if cells]
        if not rows:
            return
        columns = max(len(cells) for cells in rows)
        table = self._document.add_table(rows=len(rows), cols=columns)
        if "Table Grid" in self._style_names:
            table.style = self._document.styles["Table Grid"]
        for row_index, cells in enumerate(rows):
            for column_index, cell in enumerate(cells):
                paragraph = table.cell(row_index, column_index).paragraphs[0]
                self._at_line_start = True
                run_format = _RunFormat(bold=cell.name == "th")
                self._add_inline(paragraph, cell.children, run_format)

    def _paragraph(self, style_name: Optional[str]):
        paragraph = self._document.add_paragraph()
        if style_name and style_name in self._style_names:
            paragraph.style = self._document.styles[style_name]
        self._at_line_start = True
        return paragraph

    def _add_inline(
        self, paragraph, nodes: Iterable, run_format: _RunFormat
    ) -> None:
        for node in nodes:
            if isinstance(node, _SKIPPED_NODES):
                continue
            if isinstance(node, NavigableString):
                self._add_text(paragraph, str(node), run_format)
                continue
            if not isinstance(node, Tag):
                continue
            name = node.name
            if name == "br":
                paragraph.add_run().add_break()
                self._at_line_start = True
                continue
            if name == "img":
                continue
            if name in ("strong", "b"):
                child_format = replace(run_format, bold=True)
            elif name in ("em", "i"):
                child_format = replace(run_format, italic=True)
            elif name in ("del", "s", "strike"):
                child_format = replace(run_format, strike=True)
            elif name == "code":
                child_format = replace(run_format, code=True)
            elif name == "a":
                child_format = replace(run_format, link=True)
            else:
                child_format = run_format
            self._add_inline(paragraph, node.children, child_format)

    def _add_text(self, paragraph, raw: str, run_format: _RunFormat) -> None:
        text = _WHITESPACE_RE.sub(" ", raw)
        if self._at_line_start:
            text = text.lstrip()
        if not text:
            return
        run = paragraph.add_run(text)
        self._at_line_start = False
        if run_format.bold:
            run.bold = True
        if run_format.italic:
            run.italic = True
        if run_format.strike:
            run.font.strike = True
        if run_format.code:
            run.font.name = self._monospace
        if run_format.link:
            run.underline = True
            run.font.color.rgb = _LINK_COLOR


def _has_content(node) -> bool:
    if isinstance(node, _SKIPPED_NODES):
        return False
    if isinstance(node, NavigableString):
        return bool(str(node).strip())
    return isinstance(node, Tag)
