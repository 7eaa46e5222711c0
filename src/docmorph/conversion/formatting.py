"""Formatting value objects for both conversion directions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from html import escape

__all__ = [
    "AVAILABLE_FONTS",
    "BULLET_MARKERS",
    "FormattingConfig",
    "HeadingStyle",
    "TranscriptionConfig",
    "build_html_document",
    "render_style_block",
]

AVAILABLE_FONTS: tuple[str, ...] = (
    "Arial",
    "Times New Roman",
    "Calibri",
    "Verdana",
    "Georgia",
    "Helvetica",
    "Courier New",
    "Tahoma",
    "Garamond",
    "Palatino Linotype",
)

BULLET_MARKERS: tuple[str, ...] = ("*", "-", "+")


class HeadingStyle(Enum):
    ATX = "atx"
    SETEXT = "setext"


@dataclass(frozen=True)
class FormattingConfig:
    """Styling applied to generated Word documents.

    ``font_size`` is passed through to the style block verbatim, so any CSS
    length token (``11pt``, ``14px``) is accepted.
    """

    font_family: str = "Arial"
    font_size: str = "11pt"
    bold_headers: bool = False
    italic_headers: bool = False

    def __post_init__(self) -> None:
        if not self.font_family.strip():
            raise ValueError("font_family must be a non-empty string.")
        if not self.font_size.strip():
            raise ValueError("font_size must be a non-empty string.")


@dataclass(frozen=True)
class TranscriptionConfig:
    """Markdown style rules used when transcribing Word documents."""

    heading_style: HeadingStyle = HeadingStyle.ATX
    bullet_list_marker: str = "*"
    code_block_style: str = "fenced"
    em_delimiter: str = "_"
    hr: str = "---"

    def __post_init__(self) -> None:
        if not isinstance(self.heading_style, HeadingStyle):
            raise ValueError(
                f"Unsupported heading style: {self.heading_style!r}"
            )
        if self.bullet_list_marker not in BULLET_MARKERS:
            raise ValueError(
                f"Unsupported bullet marker: {self.bullet_list_marker!r}"
            )
        if self.code_block_style != "fenced":
            raise ValueError("Only fenced code blocks are supported.")
        if self.em_delimiter != "_":
            raise ValueError("Only '_' is supported as the emphasis delimiter.")
        if self.hr != "---":
            raise ValueError("Only '---' is supported as the rule marker.")


def render_style_block(cfg: FormattingConfig) -> str:
    """Return the ``<style>`` element embedded in generated documents."""

    family = cfg.font_family.replace("'", "\\'")
    weight = "bold" if cfg.bold_headers else "normal"
    style = "italic" if cfg.italic_headers else "normal"
    return f"""<style>
body {{
  font-family: '{family}';
  font-size: {cfg.font_size};
  line-height: 1.6;
  color: #333333;
}}
h1, h2, h3, h4, h5, h6 {{
  font-weight: {weight};
  font-style: {style};
  color: #1a1a1a;
  margin-top: 1.2em;
  margin-bottom: 0.6em;
}}
p {{ margin-bottom: 0.8em; }}
ul, ol {{ margin-bottom: 0.8em; padding-left: 40px; }}
li {{ margin-bottom: 0.3em; }}
a {{ color: #0066cc; text-decoration: underline; }}
pre {{
  font-family: 'Courier New', Courier, monospace;
  background-color: #f0f0f0;
  padding: 1em;
  font-size: 0.9em;
  white-space: pre-wrap;
}}
code {{
  font-family: 'Courier New', Courier, monospace;
  background-color: #f0f0f0;
  font-size: 0.95em;
}}
blockquote {{
  border-left: 4px solid #cccccc;
  padding-left: 1em;
  font-style: italic;
  color: #555555;
}}
table {{ border-collapse: collapse; width: 100%; margin-bottom: 1em; }}
th, td {{ border: 1px solid #dddddd; padding: 8px; text-align: left; }}
th {{ background-color: #f2f2f2; }}
</style>"""


def build_html_document(
    body_html: str, cfg: FormattingConfig, *, title: str = "Document"
) -> str:
    """Wrap ``body_html`` in a minimal document carrying the style block."""

    return (
        '<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8">'
        f"<title>{escape(title)}</title>{render_style_block(cfg)}</head>"
        f"<body>{body_html}</body></html>"
    )
