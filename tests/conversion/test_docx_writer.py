from __future__ import annotations

import io

import pytest

docx = pytest.importorskip("docx")
pytest.importorskip("bs4")

from docx.shared import Pt  # noqa: E402

from docmorph.conversion import docx_writer  # noqa: E402
from docmorph.conversion.formatting import (  # noqa: E402
    FormattingConfig,
    build_html_document,
)


def _encode(body: str, cfg: FormattingConfig | None = None):
    html = build_html_document(body, cfg or FormattingConfig())
    data = docx_writer.encode_html_document(html)
    return docx.Document(io.BytesIO(data))


def test_parse_style_rules_splits_selector_lists():
    rules = docx_writer.parse_style_rules(
        "/* c */ h1, h2 { font-weight: bold; color: #111111 }\n"
        "body { font-family: 'Arial'; }"
    )

    assert rules["h1"] == {"font-weight": "bold", "color": "#111111"}
    assert rules["h2"]["font-weight"] == "bold"
    assert rules["body"]["font-family"] == "'Arial'"


def test_body_font_becomes_normal_style():
    document = _encode(
        "<p>Body</p>",
        FormattingConfig(font_family="Georgia", font_size="14pt"),
    )

    normal = document.styles["Normal"]
    assert normal.font.name == "Georgia"
    assert normal.font.size == Pt(14)


@pytest.mark.parametrize(
    ("bold", "italic"),
    [(True, False), (False, True), (True, True), (False, False)],
)
def test_heading_flags_follow_configuration(bold, italic):
    cfg = FormattingConfig(bold_headers=bold, italic_headers=italic)

    document = _encode("<h1>Title</h1><h3>Sub</h3>", cfg)

    for name in ("Heading 1", "Heading 3"):
        style = document.styles[name]
        assert style.font.bold is bold
        assert style.font.italic is italic


def test_headings_paragraphs_and_inline_runs():
    document = _encode(
        "<h2>Intro</h2><p>Plain <strong>bold</strong> and <em>it</em> "
        '<a href="https://example.com">link</a></p>'
    )

    heading, paragraph = document.paragraphs
    assert heading.style.name == "Heading 2"
    assert heading.text == "Intro"
    assert paragraph.text == "Plain bold and it link"
    runs = {run.text: run for run in paragraph.runs}
    assert runs["bold"].bold is True
    assert runs["it"].italic is True
    assert runs["link"].underline is True


def test_nested_lists_use_level_styles():
    document = _encode(
        "<ul><li>one<ul><li>inner</li></ul></li><li>two</li></ul>"
        "<ol><li>first</li></ol>"
    )

    styles = [(p.text, p.style.name) for p in document.paragraphs]
    assert styles == [
        ("one", "List Bullet"),
        ("inner", "List Bullet 2"),
        ("two", "List Bullet"),
        ("first", "List Number"),
    ]


def test_block_children_of_list_items_keep_their_layout():
    document = _encode(
        "<ul><li>Run:<pre><code>a = 1\nb = 2</code></pre></li>"
        "<li>Note<blockquote><p>Quoted</p></blockquote>after</li>"
        "<li>last</li></ul>"
    )

    styles = [(p.text, p.style.name) for p in document.paragraphs]
    assert styles == [
        ("Run:", "List Bullet"),
        ("a = 1\nb = 2", "Normal"),
        ("Note", "List Bullet"),
        ("Quoted", "Quote"),
        ("after", "Normal"),
        ("last", "List Bullet"),
    ]
    code = document.paragraphs[1]
    assert all(run.font.name == "Courier New" for run in code.runs)


def test_code_block_keeps_lines_in_monospace():
    document = _encode("<pre><code>a = 1\nb = 2\n</code></pre>")

    (paragraph,) = document.paragraphs
    assert paragraph.text == "a = 1\nb = 2"
    assert all(run.font.name == "Courier New" for run in paragraph.runs)


def test_tables_are_rendered_with_bold_headers():
    document = _encode(
        "<table><thead><tr><th>Name</th><th>Qty</th></tr></thead>"
        "<tbody><tr><td>Pen</td><td>2</td></tr></tbody></table>"
    )

    (table,) = document.tables
    assert table.cell(0, 0).text == "Name"
    assert table.cell(1, 1).text == "2"
    assert table.cell(0, 1).paragraphs[0].runs[0].bold is True


def test_images_are_dropped_and_rules_kept():
    document = _encode('<p>Before<img src="x.png" alt="x"></p><hr><p>After</p>')

    texts = [p.text for p in document.paragraphs]
    assert texts == ["Before", "", "After"]


def test_blockquote_uses_quote_style():
    document = _encode("<blockquote><p>Quoted</p></blockquote>")

    (paragraph,) = document.paragraphs
    assert paragraph.style.name == "Quote"
