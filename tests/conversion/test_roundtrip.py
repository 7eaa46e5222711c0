"""End-to-end checks against the real conversion libraries."""

from __future__ import annotations

import io

import pytest

for _name in ("markdown_it", "linkify_it", "nh3", "docx", "bs4", "mammoth"):
    pytest.importorskip(_name)
pytest.importorskip("markdownify")

import docx  # noqa: E402

from docmorph.conversion.backends import (  # noqa: E402
    build_default_dependencies,
)
from docmorph.conversion.batch import run_batch  # noqa: E402
from docmorph.conversion.docx_to_markdown import (  # noqa: E402
    convert_docx_to_markdown,
    make_docx_converter,
)
from docmorph.conversion.formatting import (  # noqa: E402
    FormattingConfig,
    HeadingStyle,
    TranscriptionConfig,
)
from docmorph.conversion.markdown_to_docx import (  # noqa: E402
    convert_markdown_to_docx,
)
from docmorph.core.files import InputFile  # noqa: E402


@pytest.fixture(scope="module")
def dependencies():
    return build_default_dependencies()


def test_markdown_survives_a_round_trip(dependencies):
    data = convert_markdown_to_docx(
        "# Heading\n\nBody text.", FormattingConfig(), dependencies
    )

    markdown = convert_docx_to_markdown(
        data, TranscriptionConfig(), dependencies, file_name="out.docx"
    )

    assert "# Heading" in markdown
    assert "Body text." in markdown


def test_setext_headings_are_transcribed(dependencies):
    data = convert_markdown_to_docx(
        "# Title\n\n- one\n- two", FormattingConfig(), dependencies
    )

    markdown = convert_docx_to_markdown(
        data,
        TranscriptionConfig(
            heading_style=HeadingStyle.SETEXT, bullet_list_marker="-"
        ),
        dependencies,
    )

    assert "Title\n=====" in markdown
    assert "one" in markdown
    assert "#" not in markdown


def test_heading_styles_follow_formatting(dependencies):
    plain = convert_markdown_to_docx(
        "# Title\n\ntext", FormattingConfig(), dependencies
    )
    styled = convert_markdown_to_docx(
        "# Title\n\ntext",
        FormattingConfig(
            font_family="Verdana", bold_headers=True, italic_headers=True
        ),
        dependencies,
    )

    plain_doc = docx.Document(io.BytesIO(plain))
    styled_doc = docx.Document(io.BytesIO(styled))
    assert plain_doc.styles["Heading 1"].font.bold is False
    assert plain_doc.styles["Heading 1"].font.italic is False
    assert styled_doc.styles["Heading 1"].font.bold is True
    assert styled_doc.styles["Heading 1"].font.italic is True
    assert styled_doc.styles["Normal"].font.name == "Verdana"
    assert plain_doc.styles["Normal"].font.name == "Arial"


def test_scripts_are_sanitized_and_dashes_normalized(dependencies):
    data = convert_markdown_to_docx(
        "Before — after\n\n<script>alert(1)</script>",
        FormattingConfig(),
        dependencies,
    )

    document = docx.Document(io.BytesIO(data))
    text = "\n".join(p.text for p in document.paragraphs)
    assert "Before - after" in text
    assert "alert" not in text


def test_line_breaks_flag_controls_soft_breaks(dependencies):
    with_breaks = convert_markdown_to_docx(
        "one\ntwo", FormattingConfig(), dependencies, breaks=True
    )
    without = convert_markdown_to_docx(
        "one\ntwo", FormattingConfig(), dependencies, breaks=False
    )

    assert docx.Document(io.BytesIO(with_breaks)).paragraphs[0].text == (
        "one\ntwo"
    )
    assert docx.Document(io.BytesIO(without)).paragraphs[0].text == "one two"


def test_strong_keeps_asterisks_when_emphasis_uses_underscores(dependencies):
    data = convert_markdown_to_docx(
        "Some **bold** and *em* text.", FormattingConfig(), dependencies
    )

    markdown = convert_docx_to_markdown(
        data, TranscriptionConfig(), dependencies
    )

    assert "**bold**" in markdown
    assert "_em_" in markdown
    assert "__bold__" not in markdown


def test_broken_word_file_fails_alone_in_a_batch(dependencies):
    good = convert_markdown_to_docx(
        "# Fine\n\nBody.", FormattingConfig(), dependencies
    )
    inputs = [
        InputFile.from_bytes("1.docx", good),
        InputFile.from_bytes("2.docx", b"not a zip"),
        InputFile.from_bytes("3.docx", good),
    ]

    result = run_batch(
        inputs, make_docx_converter(TranscriptionConfig(), dependencies)
    )

    assert [item.source_name for item in result.failures] == ["2.docx"]
    assert [item.source_name for item in result.successes] == [
        "1.docx",
        "3.docx",
    ]
    assert "# Fine" in result.successes[0].payload
    assert result.failures[0].error_message
