from __future__ import annotations

import pytest

from docmorph.conversion import markdown_to_docx as m2d
from docmorph.conversion.errors import ConversionFailure, EmptyInputError
from docmorph.conversion.formatting import FormattingConfig


def test_convert_runs_each_backend_stage_in_order(backends):
    cfg = FormattingConfig(bold_headers=True)

    data = m2d.convert_markdown_to_docx(
        "# Title", cfg, backends.dependencies(), breaks=False
    )

    assert backends.parsed == [("# Title", False)]
    assert backends.sanitized == ["<p># Title</p>"]
    (document,) = backends.encoded
    assert "<body><p># Title</p></body>" in document
    assert "font-weight: bold;" in document
    assert data.startswith(b"DOCX:")


@pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
def test_convert_rejects_blank_input(backends, text):
    with pytest.raises(EmptyInputError):
        m2d.convert_markdown_to_docx(
            text, FormattingConfig(), backends.dependencies()
        )

    assert backends.parsed == []


def test_convert_wraps_backend_errors(backends):
    backends.fail_on = ("boom",)

    with pytest.raises(ConversionFailure) as excinfo:
        m2d.convert_markdown_to_docx(
            "boom", FormattingConfig(), backends.dependencies()
        )

    assert excinfo.value.file_name == m2d.SINGLE_SOURCE_NAME
    assert "backend rejected boom" in excinfo.value.message
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_normalize_dashes_replaces_every_form():
    html = "a—b–c&mdash;d&ndash;e&#8212;f&#x2013;gâ€”hâ€“i"

    assert m2d.normalize_dashes(html) == "a-b-c-d-e-f-g-h-i"


def test_normalize_dashes_leaves_plain_hyphens():
    assert m2d.normalize_dashes("well-known - fact") == "well-known - fact"


def test_dashes_are_normalized_before_encoding(backends):
    m2d.convert_markdown_to_docx(
        "A — B – C", FormattingConfig(), backends.dependencies()
    )

    (document,) = backends.encoded
    assert "A - B - C" in document
    assert "—" not in document
    assert "–" not in document


def test_batch_converter_reports_empty_file_on_item(backends):
    convert = m2d.make_markdown_converter(
        FormattingConfig(), backends.dependencies()
    )

    with pytest.raises(ConversionFailure) as excinfo:
        convert("blank.md", b"  \n")

    assert excinfo.value.message == "File is empty"
    assert excinfo.value.file_name == "blank.md"


def test_batch_converter_rejects_invalid_utf8(backends):
    convert = m2d.make_markdown_converter(
        FormattingConfig(), backends.dependencies()
    )

    with pytest.raises(ConversionFailure) as excinfo:
        convert("latin.md", b"\xff\xfe\xfa")

    assert "UTF-8" in excinfo.value.message


def test_batch_converter_strips_bom_and_forwards_breaks(backends):
    convert = m2d.make_markdown_converter(
        FormattingConfig(), backends.dependencies(), breaks=False
    )

    data = convert("notes.md", "\ufeffHello".encode("utf-8"))

    assert backends.parsed == [("Hello", False)]
    assert data.startswith(b"DOCX:")
