from __future__ import annotations

import io
import zipfile

import pytest

from docmorph.conversion import packaging
from docmorph.conversion.errors import PackagingError
from docmorph.conversion.modes import ConversionMode
from docmorph.conversion.runner import new_item


def _success(name: str, payload):
    return new_item(name).start().succeed(payload)


def _entries(deliverable) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(deliverable.data)) as archive:
        return {
            info.filename: archive.read(info) for info in archive.infolist()
        }


def test_single_success_is_delivered_directly():
    deliverable = packaging.package_results(
        [_success("notes.md", b"DOCX")], ConversionMode.MARKDOWN_TO_WORD
    )

    assert deliverable.name == "notes.docx"
    assert deliverable.data == b"DOCX"
    assert deliverable.entries == ()
    assert deliverable.is_archive is False
    assert deliverable.media_type.endswith("wordprocessingml.document")


def test_text_payload_is_encoded_as_utf8():
    deliverable = packaging.package_results(
        [_success("Résumé.DOCX", "# Café")],
        ConversionMode.WORD_TO_MARKDOWN,
    )

    assert deliverable.name == "Résumé.md"
    assert deliverable.data == "# Café".encode("utf-8")


def test_two_successes_become_an_archive():
    deliverable = packaging.package_results(
        [_success("a.docx", "# A"), _success("b.doc", "# B")],
        ConversionMode.WORD_TO_MARKDOWN,
    )

    assert deliverable.name == "batch_converted_markdown_files.zip"
    assert deliverable.media_type == "application/zip"
    assert deliverable.entries == ("a.md", "b.md")
    assert _entries(deliverable) == {"a.md": b"# A", "b.md": b"# B"}


def test_markdown_batch_archive_name():
    deliverable = packaging.package_results(
        [_success("a.md", b"1"), _success("b.md", b"2")],
        ConversionMode.MARKDOWN_TO_WORD,
    )

    assert deliverable.name == "batch_converted_word_documents.zip"


def test_no_successes_is_an_error():
    with pytest.raises(PackagingError):
        packaging.package_results([], ConversionMode.MARKDOWN_TO_WORD)


def test_failed_items_cannot_be_packaged():
    failed = new_item("a.md").start().fail("nope")

    with pytest.raises(PackagingError):
        packaging.package_results([failed], ConversionMode.MARKDOWN_TO_WORD)


def test_rename_collisions_default_to_last_write_wins():
    deliverable = packaging.package_results(
        [
            _success("notes.docx", "first"),
            _success("notes.doc", "second"),
            _success("other.docx", "third"),
        ],
        ConversionMode.WORD_TO_MARKDOWN,
    )

    assert deliverable.entries == ("notes.md", "other.md")
    assert _entries(deliverable)["notes.md"] == b"second"


def test_rename_collisions_can_be_suffixed():
    deliverable = packaging.package_results(
        [
            _success("notes.docx", "first"),
            _success("notes.doc", "second"),
            _success("NOTES.docx", "third"),
        ],
        ConversionMode.WORD_TO_MARKDOWN,
        rename_collision=packaging.RenameCollision.SUFFIX,
    )

    assert deliverable.entries == ("notes.md", "notes-01.md", "NOTES.md")


def test_archive_builder_errors_are_wrapped():
    def broken(entries):
        raise OSError("disk full")

    with pytest.raises(PackagingError, match="disk full"):
        packaging.package_results(
            [_success("a.md", b"1"), _success("b.md", b"2")],
            ConversionMode.MARKDOWN_TO_WORD,
            archive_builder=broken,
        )


def test_rename_collision_from_value():
    assert (
        packaging.RenameCollision.from_value(" Suffix ")
        is packaging.RenameCollision.SUFFIX
    )
