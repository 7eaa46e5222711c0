from __future__ import annotations

import pytest

from docmorph.conversion.config import CollisionPolicy
from docmorph.conversion.errors import PackagingError
from docmorph.conversion.output import save_deliverable
from docmorph.conversion.packaging import Deliverable


def _deliverable(data: bytes = b"new") -> Deliverable:
    return Deliverable(name="notes.docx", data=data, media_type="x")


def test_save_creates_output_directory(tmp_path):
    target_dir = tmp_path / "out" / "nested"

    saved = save_deliverable(_deliverable(), target_dir)

    assert saved.written is True
    assert saved.path == target_dir / "notes.docx"
    assert saved.path.read_bytes() == b"new"


def test_version_policy_adds_numbered_suffix(tmp_path):
    (tmp_path / "notes.docx").write_bytes(b"old")
    (tmp_path / "notes-01.docx").write_bytes(b"old")

    saved = save_deliverable(
        _deliverable(), tmp_path, collision=CollisionPolicy.VERSION
    )

    assert saved.path == tmp_path / "notes-02.docx"
    assert (tmp_path / "notes.docx").read_bytes() == b"old"


def test_overwrite_policy_replaces_file(tmp_path):
    (tmp_path / "notes.docx").write_bytes(b"old")

    saved = save_deliverable(
        _deliverable(), tmp_path, collision=CollisionPolicy.OVERWRITE
    )

    assert saved.path.read_bytes() == b"new"


def test_skip_policy_leaves_file(tmp_path):
    (tmp_path / "notes.docx").write_bytes(b"old")

    saved = save_deliverable(
        _deliverable(), tmp_path, collision=CollisionPolicy.SKIP
    )

    assert saved.written is False
    assert "skip" in saved.reason
    assert (tmp_path / "notes.docx").read_bytes() == b"old"


def test_unwritable_destination_raises(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(PackagingError):
        save_deliverable(_deliverable(), blocker / "sub")
