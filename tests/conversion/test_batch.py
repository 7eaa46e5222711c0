from __future__ import annotations

import pytest

from docmorph.conversion import batch
from docmorph.conversion.errors import ConversionFailure, ValidationError
from docmorph.conversion.runner import ItemStatus
from docmorph.core.files import InputFile


def _inputs(*names: str) -> list[InputFile]:
    return [InputFile.from_bytes(name, name.encode()) for name in names]


def _convert(name: str, data: bytes) -> str:
    if name.startswith("bad"):
        raise ConversionFailure(name, "cannot parse")
    return data.decode().upper()


def test_failing_middle_item_does_not_stop_the_batch():
    result = batch.run_batch(_inputs("a.md", "bad.md", "c.md"), _convert)

    assert [item.source_name for item in result.items] == [
        "a.md",
        "bad.md",
        "c.md",
    ]
    assert [item.status for item in result.items] == [
        ItemStatus.SUCCESS,
        ItemStatus.ERROR,
        ItemStatus.SUCCESS,
    ]
    assert result.items[1].error_message == "cannot parse"
    assert [item.payload for item in result.successes] == ["A.MD", "C.MD"]
    assert [item.source_name for item in result.failures] == ["bad.md"]
    assert result.all_failed is False
    assert result.exit_code == 1


def test_snapshots_are_published_in_order():
    snapshots: list[batch.Snapshot] = []

    batch.run_batch(
        _inputs("a.md", "b.md"), _convert, on_update=snapshots.append
    )

    statuses = [tuple(item.status for item in snap) for snap in snapshots]
    pending, converting, success = (
        ItemStatus.PENDING,
        ItemStatus.CONVERTING,
        ItemStatus.SUCCESS,
    )
    assert statuses == [
        (pending, pending),
        (converting, pending),
        (success, pending),
        (success, converting),
        (success, success),
    ]


def test_items_run_one_at_a_time():
    active: list[str] = []
    overlaps: list[int] = []

    def convert(name: str, data: bytes) -> bytes:
        active.append(name)
        overlaps.append(len(active))
        active.remove(name)
        return data

    batch.run_batch(_inputs("a.md", "b.md", "c.md"), convert)

    assert overlaps == [1, 1, 1]


def test_all_failed_is_flagged():
    result = batch.run_batch(_inputs("bad1.md", "bad2.md"), _convert)

    assert result.all_failed is True
    assert result.successes == ()


def test_bytes_are_read_lazily_per_item():
    reads: list[str] = []

    def loader_for(name: str):
        def load() -> bytes:
            reads.append(name)
            return b"x"

        return load

    inputs = [
        InputFile(name=name, size=1, loader=loader_for(name))
        for name in ("a.md", "b.md")
    ]
    seen: list[list[str]] = []

    batch.run_batch(
        inputs,
        lambda name, data: data,
        on_update=lambda snap: seen.append(list(reads)),
    )

    assert seen[0] == []
    assert reads == ["a.md", "b.md"]


def test_empty_batch_is_rejected():
    with pytest.raises(ValidationError):
        batch.run_batch([], _convert)


def test_ids_are_unique_within_a_run():
    result = batch.run_batch(_inputs("a.md", "a.md"), _convert)

    assert len({item.id for item in result.items}) == 2
