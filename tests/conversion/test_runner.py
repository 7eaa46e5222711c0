from __future__ import annotations

import pytest

from docmorph.conversion import runner
from docmorph.conversion.errors import (
    ConversionFailure,
    InvalidTransitionError,
)


def test_new_items_are_pending_with_unique_ids():
    first = runner.new_item("a.md")
    second = runner.new_item("a.md")

    assert first.status is runner.ItemStatus.PENDING
    assert first.payload is None and first.error_message is None
    assert first.id != second.id


def test_lifecycle_transitions_return_new_items():
    item = runner.new_item("a.md")

    started = item.start()
    done = started.succeed(b"data")

    assert item.status is runner.ItemStatus.PENDING
    assert started.status is runner.ItemStatus.CONVERTING
    assert done.status is runner.ItemStatus.SUCCESS
    assert done.payload == b"data"
    assert done.status.is_terminal
    assert done.id == item.id


@pytest.mark.parametrize("action", ["succeed", "fail"])
def test_pending_items_cannot_finish(action):
    item = runner.new_item("a.md")

    with pytest.raises(InvalidTransitionError):
        getattr(item, action)("x")


def test_terminal_items_are_final():
    done = runner.new_item("a.md").start().fail("nope")

    with pytest.raises(InvalidTransitionError):
        done.start()
    with pytest.raises(InvalidTransitionError):
        done.succeed(b"late")


def test_inconsistent_items_are_rejected():
    with pytest.raises(InvalidTransitionError):
        runner.BatchItem(
            id="1",
            source_name="a.md",
            status=runner.ItemStatus.SUCCESS,
        )
    with pytest.raises(InvalidTransitionError):
        runner.BatchItem(
            id="1",
            source_name="a.md",
            status=runner.ItemStatus.PENDING,
            error_message="early",
        )


def test_run_item_records_payload():
    item = runner.new_item("a.md").start()

    result = runner.run_item(item, lambda: "# done")

    assert result.status is runner.ItemStatus.SUCCESS
    assert result.payload == "# done"


def test_run_item_records_conversion_failure_message():
    item = runner.new_item("a.md").start()

    def task():
        raise ConversionFailure("a.md", "File is empty")

    result = runner.run_item(item, task)

    assert result.status is runner.ItemStatus.ERROR
    assert result.error_message == "File is empty"
    assert result.payload is None


def test_run_item_captures_unexpected_errors():
    item = runner.new_item("a.md").start()

    def explode():
        raise KeyError()

    result = runner.run_item(item, explode)

    assert result.status is runner.ItemStatus.ERROR
    assert result.error_message


def test_run_item_falls_back_to_generic_message():
    item = runner.new_item("a.md").start()

    def explode():
        raise RuntimeError()

    result = runner.run_item(item, explode)

    assert result.error_message == "Conversion failed"


def test_run_item_requires_converting_item():
    with pytest.raises(InvalidTransitionError):
        runner.run_item(runner.new_item("a.md"), lambda: b"")
