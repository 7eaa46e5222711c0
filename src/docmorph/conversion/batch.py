"""Sequential batch orchestrator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from docmorph.core.files import InputFile

from .errors import ValidationError
from .runner import BatchItem, ItemStatus, Payload, new_item, run_item

__all__ = [
    "BatchResult",
    "Snapshot",
    "SnapshotObserver",
    "run_batch",
]

Snapshot = tuple[BatchItem, ...]
SnapshotObserver = Callable[[Snapshot], None]
Converter = Callable[[str, bytes], Payload]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    """Terminal items of one run, in input order."""

    items: Snapshot

    @property
    def successes(self) -> Snapshot:
        return tuple(
            item for item in self.items if item.status is ItemStatus.SUCCESS
        )

    @property
    def failures(self) -> Snapshot:
        return tuple(
            item for item in self.items if item.status is ItemStatus.ERROR
        )

    @property
    def all_failed(self) -> bool:
        return bool(self.items) and not self.successes

    @property
    def exit_code(self) -> int:
        return 1 if self.failures else 0


def run_batch(
    inputs: Sequence[InputFile],
    convert: Converter,
    *,
    on_update: Optional[SnapshotObserver] = None,
    logger: Optional[logging.Logger] = None,
) -> BatchResult:
    """Convert ``inputs`` one at a time, in order.

    ``on_update`` receives a snapshot when the batch is enqueued, when each
    item starts and when each item finishes. A snapshot is always published
    before the next item starts. Per-item failures are recorded on the item;
    nothing but an empty ``inputs`` raises.
    """

    log = logger or _LOGGER
    if not inputs:
        raise ValidationError("No files selected for batch processing.")

    items = [new_item(source.name) for source in inputs]

    def publish() -> None:
        if on_update is not None:
            on_update(tuple(items))

    log.info(
        "Starting batch run",
        extra={"item_count": len(items)},
    )
    publish()

    for index, source in enumerate(inputs):
        items[index] = items[index].start()
        publish()

        def task(source: InputFile = source) -> Payload:
            return convert(source.name, source.read())

        items[index] = run_item(items[index], task, logger=log)
        _log_outcome(log, items[index], index + 1, len(items))
        publish()

    result = BatchResult(items=tuple(items))
    log.info(
        "Completed batch run",
        extra={
            "success_count": len(result.successes),
            "failure_count": len(result.failures),
        },
    )
    return result


def _log_outcome(
    log: logging.Logger, item: BatchItem, position: int, total: int
) -> None:
    extra = {
        "source": item.source_name,
        "item_id": item.id,
        "position": position,
        "total": total,
    }
    if item.status is ItemStatus.SUCCESS:
        log.info("Converted document", extra=extra)
    else:
        extra["reason"] = item.error_message
        log.error("Failed to convert document", extra=extra)
