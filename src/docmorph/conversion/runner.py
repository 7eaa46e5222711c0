"""Batch item lifecycle and the single-item task runner."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Union

from .errors import ConversionFailure, InvalidTransitionError

__all__ = [
    "BatchItem",
    "ItemStatus",
    "Payload",
    "new_item",
    "run_item",
]

Payload = Union[bytes, str]

_LOGGER = logging.getLogger(__name__)


class ItemStatus(Enum):
    PENDING = "pending"
    CONVERTING = "converting"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.SUCCESS, ItemStatus.ERROR)


@dataclass(frozen=True)
class BatchItem:
    """One file's conversion record.

    Items are immutable; each transition returns a new value. Once terminal,
    exactly one of ``payload`` and ``error_message`` is set.
    """

    id: str
    source_name: str
    status: ItemStatus = ItemStatus.PENDING
    payload: Optional[Payload] = None
    error_message: Optional[str] = None

    def __post_init__(self) -> None:
        has_payload = self.payload is not None
        has_error = self.error_message is not None
        if self.status is ItemStatus.SUCCESS:
            valid = has_payload and not has_error
        elif self.status is ItemStatus.ERROR:
            valid = has_error and not has_payload
        else:
            valid = not has_payload and not has_error
        if not valid:
            raise InvalidTransitionError(
                f"Item '{self.source_name}' in status "
                f"'{self.status.value}' has inconsistent payload/error."
            )

    def start(self) -> "BatchItem":
        self._require(ItemStatus.PENDING, "start")
        return replace(self, status=ItemStatus.CONVERTING)

    def succeed(self, payload: Payload) -> "BatchItem":
        self._require(ItemStatus.CONVERTING, "succeed")
        return replace(self, status=ItemStatus.SUCCESS, payload=payload)

    def fail(self, message: str) -> "BatchItem":
        self._require(ItemStatus.CONVERTING, "fail")
        return replace(self, status=ItemStatus.ERROR, error_message=message)

    def _require(self, expected: ItemStatus, action: str) -> None:
        if self.status is not expected:
            raise InvalidTransitionError(
                f"Cannot {action} item '{self.source_name}' from status "
                f"'{self.status.value}'."
            )


def new_item(source_name: str) -> BatchItem:
    """Create a pending item with an id unique to this enqueue."""

    return BatchItem(id=uuid.uuid4().hex, source_name=source_name)


def run_item(
    item: BatchItem,
    task: Callable[[], Payload],
    *,
    logger: Optional[logging.Logger] = None,
) -> BatchItem:
    """Execute ``task`` for a converting ``item`` and return it terminal.

    Exceptions never escape: they are recorded as the item's error message.
    """

    log = logger or _LOGGER
    if item.status is not ItemStatus.CONVERTING:
        raise InvalidTransitionError(
            f"Item '{item.source_name}' must be converting before it runs."
        )
    try:
        payload = task()
    except ConversionFailure as exc:
        log.debug(
            "Conversion failed",
            exc_info=True,
            extra={"source": item.source_name, "item_id": item.id},
        )
        return item.fail(exc.message)
    except Exception as exc:
        log.debug(
            "Unexpected error during conversion",
            exc_info=True,
            extra={"source": item.source_name, "item_id": item.id},
        )
        return item.fail(str(exc) or "Conversion failed")
    return item.succeed(payload)
