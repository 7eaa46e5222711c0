"""Turn successful batch items into one deliverable."""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Callable, Sequence

from .errors import PackagingError, ValidationError
from .modes import ConversionMode
from .runner import BatchItem, ItemStatus, Payload

__all__ = [
    "ArchiveBuilder",
    "Deliverable",
    "RenameCollision",
    "build_zip_archive",
    "package_results",
]

ArchiveEntries = Sequence[tuple[str, bytes]]
ArchiveBuilder = Callable[[ArchiveEntries], bytes]

ARCHIVE_MEDIA_TYPE = "application/zip"


class RenameCollision(Enum):
    """What to do when two sources rename to the same archive entry."""

    OVERWRITE = "overwrite"
    SUFFIX = "suffix"

    @classmethod
    def from_value(cls, value: str) -> "RenameCollision":
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise ValidationError(
            f"Unknown rename collision policy '{value}'. "
            f"Expected one of: {expected}."
        )


@dataclass(frozen=True)
class Deliverable:
    """The artifact handed to the save trigger."""

    name: str
    data: bytes
    media_type: str
    entries: tuple[str, ...] = ()

    @property
    def is_archive(self) -> bool:
        return bool(self.entries)


def build_zip_archive(entries: ArchiveEntries) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buffer.getvalue()


def package_results(
    successes: Sequence[BatchItem],
    mode: ConversionMode,
    *,
    rename_collision: RenameCollision = RenameCollision.OVERWRITE,
    archive_builder: ArchiveBuilder = build_zip_archive,
) -> Deliverable:
    """Package ``successes`` as a single artifact or a ZIP archive.

    One success is delivered as-is under its renamed file name. Two or more
    go into an archive named after ``mode``. Callers must not package an
    empty result.
    """

    if not successes:
        raise PackagingError("No successful conversions to package.")
    for item in successes:
        if item.status is not ItemStatus.SUCCESS:
            raise PackagingError(
                f"Item '{item.source_name}' did not convert successfully."
            )

    if len(successes) == 1:
        item = successes[0]
        return Deliverable(
            name=mode.output_name(item.source_name),
            data=_as_bytes(item.payload),
            media_type=mode.spec.media_type,
        )

    entries: dict[str, bytes] = {}
    for item in successes:
        name = mode.output_name(item.source_name)
        if rename_collision is RenameCollision.SUFFIX:
            name = _unique_name(name, entries)
        entries[name] = _as_bytes(item.payload)

    try:
        data = archive_builder(tuple(entries.items()))
    except Exception as exc:
        raise PackagingError(f"Failed to build archive: {exc}") from exc

    return Deliverable(
        name=mode.archive_name,
        data=data,
        media_type=ARCHIVE_MEDIA_TYPE,
        entries=tuple(entries),
    )


def _unique_name(name: str, taken: dict[str, bytes]) -> str:
    if name not in taken:
        return name
    path = PurePath(name)
    counter = 1
    while True:
        candidate = f"{path.stem}-{counter:02d}{path.suffix}"
        if candidate not in taken:
            return candidate
        counter += 1


def _as_bytes(payload: Payload | None) -> bytes:
    if isinstance(payload, str):
        return payload.encode("utf-8")
    if payload is None:  # pragma: no cover - guarded by BatchItem
        raise PackagingError("Successful item has no payload.")
    return payload
