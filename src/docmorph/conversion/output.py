"""Save trigger for deliverables."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import CollisionPolicy
from .errors import PackagingError
from .packaging import Deliverable


@dataclass(frozen=True)
class SavedDeliverable:
    """Where a deliverable landed, or why it was not written."""

    path: Path
    written: bool
    reason: Optional[str] = None


def save_deliverable(
    deliverable: Deliverable,
    output_dir: Path,
    *,
    collision: CollisionPolicy = CollisionPolicy.VERSION,
) -> SavedDeliverable:
    """Write ``deliverable`` into ``output_dir`` honouring ``collision``."""

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PackagingError(
            f"Cannot create output directory {output_dir}: {exc}"
        ) from exc

    target, reason = _resolve_output_path(
        output_dir / deliverable.name, collision=collision
    )
    if reason is not None:
        return SavedDeliverable(path=target, written=False, reason=reason)

    try:
        target.write_bytes(deliverable.data)
    except OSError as exc:
        raise PackagingError(f"Failed to write {target}: {exc}") from exc
    return SavedDeliverable(path=target, written=True)


def _resolve_output_path(
    base: Path,
    *,
    collision: CollisionPolicy,
) -> tuple[Path, Optional[str]]:
    if not base.exists():
        return base, None

    if collision is CollisionPolicy.SKIP:
        return base, "Output already exists and collision policy is 'skip'."

    if collision is CollisionPolicy.OVERWRITE:
        return base, None

    counter = 1
    while True:
        candidate = base.with_name(
            f"{base.stem}-{counter:02d}{base.suffix}"
        )
        if not candidate.exists():
            return candidate, None
        counter += 1


__all__ = ["SavedDeliverable", "save_deliverable"]
