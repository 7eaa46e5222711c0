"""Screen inputs before any conversion runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from docmorph.core.files import InputFile, format_file_size, matches_extension

from .config import DEFAULT_MAX_BATCH_ITEMS, DEFAULT_MAX_FILE_SIZE
from .errors import UnsupportedFormatError, ValidationError
from .modes import ConversionMode

__all__ = ["DOC_WARNING", "Rejection", "Screening", "screen_inputs"]

DOC_WARNING = (
    "Note: .doc file support is limited. For best results, use .docx files."
)


@dataclass(frozen=True)
class Rejection:
    name: str
    reason: str


@dataclass(frozen=True)
class Screening:
    """Accepted inputs plus everything that was turned away."""

    mode: ConversionMode
    accepted: tuple[InputFile, ...]
    invalid_type: tuple[str, ...] = ()
    oversized: tuple[Rejection, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def rejected_names(self) -> tuple[str, ...]:
        return self.invalid_type + tuple(item.name for item in self.oversized)

    @property
    def messages(self) -> tuple[str, ...]:
        lines = []
        if self.invalid_type:
            allowed = " or ".join(self.mode.source_extensions)
            lines.append(
                f"Invalid file type(s): {', '.join(self.invalid_type)}. "
                f"Only {allowed} files are allowed."
            )
        lines.extend(item.reason for item in self.oversized)
        return tuple(lines)

    def error(self) -> Optional[ValidationError]:
        """Return an error naming every rejected file, or ``None``."""

        if not self.rejected_names:
            return None
        error_type = (
            UnsupportedFormatError if self.invalid_type else ValidationError
        )
        return error_type(" ".join(self.messages), names=self.rejected_names)


def screen_inputs(
    files: Sequence[InputFile],
    mode: ConversionMode,
    *,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    max_batch_items: int = DEFAULT_MAX_BATCH_ITEMS,
) -> Screening:
    """Filter ``files`` by extension and size for ``mode``.

    A selection above ``max_batch_items`` is refused outright. Other problems
    are collected per file so the caller can report them together and still
    convert the accepted files.
    """

    if not files:
        raise ValidationError("No files selected for batch processing.")
    if len(files) > max_batch_items:
        raise ValidationError(
            f"Too many files selected ({len(files)}). "
            f"Maximum is {max_batch_items} files per batch."
        )

    accepted: list[InputFile] = []
    invalid: list[str] = []
    oversized: list[Rejection] = []
    warnings: list[str] = []

    for item in files:
        if not matches_extension(item.name, mode.source_extensions):
            invalid.append(item.name)
            continue
        if item.size > max_file_size:
            reason = (
                f"{item.name} is too large ({format_file_size(item.size)}). "
                f"Maximum size is {format_file_size(max_file_size)}."
            )
            oversized.append(Rejection(name=item.name, reason=reason))
            continue
        if item.name.lower().endswith(".doc") and DOC_WARNING not in warnings:
            warnings.append(DOC_WARNING)
        accepted.append(item)

    return Screening(
        mode=mode,
        accepted=tuple(accepted),
        invalid_type=tuple(invalid),
        oversized=tuple(oversized),
        warnings=tuple(warnings),
    )
