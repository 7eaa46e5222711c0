"""The two conversion directions and their naming rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import ValidationError

__all__ = ["ConversionMode", "ModeSpec"]


@dataclass(frozen=True)
class ModeSpec:
    source_extensions: tuple[str, ...]
    output_extension: str
    archive_name: str
    single_output_name: str
    media_type: str


_MARKDOWN_TO_WORD = ModeSpec(
    source_extensions=(".md",),
    output_extension=".docx",
    archive_name="batch_converted_word_documents.zip",
    single_output_name="converted_document.docx",
    media_type=(
        "application/vnd.openxmlformats-officedocument."
        "wordprocessingml.document"
    ),
)

_WORD_TO_MARKDOWN = ModeSpec(
    source_extensions=(".docx", ".doc"),
    output_extension=".md",
    archive_name="batch_converted_markdown_files.zip",
    single_output_name="converted.md",
    media_type="text/markdown;charset=utf-8",
)


class ConversionMode(Enum):
    """Conversion direction, persisted under the ``conversion_mode`` key."""

    MARKDOWN_TO_WORD = "md-to-word"
    WORD_TO_MARKDOWN = "word-to-md"

    @property
    def spec(self) -> ModeSpec:
        if self is ConversionMode.MARKDOWN_TO_WORD:
            return _MARKDOWN_TO_WORD
        return _WORD_TO_MARKDOWN

    @property
    def source_extensions(self) -> tuple[str, ...]:
        return self.spec.source_extensions

    @property
    def output_extension(self) -> str:
        return self.spec.output_extension

    @property
    def archive_name(self) -> str:
        return self.spec.archive_name

    def output_name(self, source_name: str) -> str:
        """Replace the source extension of ``source_name`` with the output one.

        Matching is case-insensitive and the longest matching extension wins,
        so ``notes.DOCX`` becomes ``notes.md``.
        """

        lowered = source_name.lower()
        for extension in sorted(self.source_extensions, key=len, reverse=True):
            if lowered.endswith(extension):
                stem = source_name[: -len(extension)]
                break
        else:
            stem = source_name
        if not stem:
            return self.spec.single_output_name
        return f"{stem}{self.output_extension}"

    @classmethod
    def from_value(cls, value: str) -> "ConversionMode":
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise ValidationError(
            f"Unknown conversion mode '{value}'. Expected one of: {expected}."
        )
