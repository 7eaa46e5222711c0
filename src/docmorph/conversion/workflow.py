"""End-to-end conversion flows used by the CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from docmorph.core.files import InputFile

from .backends import ConverterDependencies
from .batch import BatchResult, SnapshotObserver, run_batch
from .config import DocmorphConfig
from .docx_to_markdown import convert_docx_to_markdown, make_docx_converter
from .errors import ValidationError
from .markdown_to_docx import convert_markdown_to_docx, make_markdown_converter
from .modes import ConversionMode
from .output import SavedDeliverable, save_deliverable
from .packaging import Deliverable, package_results
from .preferences import Preferences
from .validation import Screening, screen_inputs

__all__ = [
    "ALL_FAILED_MESSAGE",
    "SaveTrigger",
    "WorkflowOutcome",
    "convert_text",
    "convert_word_file",
    "run_workflow",
]

ALL_FAILED_MESSAGE = "All files in the batch failed to convert."

SaveTrigger = Callable[[Deliverable], SavedDeliverable]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowOutcome:
    """Everything a caller needs to report one batch action."""

    mode: ConversionMode
    screening: Screening
    result: BatchResult
    deliverable: Optional[Deliverable] = None
    saved: Optional[SavedDeliverable] = None

    @property
    def summary(self) -> str:
        if self.result.all_failed:
            return ALL_FAILED_MESSAGE
        total = len(self.result.items)
        converted = len(self.result.successes)
        return f"Converted {converted} of {total} file(s)."

    @property
    def exit_code(self) -> int:
        if self.result.exit_code or self.screening.rejected_names:
            return 1
        return 0


def run_workflow(
    files: Sequence[InputFile],
    mode: ConversionMode,
    *,
    config: DocmorphConfig,
    preferences: Preferences,
    dependencies: ConverterDependencies,
    on_update: Optional[SnapshotObserver] = None,
    save: Optional[SaveTrigger] = None,
    logger: Optional[logging.Logger] = None,
) -> WorkflowOutcome:
    """Screen, convert, package and save ``files`` for ``mode``.

    Rejected files are reported on the outcome while the accepted ones still
    convert. The save trigger runs exactly once when at least one file
    converts and never when every file failed.
    """

    log = logger or _LOGGER
    screening = screen_inputs(
        files,
        mode,
        max_file_size=config.max_file_size,
        max_batch_items=config.max_batch_items,
    )
    for name in screening.rejected_names:
        log.warning("Rejected input", extra={"source": name})
    if not screening.accepted:
        raise screening.error() or ValidationError(
            "No files selected for batch processing."
        )

    if mode is ConversionMode.MARKDOWN_TO_WORD:
        converter = make_markdown_converter(
            preferences.formatting,
            dependencies,
            breaks=config.batch_line_breaks,
        )
    else:
        converter = make_docx_converter(
            preferences.transcription, dependencies, logger=log
        )

    result = run_batch(
        screening.accepted, converter, on_update=on_update, logger=log
    )
    if result.all_failed:
        log.error(ALL_FAILED_MESSAGE, extra={"item_count": len(result.items)})
        return WorkflowOutcome(mode=mode, screening=screening, result=result)

    deliverable = package_results(
        result.successes, mode, rename_collision=config.rename_collision
    )
    trigger = save or _default_save(config)
    saved = trigger(deliverable)
    log.info(
        "Saved deliverable",
        extra={
            "path": str(saved.path),
            "written": saved.written,
            "entries": len(deliverable.entries),
        },
    )
    return WorkflowOutcome(
        mode=mode,
        screening=screening,
        result=result,
        deliverable=deliverable,
        saved=saved,
    )


def convert_text(
    text: str,
    *,
    config: DocmorphConfig,
    preferences: Preferences,
    dependencies: ConverterDependencies,
    save: Optional[SaveTrigger] = None,
) -> SavedDeliverable:
    """Convert a Markdown buffer and save ``converted_document.docx``."""

    mode = ConversionMode.MARKDOWN_TO_WORD
    data = convert_markdown_to_docx(
        text,
        preferences.formatting,
        dependencies,
        breaks=config.single_line_breaks,
    )
    deliverable = Deliverable(
        name=mode.spec.single_output_name,
        data=data,
        media_type=mode.spec.media_type,
    )
    trigger = save or _default_save(config)
    return trigger(deliverable)


def convert_word_file(
    source: InputFile,
    *,
    preferences: Preferences,
    dependencies: ConverterDependencies,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Convert one Word document to Markdown text without saving it."""

    return convert_docx_to_markdown(
        source.read(),
        preferences.transcription,
        dependencies,
        file_name=source.name,
        logger=logger,
    )


def _default_save(config: DocmorphConfig) -> SaveTrigger:
    def save(deliverable: Deliverable) -> SavedDeliverable:
        return save_deliverable(
            deliverable,
            Path(config.output_dir),
            collision=config.collision,
        )

    return save
