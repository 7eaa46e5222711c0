"""Public APIs for the Markdown/Word conversion pipeline."""

from __future__ import annotations

from .backends import (
    ConverterDependencies,
    DecodedDocument,
    build_default_dependencies,
)
from .batch import BatchResult, Snapshot, run_batch
from .config import (
    CollisionPolicy,
    ConfigOverrides,
    DocmorphConfig,
    DocmorphConfigError,
    LoadResult,
    load_config,
)
from .docx_to_markdown import convert_docx_to_markdown
from .errors import (
    ConversionFailure,
    DependencyError,
    DocmorphError,
    EmptyInputError,
    InvalidTransitionError,
    PackagingError,
    UnsupportedFormatError,
    ValidationError,
)
from .formatting import FormattingConfig, HeadingStyle, TranscriptionConfig
from .markdown_to_docx import convert_markdown_to_docx, normalize_dashes
from .modes import ConversionMode
from .output import SavedDeliverable, save_deliverable
from .packaging import Deliverable, RenameCollision, package_results
from .preferences import Preferences, TomlPreferenceStore
from .runner import BatchItem, ItemStatus, run_item
from .validation import Screening, screen_inputs
from .workflow import WorkflowOutcome, convert_text, run_workflow

__all__ = [
    "ConverterDependencies",
    "DecodedDocument",
    "build_default_dependencies",
    "BatchResult",
    "Snapshot",
    "run_batch",
    "CollisionPolicy",
    "ConfigOverrides",
    "DocmorphConfig",
    "DocmorphConfigError",
    "LoadResult",
    "load_config",
    "convert_docx_to_markdown",
    "ConversionFailure",
    "DependencyError",
    "DocmorphError",
    "EmptyInputError",
    "InvalidTransitionError",
    "PackagingError",
    "UnsupportedFormatError",
    "ValidationError",
    "FormattingConfig",
    "HeadingStyle",
    "TranscriptionConfig",
    "convert_markdown_to_docx",
    "normalize_dashes",
    "ConversionMode",
    "SavedDeliverable",
    "save_deliverable",
    "Deliverable",
    "RenameCollision",
    "package_results",
    "Preferences",
    "TomlPreferenceStore",
    "BatchItem",
    "ItemStatus",
    "run_item",
    "Screening",
    "screen_inputs",
    "WorkflowOutcome",
    "convert_text",
    "run_workflow",
]
