"""Filesystem, TOML and logging helpers used by every docmorph command."""

from __future__ import annotations

from .config import (
    TomlConfigError,
    dump_string_table,
    load_toml,
    merge_defaults,
    write_toml_template,
)
from .files import (
    InputFile,
    format_file_size,
    iter_input_paths,
    matches_extension,
    normalize_extensions,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    SUBDIRECTORIES,
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
    resolve_home,
)

__all__ = [
    "TomlConfigError",
    "dump_string_table",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
    "InputFile",
    "format_file_size",
    "iter_input_paths",
    "matches_extension",
    "normalize_extensions",
    "JsonLogFormatter",
    "configure_logger",
    "SUBDIRECTORIES",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
    "resolve_home",
]
