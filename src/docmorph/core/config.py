"""TOML helpers shared by docmorph commands."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = [
    "TomlConfigError",
    "dump_string_table",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
]


class TomlConfigError(RuntimeError):
    """Raised when a TOML file cannot be read, parsed or written."""


def load_toml(path: Path) -> dict[str, Any]:
    """Parse the TOML document at ``path``."""

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise TomlConfigError(f"Cannot read {path}: {exc}") from exc
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Invalid TOML in {path}: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Copy ``override`` into ``base`` in place.

    Only keys already present in ``base`` are accepted and nested tables must
    stay tables, so a typo in a config file is reported rather than ignored.
    """

    pending = [(base, override, path)]
    while pending:
        target, source, prefix = pending.pop()
        for key, value in source.items():
            dotted = prefix + key
            if key not in target:
                raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
            if not isinstance(target[key], MutableMapping):
                target[key] = value
            elif isinstance(value, Mapping):
                pending.append((target[key], value, dotted + "."))
            else:
                raise TomlConfigError(
                    f"Expected table for '{dotted}', "
                    f"found {type(value).__name__}."
                )


def dump_string_table(table: str, values: Mapping[str, str]) -> str:
    """Render ``values`` as one TOML table of string keys and values.

    JSON string escaping is a subset of TOML basic-string escaping, so
    ``json.dumps`` yields valid TOML strings.
    """

    body = [
        f"{key} = {json.dumps(str(values[key]))}" for key in sorted(values)
    ]
    return "\n".join([f"[{table}]", *body]) + "\n"


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path``; an existing file needs ``overwrite``."""

    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(template, encoding="utf-8")
        path.chmod(mode)
    except OSError as exc:
        raise TomlConfigError(f"Cannot write {path}: {exc}") from exc
    return path
