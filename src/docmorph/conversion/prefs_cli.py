"""CLI for viewing and editing stored preferences."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from docmorph.core import workspace as workspace_mod
from docmorph.core.workspace import WorkspaceError

from .config import DocmorphConfigError
from .errors import ValidationError
from .preferences import (
    PREFERENCE_KEYS,
    PREFERENCES_FILENAME,
    TomlPreferenceStore,
    normalize_preference,
    preferences_from_mapping,
    preferences_to_mapping,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmorph prefs",
        description="Show, change or reset stored conversion preferences.",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root holding config/preferences.toml.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("show", help="Print the effective preferences.")

    set_parser = subparsers.add_parser("set", help="Store one preference.")
    set_parser.add_argument("key", choices=PREFERENCE_KEYS)
    set_parser.add_argument("value")

    subparsers.add_parser(
        "reset", help="Forget stored preferences and use the defaults."
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1
    store = TomlPreferenceStore(
        layout.path_for("config") / PREFERENCES_FILENAME
    )

    try:
        if args.command == "set":
            value = normalize_preference(args.key, args.value)
            store.save({args.key: value})
            sys.stdout.write(f"Saved {args.key} = {value}\n")
            return 0
        if args.command == "reset":
            store.reset()
            sys.stdout.write("Preferences reset to defaults.\n")
            return 0
        stored = store.load()
    except ValidationError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 2
    except DocmorphConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    effective = preferences_to_mapping(preferences_from_mapping(stored))
    table = Table(box=box.SIMPLE, expand=False)
    table.add_column("Preference", style="bold")
    table.add_column("Value")
    table.add_column("Source")
    for key in PREFERENCE_KEYS:
        source = "stored" if key in stored else "default"
        table.add_row(key, effective[key], source)
    Console().print(table)
    sys.stdout.write(f"Preferences file: {store.path}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
