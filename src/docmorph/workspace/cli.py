"""``docmorph init``: create the data home and report what exists."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from docmorph.core.workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmorph init",
        description=(
            "Create the docmorph data home with its config, logs and "
            "converted directories."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=f"Data home to use instead of ${WORKSPACE_ENV} or ~/.docmorph.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Print nothing on success.",
    )
    return parser


def describe(layout: WorkspaceLayout) -> str:
    """One line for the home, then one per subdirectory with its state."""

    def state(key: str) -> str:
        return "created" if layout.created.get(key) else "exists"

    width = max((len(name) for name in layout.directories), default=0)
    lines = [f"Workspace ready at {layout.home} ({state('home')})"]
    lines.extend(
        f"  {name:<{width}}  {path} ({state(name)})"
        for name, path in layout.items()
    )
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        layout = ensure_workspace(path=args.path)
    except WorkspaceError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    if not args.quiet:
        sys.stdout.write(describe(layout) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
