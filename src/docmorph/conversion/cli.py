"""CLI entry points for the Markdown/Word converters."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docmorph.core import workspace as workspace_mod
from docmorph.core.files import InputFile, iter_input_paths
from docmorph.core.logging import configure_logger
from docmorph.core.workspace import WorkspaceError

from .backends import build_default_dependencies
from .batch import Snapshot
from .config import (
    CONFIG_FILENAME,
    CollisionPolicy,
    ConfigOverrides,
    DocmorphConfigError,
    LoadResult,
    load_config,
    write_config_template,
)
from .errors import DependencyError, DocmorphError, ValidationError
from .formatting import AVAILABLE_FONTS, BULLET_MARKERS, HeadingStyle
from .modes import ConversionMode
from .packaging import RenameCollision
from .preferences import (
    PREFERENCES_FILENAME,
    Preferences,
    TomlPreferenceStore,
    preferences_from_mapping,
    preferences_to_mapping,
)
from .runner import ItemStatus
from .workflow import (
    WorkflowOutcome,
    convert_text,
    convert_word_file,
    run_workflow,
)

_STATUS_STYLES = {
    ItemStatus.PENDING: "dim",
    ItemStatus.CONVERTING: "cyan",
    ItemStatus.SUCCESS: "green",
    ItemStatus.ERROR: "red",
}


def _build_parser(mode: ConversionMode) -> argparse.ArgumentParser:
    if mode is ConversionMode.MARKDOWN_TO_WORD:
        parser = argparse.ArgumentParser(
            prog="docmorph md-to-word",
            description=(
                "Convert Markdown files (or text) into Word documents. Two or "
                "more files are delivered as a ZIP archive."
            ),
            epilog=(
                "Run `docmorph config init` to scaffold the default "
                "docmorph.toml template."
            ),
        )
        parser.add_argument(
            "paths",
            nargs="*",
            type=Path,
            help="Markdown files or directories to convert.",
        )
        parser.add_argument(
            "--text",
            help=(
                "Convert this Markdown text instead of files; use '-' to "
                "read it from stdin."
            ),
        )
        parser.add_argument(
            "--font",
            help=(
                "Font family for the document body "
                f"(e.g. {', '.join(AVAILABLE_FONTS[:3])})."
            ),
        )
        parser.add_argument(
            "--font-size",
            help="Font size token such as 11pt or 14px.",
        )
        parser.add_argument(
            "--bold-headers",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Render headings in bold.",
        )
        parser.add_argument(
            "--italic-headers",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Render headings in italics.",
        )
        parser.add_argument(
            "--line-breaks",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Treat single newlines as line breaks (default: on).",
        )
    else:
        parser = argparse.ArgumentParser(
            prog="docmorph word-to-md",
            description=(
                "Convert Word documents (.docx, limited .doc) into Markdown. "
                "Two or more files are delivered as a ZIP archive."
            ),
            epilog=(
                "Run `docmorph config init` to scaffold the default "
                "docmorph.toml template."
            ),
        )
        parser.add_argument(
            "paths",
            nargs="+",
            type=Path,
            help="Word files or directories to convert.",
        )
        parser.add_argument(
            "--heading-style",
            choices=[style.value for style in HeadingStyle],
            help="Markdown heading syntax.",
        )
        parser.add_argument(
            "--bullet",
            choices=list(BULLET_MARKERS),
            help="Marker used for bullet list items.",
        )
        parser.add_argument(
            "--print",
            dest="print_markdown",
            action="store_true",
            help="Write the Markdown of a single file to stdout instead.",
        )

    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help=(
            "Override the workspace root used to resolve default output and "
            "config paths."
        ),
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Override the directory deliverables are saved into.",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite an existing deliverable with the same name.",
    )
    parser.add_argument(
        "--skip-existing",
        action="store_true",
        help="Leave an existing deliverable untouched.",
    )
    parser.add_argument(
        "--rename-collision",
        choices=[policy.value for policy in RenameCollision],
        help=(
            "How archive entries with the same name are handled "
            "(default: overwrite)."
        ),
    )
    parser.add_argument(
        "--remember",
        action="store_true",
        help="Save the formatting options of this run as preferences.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Also write log records to stderr.",
    )
    return parser


def md_to_word_main(argv: Sequence[str] | None = None) -> int:
    return _run(ConversionMode.MARKDOWN_TO_WORD, argv)


def word_to_md_main(argv: Sequence[str] | None = None) -> int:
    return _run(ConversionMode.WORD_TO_MARKDOWN, argv)


def convert_main(argv: Sequence[str] | None = None) -> int:
    """Convert in the direction given by ``--mode`` or the last one used.

    An explicit ``--mode`` is stored as the ``conversion_mode`` preference;
    every other argument goes to the chosen direction's command.
    """

    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parser = argparse.ArgumentParser(
        prog="docmorph convert",
        add_help=False,
        description=(
            "Run md-to-word or word-to-md, defaulting to the direction used "
            "last."
        ),
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ConversionMode],
        help="Conversion direction; remembered for later runs.",
    )
    parser.add_argument("--workspace", type=Path)
    args, rest = parser.parse_known_args(args_list)

    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
        store = TomlPreferenceStore(
            layout.path_for("config") / PREFERENCES_FILENAME
        )
        stored = preferences_from_mapping(store.load())
    except (DocmorphConfigError, WorkspaceError) as exc:
        parser.error(str(exc))

    if args.mode is None:
        mode = stored.mode
    else:
        mode = ConversionMode.from_value(args.mode)
        if mode is not stored.mode:
            try:
                store.save({"conversion_mode": mode.value})
            except DocmorphConfigError as exc:
                sys.stderr.write(str(exc) + "\n")
                return 1

    if args.workspace is not None:
        rest = [*rest, "--workspace", str(args.workspace)]
    return _run(mode, rest)


def _run(mode: ConversionMode, argv: Sequence[str] | None) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parser = _build_parser(mode)
    args = parser.parse_args(args_list)

    if args.overwrite and args.skip_existing:
        parser.error("--overwrite and --skip-existing are mutually exclusive.")
    text_mode = getattr(args, "text", None) is not None
    if text_mode and args.paths:
        parser.error("--text cannot be combined with input paths.")
    if mode is ConversionMode.MARKDOWN_TO_WORD and not (
        text_mode or args.paths
    ):
        parser.error("Provide Markdown files or --text.")
    if getattr(args, "print_markdown", False) and len(args.paths) != 1:
        parser.error("--print requires exactly one input file.")

    line_breaks = getattr(args, "line_breaks", None)
    overrides = ConfigOverrides(
        output_dir=args.output_dir,
        collision=_collision_from_args(args),
        rename_collision=(
            RenameCollision.from_value(args.rename_collision)
            if args.rename_collision
            else None
        ),
        single_line_breaks=line_breaks,
        batch_line_breaks=line_breaks,
        log_level=args.log_level,
    )

    try:
        load_result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
        store = _preference_store(load_result)
        preferences = preferences_from_mapping(store.load())
    except (DocmorphConfigError, WorkspaceError) as exc:
        parser.error(str(exc))

    try:
        preferences = _apply_args(preferences, mode, args)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        dependencies = build_default_dependencies()
    except DependencyError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    logger, log_path = configure_logger(
        f"docmorph.{mode.value}",
        log_dir=load_result.layout.path_for("logs"),
        level=load_result.config.log_level,
        verbose=args.verbose,
    )
    logger.debug("%s CLI invoked", mode.value)

    if args.remember:
        try:
            store.save(preferences_to_mapping(preferences))
        except DocmorphConfigError as exc:
            sys.stderr.write(str(exc) + "\n")
            return 1

    console = Console()
    config = load_result.config

    try:
        if text_mode:
            text = sys.stdin.read() if args.text == "-" else args.text
            saved = convert_text(
                text,
                config=config,
                preferences=preferences,
                dependencies=dependencies,
            )
            _print_saved(console, saved.path, saved.written, saved.reason)
            return 0 if saved.written else 1

        sources = [
            InputFile.from_path(path)
            for path in iter_input_paths(args.paths, mode.source_extensions)
        ]

        if getattr(args, "print_markdown", False):
            if not sources:
                raise ValidationError("No Word files found to convert.")
            markdown = convert_word_file(
                sources[0],
                preferences=preferences,
                dependencies=dependencies,
                logger=logger,
            )
            sys.stdout.write(markdown.rstrip("\n") + "\n")
            return 0

        progress = _ProgressPrinter(console)
        outcome = run_workflow(
            sources,
            mode,
            config=config,
            preferences=preferences,
            dependencies=dependencies,
            on_update=progress,
            logger=logger,
        )
    except ValidationError as exc:
        logger.error("Rejected inputs", extra={"reason": str(exc)})
        sys.stderr.write(str(exc) + "\n")
        return 1
    except OSError as exc:
        sys.stderr.write(f"Failed to read input: {exc}\n")
        return 1
    except DocmorphError as exc:
        logger.error("Conversion failed", extra={"reason": str(exc)})
        sys.stderr.write(str(exc) + "\n")
        return 1

    _print_summary(console, outcome, log_path)
    return outcome.exit_code


def _apply_args(
    preferences: Preferences, mode: ConversionMode, args: argparse.Namespace
) -> Preferences:
    if mode is ConversionMode.MARKDOWN_TO_WORD:
        changes = {
            "font_family": args.font,
            "font_size": args.font_size,
            "bold_headers": args.bold_headers,
            "italic_headers": args.italic_headers,
        }
        formatting = replace(preferences.formatting, **_present(changes))
        return replace(preferences, formatting=formatting, mode=mode)

    changes = {
        "heading_style": (
            HeadingStyle(args.heading_style) if args.heading_style else None
        ),
        "bullet_list_marker": args.bullet,
    }
    transcription = replace(preferences.transcription, **_present(changes))
    return replace(preferences, transcription=transcription, mode=mode)


def _present(changes: dict[str, object]) -> dict[str, object]:
    return {key: value for key, value in changes.items() if value is not None}


def _preference_store(load_result: LoadResult) -> TomlPreferenceStore:
    return TomlPreferenceStore(
        load_result.layout.path_for("config") / PREFERENCES_FILENAME
    )


def _collision_from_args(
    args: argparse.Namespace,
) -> Optional[CollisionPolicy]:
    if args.overwrite:
        return CollisionPolicy.OVERWRITE
    if args.skip_existing:
        return CollisionPolicy.SKIP
    return None


class _ProgressPrinter:
    """Print one line each time an item changes status."""

    def __init__(self, console: Console) -> None:
        self.console = console
        self._seen: dict[str, ItemStatus] = {}

    def __call__(self, snapshot: Snapshot) -> None:
        total = len(snapshot)
        for position, item in enumerate(snapshot, start=1):
            if self._seen.get(item.id) is item.status:
                continue
            self._seen[item.id] = item.status
            if item.status is ItemStatus.PENDING:
                continue
            style = _STATUS_STYLES[item.status]
            self.console.print(
                f"\\[{position}/{total}] [{style}]{item.status.value}[/] "
                f"{escape(item.source_name)}",
                highlight=False,
            )


def _print_summary(
    console: Console, outcome: WorkflowOutcome, log_path: Path
) -> None:
    table = Table(box=box.SIMPLE, expand=False)
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Detail")
    for item in outcome.result.items:
        style = _STATUS_STYLES[item.status]
        table.add_row(
            escape(item.source_name),
            f"[{style}]{item.status.value}[/]",
            escape(item.error_message or ""),
        )
    console.print(table)

    for message in outcome.screening.messages:
        console.print(f"[red]{escape(message)}[/]", highlight=False)
    for warning in outcome.screening.warnings:
        console.print(f"[yellow]{escape(warning)}[/]", highlight=False)

    console.print(outcome.summary, highlight=False)
    if outcome.saved is not None:
        _print_saved(
            console,
            outcome.saved.path,
            outcome.saved.written,
            outcome.saved.reason,
        )
    console.print(
        f"Log file: {escape(str(log_path))}", highlight=False, soft_wrap=True
    )


def _print_saved(
    console: Console, path: Path, written: bool, reason: Optional[str]
) -> None:
    if written:
        console.print(
            f"Saved {escape(str(path))}", highlight=False, soft_wrap=True
        )
    else:
        console.print(
            f"[yellow]Not saved: {escape(reason or '')}[/] "
            f"({escape(str(path))})",
            highlight=False,
            soft_wrap=True,
        )


def config_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return _handle_config_init(args)


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmorph config",
        description="Manage docmorph configuration files.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Write the default docmorph.toml template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help=(
            "Workspace root override used when resolving the default config "
            "path."
        ),
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    try:
        target = _resolve_config_target(args)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        written = write_config_template(target, overwrite=args.force)
    except DocmorphConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote docmorph config to {written}\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


__all__ = [
    "config_main",
    "convert_main",
    "md_to_word_main",
    "word_to_md_main",
]


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(md_to_word_main())
