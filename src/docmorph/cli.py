"""``docmorph`` entry point that routes to the subcommand CLIs."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib import import_module, metadata
from typing import Callable, Mapping, Optional, Sequence


@dataclass(frozen=True)
class CommandSpec:
    """A subcommand and the ``module:function`` that implements it.

    Modules are imported on first use so ``docmorph list`` stays fast and
    does not require the conversion libraries.
    """

    name: str
    summary: str
    target: str

    @property
    def prog(self) -> str:
        return f"docmorph {self.name}"

    def resolve(self) -> Callable[[Sequence[str]], object]:
        module_name, _, func_name = self.target.partition(":")
        return getattr(import_module(module_name), func_name or "main")

    def run(self, argv: Sequence[str]) -> int:
        return run_entry_point(self.resolve(), self.prog, argv)


COMMANDS: Mapping[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec(
            "init",
            "Bootstrap the docmorph workspace.",
            "docmorph.workspace.cli",
        ),
        CommandSpec(
            "convert",
            "Convert in the last used direction (or --mode).",
            "docmorph.conversion.cli:convert_main",
        ),
        CommandSpec(
            "md-to-word",
            "Convert Markdown files or text into Word documents.",
            "docmorph.conversion.cli:md_to_word_main",
        ),
        CommandSpec(
            "word-to-md",
            "Convert Word documents into Markdown.",
            "docmorph.conversion.cli:word_to_md_main",
        ),
        CommandSpec(
            "prefs",
            "Show, set or reset stored conversion preferences.",
            "docmorph.conversion.prefs_cli",
        ),
        CommandSpec(
            "config",
            "Write the default docmorph.toml template.",
            "docmorph.conversion.cli:config_main",
        ),
    )
}


def format_command_table() -> str:
    width = max(len(name) for name in COMMANDS)
    rows = [
        f"  {spec.name.ljust(width)}  {spec.summary}"
        for spec in COMMANDS.values()
    ]
    return "\n".join(["Available commands:", *rows])


def format_usage() -> str:
    return (
        "Usage: docmorph <command> [args...]\n"
        "Run `docmorph list` for commands or `docmorph help <name>` for "
        "details.\n\n" + format_command_table()
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _out(format_usage())
        return 2

    head, tail = args[0], args[1:]
    if head in ("-h", "--help"):
        _out(format_usage())
        return 0
    if head in ("-V", "--version", "version"):
        _out(_installed_version())
        return 0
    if head == "list":
        _out(format_command_table())
        return 0
    if head == "help":
        return _show_help(tail[0] if tail else None)

    spec = COMMANDS.get(head)
    if spec is None:
        return _unknown(head)
    return spec.run(tail)


def run_entry_point(
    func: Callable[[Sequence[str]], object],
    prog: str,
    argv: Sequence[str],
) -> int:
    """Call ``func(argv)`` and turn its result or ``SystemExit`` into a code.

    ``sys.argv[0]`` is set to ``prog`` for the duration of the call so
    argparse usage lines name the subcommand.
    """

    saved_argv = sys.argv
    sys.argv = [prog, *argv]
    try:
        result = func(list(argv))
    except SystemExit as exc:
        return _exit_code(exc.code)
    finally:
        sys.argv = saved_argv
    return result if isinstance(result, int) else 0


def _exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    _err(str(code))
    return 1


def _show_help(name: Optional[str]) -> int:
    if name is None:
        _out(format_usage())
        return 0
    spec = COMMANDS.get(name)
    if spec is None:
        return _unknown(name)
    _out(f"{spec.name}: {spec.summary}")
    _out(f"Run `{spec.prog} --help` for CLI-specific options.")
    return 0


def _unknown(name: str) -> int:
    _err(f"Unknown command '{name}'.")
    _err(format_command_table())
    return 2


def _installed_version() -> str:
    try:
        return metadata.version("docmorph")
    except metadata.PackageNotFoundError:
        return "unknown"


def _out(text: str) -> None:
    sys.stdout.write(text + "\n")


def _err(text: str) -> None:
    sys.stderr.write(text + "\n")


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
