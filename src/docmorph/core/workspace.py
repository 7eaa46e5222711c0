"""Data-home layout shared by docmorph commands.

The data home holds three directories: ``config/`` for ``docmorph.toml`` and
``preferences.toml``, ``logs/`` for one JSON log per command and
``converted/`` for saved deliverables.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping


WORKSPACE_ENV = "DOCMORPH_DATA_HOME"
DEFAULT_WORKSPACE = Path.home() / ".docmorph"

SUBDIRECTORIES: tuple[str, ...] = ("config", "logs", "converted")


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved data-home paths; ``created`` flags what this call made."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        if key not in self.directories:
            raise KeyError(f"Unknown workspace directory '{key}'.")
        return self.directories[key]

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Return the data-home layout, creating directories when ``create``.

    ``path`` wins over ``DOCMORPH_DATA_HOME``, which wins over
    ``~/.docmorph``. Only the implicit default falls back to
    ``<tmp>/docmorph`` when it cannot be created; an explicit location that
    is not writable raises :class:`WorkspaceError`.
    """

    home, explicit = resolve_home(os.environ if env is None else env, path)
    candidates = [home]
    if create and not explicit:
        candidates.append(Path(tempfile.gettempdir()) / "docmorph")

    failure: PermissionError | None = None
    for candidate in dict.fromkeys(candidates):
        try:
            return _build_layout(candidate, create=create)
        except PermissionError as exc:
            failure = exc
    raise WorkspaceError(f"Unable to prepare workspace at {home}") from failure


def resolve_home(
    env: Mapping[str, str], path: Path | None = None
) -> tuple[Path, bool]:
    """Return the data home and whether it was chosen explicitly."""

    if path is not None:
        target, explicit = path, True
    elif (env.get(WORKSPACE_ENV) or "").strip():
        target, explicit = Path(env[WORKSPACE_ENV].strip()), True
    else:
        target, explicit = DEFAULT_WORKSPACE, False
    return target.expanduser().resolve(), explicit


def _build_layout(home: Path, *, create: bool) -> WorkspaceLayout:
    _require_directory(home)
    created = {"home": _make_dir(home) if create else False}
    directories: dict[str, Path] = {}
    for name in SUBDIRECTORIES:
        directory = home / name
        _require_directory(directory)
        created[name] = _make_dir(directory) if create else False
        directories[name] = directory
    return WorkspaceLayout(
        home=home,
        directories=MappingProxyType(directories),
        created=MappingProxyType(created),
    )


def _require_directory(path: Path) -> None:
    if path.exists() and not path.is_dir():
        raise WorkspaceError(
            f"Workspace path exists and is not a directory: {path}"
        )


def _make_dir(path: Path) -> bool:
    if path.is_dir():
        return False
    path.mkdir(mode=0o700, parents=True)
    return True
