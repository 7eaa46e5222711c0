"""File helpers shared by the conversion commands."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, Sequence

__all__ = [
    "InputFile",
    "format_file_size",
    "iter_input_paths",
    "matches_extension",
    "normalize_extensions",
]

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


@dataclass(frozen=True)
class InputFile:
    """A named input whose bytes are only read when a conversion needs them."""

    name: str
    size: int
    loader: Callable[[], bytes] = field(repr=False, compare=False)

    def read(self) -> bytes:
        return self.loader()

    @classmethod
    def from_path(cls, path: Path) -> "InputFile":
        stat_result = path.stat()
        return cls(
            name=path.name,
            size=stat_result.st_size,
            loader=path.read_bytes,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> "InputFile":
        return cls(name=name, size=len(data), loader=lambda: data)


def normalize_extensions(values: Iterable[str]) -> tuple[str, ...]:
    """Lowercase extensions and give each a single leading dot."""

    normalized: list[str] = []
    for value in values:
        candidate = value.strip().lower().lstrip(".")
        if candidate and f".{candidate}" not in normalized:
            normalized.append(f".{candidate}")
    return tuple(normalized)


def matches_extension(name: str, extensions: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(lowered.endswith(ext.lower()) for ext in extensions)


def format_file_size(size: int) -> str:
    """Return ``size`` in human units, e.g. ``1.5 KB``."""

    if size <= 0:
        return "0 Bytes"
    index = min(int(math.log(size, 1024)), len(_SIZE_UNITS) - 1)
    value = round(size / 1024**index, 2)
    return f"{value:g} {_SIZE_UNITS[index]}"


def iter_input_paths(
    paths: Sequence[Path], extensions: Sequence[str]
) -> Iterator[Path]:
    """Yield files from ``paths`` in the order given.

    Directories expand to their matching files sorted by name. Explicit file
    paths are yielded even when their extension does not match so validation
    can report them. Duplicates are dropped. ``extensions`` may be given
    with or without the leading dot.
    """

    wanted = normalize_extensions(extensions)
    seen: set[Path] = set()
    for raw in paths:
        path = raw.expanduser()
        if path.is_dir():
            children = sorted(
                child
                for child in path.rglob("*")
                if child.is_file() and matches_extension(child.name, wanted)
            )
        else:
            children = [path]
        for child in children:
            key = child.resolve()
            if key in seen:
                continue
            seen.add(key)
            yield child
