"""Persisted user preferences for the conversion commands.

Preferences are plain string key/value pairs. Booleans are stored as
``"true"``/``"false"``. They are read once when a command starts and written
back only when the user asks for it, so the conversion core never sees the
store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Protocol

from docmorph.core import config as core_config

from .config import DocmorphConfigError
from .errors import ValidationError
from .formatting import FormattingConfig, HeadingStyle, TranscriptionConfig
from .modes import ConversionMode

__all__ = [
    "PREFERENCES_FILENAME",
    "PREFERENCE_KEYS",
    "PreferenceStore",
    "Preferences",
    "TomlPreferenceStore",
    "normalize_preference",
    "preferences_from_mapping",
    "preferences_to_mapping",
]

PREFERENCES_FILENAME = "preferences.toml"
PREFERENCE_KEYS: tuple[str, ...] = (
    "font_family",
    "font_size",
    "bold_headers",
    "italic_headers",
    "heading_style",
    "bullet_marker",
    "conversion_mode",
)

_TABLE = "preferences"
_LOGGER = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    def load(self) -> dict[str, str]:
        ...

    def save(self, values: Mapping[str, str]) -> None:
        ...

    def reset(self) -> None:
        ...


@dataclass(frozen=True)
class Preferences:
    formatting: FormattingConfig = field(default_factory=FormattingConfig)
    transcription: TranscriptionConfig = field(
        default_factory=TranscriptionConfig
    )
    mode: ConversionMode = ConversionMode.MARKDOWN_TO_WORD


class TomlPreferenceStore:
    """Keep preferences in a ``[preferences]`` table of a TOML file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            parsed = core_config.load_toml(self.path)
        except core_config.TomlConfigError as exc:
            raise DocmorphConfigError(str(exc)) from exc
        table = parsed.get(_TABLE, {})
        if not isinstance(table, Mapping):
            raise DocmorphConfigError(
                f"'{_TABLE}' in {self.path} must be a table."
            )
        return {
            key: value
            for key, value in table.items()
            if key in PREFERENCE_KEYS and isinstance(value, str)
        }

    def save(self, values: Mapping[str, str]) -> None:
        merged = self.load()
        merged.update(
            {key: str(value) for key, value in values.items()}
        )
        unknown = sorted(set(merged) - set(PREFERENCE_KEYS))
        if unknown:
            raise DocmorphConfigError(
                f"Unknown preference key(s): {', '.join(unknown)}"
            )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                core_config.dump_string_table(_TABLE, merged),
                encoding="utf-8",
            )
        except OSError as exc:
            raise DocmorphConfigError(
                f"Failed to write preferences to {self.path}: {exc}"
            ) from exc

    def reset(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise DocmorphConfigError(
                f"Failed to reset preferences at {self.path}: {exc}"
            ) from exc


def preferences_from_mapping(
    values: Mapping[str, str],
    *,
    strict: bool = False,
    logger: Optional[logging.Logger] = None,
) -> Preferences:
    """Build :class:`Preferences` from stored strings.

    Values that no longer parse fall back to their defaults unless
    ``strict`` is set, in which case a :class:`ValidationError` is raised.
    """

    log = logger or _LOGGER
    defaults = Preferences()

    def pick(key: str, parse, fallback):
        raw = values.get(key)
        if raw is None:
            return fallback
        try:
            return parse(raw)
        except (ValueError, ValidationError) as exc:
            if strict:
                raise ValidationError(
                    f"Invalid value for {key}: {raw!r}"
                ) from exc
            log.warning(
                "Ignoring invalid preference",
                extra={"key": key, "value": raw},
            )
            return fallback

    base_fmt = defaults.formatting
    formatting_values = {
        "font_family": pick("font_family", _non_empty, base_fmt.font_family),
        "font_size": pick("font_size", _non_empty, base_fmt.font_size),
        "bold_headers": pick("bold_headers", _parse_bool, False),
        "italic_headers": pick("italic_headers", _parse_bool, False),
    }
    heading_style = pick(
        "heading_style",
        _heading_style,
        defaults.transcription.heading_style,
    )
    bullet = pick(
        "bullet_marker",
        _bullet,
        defaults.transcription.bullet_list_marker,
    )
    mode = pick("conversion_mode", ConversionMode.from_value, defaults.mode)

    return Preferences(
        formatting=FormattingConfig(**formatting_values),
        transcription=TranscriptionConfig(
            heading_style=heading_style, bullet_list_marker=bullet
        ),
        mode=mode,
    )


def preferences_to_mapping(preferences: Preferences) -> dict[str, str]:
    fmt = preferences.formatting
    transcription = preferences.transcription
    return {
        "font_family": fmt.font_family,
        "font_size": fmt.font_size,
        "bold_headers": _format_bool(fmt.bold_headers),
        "italic_headers": _format_bool(fmt.italic_headers),
        "heading_style": transcription.heading_style.value,
        "bullet_marker": transcription.bullet_list_marker,
        "conversion_mode": preferences.mode.value,
    }


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def _non_empty(value: str) -> str:
    if not value.strip():
        raise ValueError("Value must be non-empty.")
    return value


def _heading_style(value: str) -> HeadingStyle:
    return HeadingStyle(value.strip().lower())


def _bullet(value: str) -> str:
    # TranscriptionConfig validates the marker set.
    TranscriptionConfig(bullet_list_marker=value)
    return value


def normalize_preference(key: str, value: str) -> str:
    """Validate ``value`` for ``key`` and return its stored form."""

    if key not in PREFERENCE_KEYS:
        raise ValidationError(
            f"Unknown preference '{key}'. "
            f"Expected one of: {', '.join(PREFERENCE_KEYS)}."
        )
    probe = preferences_from_mapping({key: value.strip()}, strict=True)
    return preferences_to_mapping(probe)[key]
