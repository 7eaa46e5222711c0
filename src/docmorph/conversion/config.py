"""Configuration loader for docmorph conversion runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

from docmorph.core import config as core_config
from docmorph.core import workspace as workspace_mod

from .errors import DocmorphError, ValidationError
from .packaging import RenameCollision

CONFIG_FILENAME = "docmorph.toml"
CONFIG_ENV = "DOCMORPH_CONFIG"
TEMPLATE_RESOURCE = "template.toml"
ENV_PREFIX = "DOCMORPH_"

DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024
DEFAULT_MAX_BATCH_ITEMS = 20

_DEFAULT_COLLISION = "version"
_DEFAULT_RENAME_COLLISION = "overwrite"
_DEFAULT_LOG_LEVEL = "INFO"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class DocmorphConfigError(DocmorphError):
    """Raised when configuration parsing or validation fails."""


class CollisionPolicy(Enum):
    """What to do when the deliverable's file already exists on disk."""

    SKIP = "skip"
    OVERWRITE = "overwrite"
    VERSION = "version"

    @classmethod
    def from_value(cls, value: str) -> "CollisionPolicy":
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise DocmorphConfigError(
            f"Unknown collision policy '{value}'. Expected one of: {expected}."
        )


@dataclass(frozen=True)
class DocmorphConfig:
    """Fully resolved configuration for a conversion run."""

    output_dir: Path
    collision: CollisionPolicy
    rename_collision: RenameCollision
    single_line_breaks: bool
    batch_line_breaks: bool
    max_file_size: int
    max_batch_items: int
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    output_dir: Optional[Path] = None
    collision: Optional[CollisionPolicy] = None
    rename_collision: Optional[RenameCollision] = None
    single_line_breaks: Optional[bool] = None
    batch_line_breaks: Optional[bool] = None
    max_file_size: Optional[int] = None
    max_batch_items: Optional[int] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Result of loading configuration, including workspace context."""

    config: DocmorphConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = env if env is not None else os.environ

    layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    default_path = layout.path_for("config") / CONFIG_FILENAME

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=default_path,
    )

    defaults = _default_table()
    loaded_path: Optional[Path]

    if requested_path.exists():
        loaded_path = requested_path
        try:
            parsed = core_config.load_toml(requested_path)
            core_config.merge_defaults(defaults, parsed)
        except core_config.TomlConfigError as exc:
            raise DocmorphConfigError(str(exc)) from exc
    else:
        loaded_path = None
        if config_path is not None or _has_env_config(env_map):
            raise DocmorphConfigError(
                f"Config file not found: {requested_path}"
            )

    paths = defaults["paths"]
    output = defaults["output"]
    conversion = defaults["conversion"]
    limits = defaults["limits"]

    output_dir = _resolve_output_dir(
        candidate=_pick_first(
            overrides.output_dir,
            _parse_env_path(env_map, "OUTPUT_DIR"),
            _coerce_optional_path(paths["output_dir"]),
        ),
        layout=layout,
    )

    collision = _pick_first(
        overrides.collision,
        _parse_env_enum(env_map, "COLLISION", CollisionPolicy),
        _coerce_enum(output["collision"], CollisionPolicy, "output.collision"),
    )
    rename_collision = _pick_first(
        overrides.rename_collision,
        _parse_env_enum(env_map, "RENAME_COLLISION", RenameCollision),
        _coerce_enum(
            output["rename_collision"],
            RenameCollision,
            "output.rename_collision",
        ),
    )

    single_line_breaks = _pick_first(
        overrides.single_line_breaks,
        _parse_env_bool(env_map, "SINGLE_LINE_BREAKS"),
        _coerce_bool(
            conversion["single_line_breaks"],
            "conversion.single_line_breaks",
        ),
    )
    batch_line_breaks = _pick_first(
        overrides.batch_line_breaks,
        _parse_env_bool(env_map, "BATCH_LINE_BREAKS"),
        _coerce_bool(
            conversion["batch_line_breaks"],
            "conversion.batch_line_breaks",
        ),
    )

    max_file_size = _pick_first(
        overrides.max_file_size,
        _parse_env_int(env_map, "MAX_FILE_SIZE"),
        limits["max_file_size"],
    )
    max_batch_items = _pick_first(
        overrides.max_batch_items,
        _parse_env_int(env_map, "MAX_BATCH_ITEMS"),
        limits["max_batch_items"],
    )

    log_level = _resolve_log_level(
        overrides.log_level,
        _parse_env_string(env_map, "LOG_LEVEL"),
        defaults["logging"]["level"],
    )

    config = DocmorphConfig(
        output_dir=output_dir,
        collision=collision,
        rename_collision=rename_collision,
        single_line_breaks=single_line_breaks,
        batch_line_breaks=batch_line_breaks,
        max_file_size=_positive_int(max_file_size, "limits.max_file_size"),
        max_batch_items=_positive_int(
            max_batch_items, "limits.max_batch_items"
        ),
        log_level=log_level,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def config_template() -> str:
    """Return the commented ``docmorph.toml`` shipped with the package."""

    resource = resources.files(__package__).joinpath(TEMPLATE_RESOURCE)
    return resource.read_text(encoding="utf-8")


def write_config_template(path: Path, *, overwrite: bool = False) -> Path:
    try:
        return core_config.write_toml_template(
            path, template=config_template(), overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise DocmorphConfigError(str(exc)) from exc


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "paths": {"output_dir": None},
        "output": {
            "collision": _DEFAULT_COLLISION,
            "rename_collision": _DEFAULT_RENAME_COLLISION,
        },
        "conversion": {
            "single_line_breaks": True,
            "batch_line_breaks": True,
        },
        "limits": {
            "max_file_size": DEFAULT_MAX_FILE_SIZE,
            "max_batch_items": DEFAULT_MAX_BATCH_ITEMS,
        },
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = env_map.get(CONFIG_ENV)
    if env_candidate and env_candidate.strip():
        return Path(env_candidate.strip()).expanduser()
    return default_path


def _has_env_config(env_map: Mapping[str, str]) -> bool:
    env_candidate = env_map.get(CONFIG_ENV)
    return bool(env_candidate and env_candidate.strip())


def _coerce_optional_path(value: object) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, str):
        raw = value.strip()
        return Path(raw) if raw else None
    raise DocmorphConfigError(
        "paths.output_dir must be a string when provided."
    )


def _resolve_output_dir(
    *, candidate: Optional[Path], layout: workspace_mod.WorkspaceLayout
) -> Path:
    if candidate is None:
        return layout.path_for("converted")
    candidate = candidate.expanduser()
    if not candidate.is_absolute():
        return (layout.home / candidate).resolve()
    return candidate.resolve()


def _coerce_enum(value: object, enum_type, key: str):
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        try:
            return enum_type.from_value(value)
        except ValidationError as exc:
            raise DocmorphConfigError(f"{key}: {exc}") from exc
    expected = ", ".join(member.value for member in enum_type)
    raise DocmorphConfigError(f"{key} must be one of: {expected}.")


def _coerce_bool(value: object, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise DocmorphConfigError(f"{key} must be a boolean.")


def _positive_int(value: object, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DocmorphConfigError(f"{key} must be an integer.")
    if value <= 0:
        raise DocmorphConfigError(f"{key} must be greater than zero.")
    return value


def _resolve_log_level(
    override: Optional[str],
    env_value: Optional[str],
    file_value: object,
) -> str:
    candidate = _pick_first(override, env_value, file_value)
    if not isinstance(candidate, str):
        raise DocmorphConfigError("logging.level must be a string.")
    level = candidate.strip()
    if not level:
        raise DocmorphConfigError("logging.level must be a non-empty string.")
    return level.upper()


def _parse_env_enum(env_map: Mapping[str, str], key: str, enum_type):
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    return _coerce_enum(raw, enum_type, f"{ENV_PREFIX}{key}")


def _parse_env_bool(env_map: Mapping[str, str], key: str) -> Optional[bool]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise DocmorphConfigError(
        f"{ENV_PREFIX}{key} must be a boolean (true/false)."
    )


def _parse_env_int(env_map: Mapping[str, str], key: str) -> Optional[int]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise DocmorphConfigError(
            f"{ENV_PREFIX}{key} must be an integer."
        ) from exc


def _parse_env_path(env_map: Mapping[str, str], key: str) -> Optional[Path]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    return Path(raw).expanduser()


def _parse_env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


__all__ = [
    "CONFIG_ENV",
    "CONFIG_FILENAME",
    "CollisionPolicy",
    "ConfigOverrides",
    "DEFAULT_MAX_BATCH_ITEMS",
    "DEFAULT_MAX_FILE_SIZE",
    "DocmorphConfig",
    "DocmorphConfigError",
    "ENV_PREFIX",
    "LoadResult",
    "TEMPLATE_RESOURCE",
    "config_template",
    "load_config",
    "write_config_template",
]
