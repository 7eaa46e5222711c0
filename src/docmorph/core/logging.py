"""JSON-lines logging for docmorph commands.

Every command logs to ``<workspace>/logs/<command>.log``. Each line is a JSON
object carrying the timestamp, level, logger name, message and any values
passed through ``extra=``.
"""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_FILE_MARKER = "_docmorph_file"
_CONSOLE_MARKER = "_docmorph_console"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JsonLogFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(payload, ensure_ascii=True, default=_json_default)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Attach a rotating JSON file handler (and optionally stderr) to ``name``.

    Handlers added by an earlier call are replaced, so calling this twice for
    the same logger never duplicates output. ``verbose`` lowers the file
    threshold to DEBUG and mirrors records to stderr. When ``log_dir`` cannot
    be created the log goes to a directory under the system temp dir instead.
    """

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    path = _open_log_path(
        log_dir, filename or f"{name.rsplit('.', 1)[-1]}.log"
    )
    file_handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(JsonLogFormatter())
    file_handler.setLevel(logging.DEBUG if verbose else _level_number(level))
    _replace_handler(logger, _FILE_MARKER, file_handler)

    if verbose:
        console = logging.StreamHandler(stream=sys.stderr)
        console.setFormatter(
            logging.Formatter("%(levelname)s %(name)s: %(message)s")
        )
        _replace_handler(logger, _CONSOLE_MARKER, console)
    else:
        _replace_handler(logger, _CONSOLE_MARKER, None)

    return logger, path


def _replace_handler(
    logger: logging.Logger, marker: str, handler: logging.Handler | None
) -> None:
    for existing in list(logger.handlers):
        if getattr(existing, marker, False):
            logger.removeHandler(existing)
            existing.close()
    if handler is not None:
        setattr(handler, marker, True)
        logger.addHandler(handler)


def _level_number(level: str) -> int:
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _open_log_path(log_dir: Path, filename: str) -> Path:
    try:
        return _touch_log(log_dir, filename)
    except PermissionError:
        return _touch_log(_fallback_log_dir(), filename)


def _touch_log(directory: Path, filename: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.touch(mode=0o600, exist_ok=True)
    return path


def _fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "docmorph-logs"


def _json_default(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return repr(value)
