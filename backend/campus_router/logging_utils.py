from __future__ import annotations

import contextvars
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

from .settings import settings

LOGGER_NAME = "campus_router"
LOG_FILE_NAME = "campus_router.log.jsonl"

# Fields bound for the duration of a request or a graph load (request_id,
# graph_version, source, ...) and merged into every event logged meanwhile.
_LOG_CONTEXT: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "campus_router_log_context",
    default={},
)

_RESERVED_RECORD_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _build_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if getattr(logger, "_campus_configured", False):
        return logger

    level = logging.getLevelName(settings.log_level)
    logger.setLevel(level if isinstance(level, int) else logging.INFO)
    logger.propagate = False

    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(message)s",
        rename_fields={"asctime": "ts", "levelname": "level"},
        static_fields={"service": LOGGER_NAME},
    )
    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    # The JSONL file is best effort; a read-only OUT_DIR still gets stderr logs.
    try:
        log_dir = Path(settings.out_dir) / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8")
    except OSError:
        pass
    else:
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger._campus_configured = True  # type: ignore[attr-defined]
    return logger


def current_log_context() -> dict[str, Any]:
    return dict(_LOG_CONTEXT.get())


@contextmanager
def bind_log_context(**fields: Any) -> Iterator[dict[str, Any]]:
    """Attach ``fields`` to every ``log_event`` in this context (nested binds merge)."""
    merged = {**_LOG_CONTEXT.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _LOG_CONTEXT.set(merged)
    try:
        yield merged
    finally:
        _LOG_CONTEXT.reset(token)


def _record_fields(event: str, fields: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {"event": event}
    for key, value in {**_LOG_CONTEXT.get(), **fields}.items():
        # LogRecord refuses extras that shadow its own attributes.
        out[f"{key}_" if key in _RESERVED_RECORD_KEYS else key] = value
    return out


def log_event(event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    _build_logger().log(level, event, extra=_record_fields(event, fields))
