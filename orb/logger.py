# SPDX-License-Identifier: Apache-2.0
"""
Module: logger
Purpose: JSON-lines logging and decision auditing for the policy layer.
Integration points:
  - Imports from: orb.config (log directory), orb.interfaces.ilogger
  - Consumed by: orb.session.PolicySession
  - Line shape: {"ts", "lvl", "cmp", "msg", "ctx"}, one object per line
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from orb.config import load_config
from orb.interfaces.ilogger import ILogger

AUDIT_LEVEL = 25
logging.addLevelName(AUDIT_LEVEL, "AUDIT")

ROTATION_BYTES = 5_242_880
BACKUP_COUNT = 3

REDACTED = "<redacted>"
REDACTION_KEYS = frozenset({"password", "secret", "token", "api_key", "credential", "key"})
_SENSITIVE_SUFFIXES = ("_password", "_secret", "_token", "_api_key")

_LOGGER_CACHE: Dict[Tuple[str, Optional[Path]], "JSONLogger"] = {}


def _is_sensitive(key: str, keys: frozenset[str] | set[str]) -> bool:
    lowered = key.lower()
    return lowered in keys or lowered.endswith(_SENSITIVE_SUFFIXES)


def _scrub(value: Any, keys: frozenset[str] | set[str]) -> Any:
    if isinstance(value, Mapping):
        return {k: (REDACTED if _is_sensitive(str(k), keys) else _scrub(v, keys)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_scrub(item, keys) for item in value]
    if isinstance(value, Enum):
        return value.value
    return value


def redact_context(data: Mapping[str, Any], redactions: Optional[set[str]] = None) -> Dict[str, Any]:
    """Mask secret-looking keys at any depth. ``redactions`` replaces the default key set."""
    keys = frozenset(k.lower() for k in redactions) if redactions else REDACTION_KEYS
    return _scrub(dict(data), keys)


class JSONLinesFormatter(logging.Formatter):
    def __init__(self, component: str) -> None:
        super().__init__()
        self.component = component

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        context = dict(getattr(record, "context", None) or {})
        if record.exc_info:
            context["exc"] = self.formatException(record.exc_info)

        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        line = {
            "ts": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "lvl": record.levelname,
            "cmp": self.component,
            "msg": record.getMessage(),
            "ctx": context,
        }
        return json.dumps(line, ensure_ascii=False, default=str)


class JSONLogger(ILogger):
    """File-backed :class:`ILogger`; every call writes one JSON line."""

    def __init__(self, component: str = "policy", log_file: Optional[Path] = None) -> None:
        self.component = component
        if log_file is not None:
            self.log_path = Path(log_file)
            suffix = hashlib.sha1(str(self.log_path.absolute()).encode("utf-8")).hexdigest()[:12]
            name = f"orb.log.{component}.{suffix}"
        else:
            self.log_path = load_config().log_dir / f"{component}.jsonl"
            name = f"orb.log.{component}"
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._handler = self._attach_handler()

    def _attach_handler(self) -> RotatingFileHandler:
        target = str(self.log_path.absolute())
        for handler in self._logger.handlers:
            if isinstance(handler, RotatingFileHandler) and handler.baseFilename == target:
                return handler
        handler = RotatingFileHandler(self.log_path, maxBytes=ROTATION_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
        handler.setFormatter(JSONLinesFormatter(self.component))
        self._logger.addHandler(handler)
        return handler

    @property
    def handler(self) -> RotatingFileHandler:
        return self._handler

    def _write(self, level: int, msg: str, context: Dict[str, Any], exc_info: Any = None) -> None:
        self._logger.log(level, msg, extra={"context": redact_context(context)}, exc_info=exc_info)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._write(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._write(logging.INFO, msg, kwargs)

    def error(self, msg: str, error: Optional[Exception] = None, **kwargs: Any) -> None:
        exc_info = None
        if error is not None:
            kwargs["error"] = repr(error)
            exc_info = (type(error), error, error.__traceback__)
        self._write(logging.ERROR, msg, kwargs, exc_info)

    def audit(self, action: str, actor: str, outcome: str, **details: Any) -> None:
        self._write(AUDIT_LEVEL, action, {"action": action, "actor": actor, "outcome": outcome, **details})

    def close(self) -> None:
        self._handler.close()
        self._logger.removeHandler(self._handler)


def get_logger(component: str = "policy", log_file: Optional[Path] = None) -> JSONLogger:
    """Cached :class:`JSONLogger` per component and explicit log file."""
    key = (component, Path(log_file).absolute() if log_file is not None else None)
    logger = _LOGGER_CACHE.get(key)
    if logger is None:
        logger = _LOGGER_CACHE[key] = JSONLogger(component=component, log_file=log_file)
    return logger


def reset_logger_cache() -> None:
    """Close cached handlers and forget cached loggers."""
    for logger in _LOGGER_CACHE.values():
        logger.close()
    _LOGGER_CACHE.clear()


__all__ = [
    "AUDIT_LEVEL",
    "BACKUP_COUNT",
    "JSONLinesFormatter",
    "JSONLogger",
    "REDACTED",
    "ROTATION_BYTES",
    "get_logger",
    "redact_context",
    "reset_logger_cache",
]
