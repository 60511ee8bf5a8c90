# SPDX-License-Identifier: Apache-2.0
"""Stable JSON text for persisted constraint sets and decision events."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Path):
        return value.as_posix()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def canonical_json(payload: Any) -> str:
    """Serialize ``payload`` with sorted keys and compact separators.

    Enum members collapse to their values and sets to sorted lists, so two
    equal payloads always produce byte-identical text.
    """

    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"), default=_jsonable)


__all__ = ["canonical_json"]
