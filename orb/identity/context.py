# SPDX-License-Identifier: Apache-2.0
"""Situational snapshot passed into every policy decision."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from orb.identity.types import OrbDevice, OrbMode, OrbPersona, OrbRole


def enum_value(value: Any) -> Any:
    """Plain JSON value for an enum member; other values pass through."""
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class ActionContext:
    """
    Constructed fresh per request by the caller and never persisted here.

    ``persona`` may be ``None`` when it has not been classified yet. ``device``
    and ``feature`` are optional dimensions; values outside the closed enums
    are tolerated and simply match no rule.
    """

    user_id: str
    session_id: str
    mode: OrbMode
    persona: Optional[OrbPersona] = None
    device_id: Optional[str] = None
    device: Optional[OrbDevice] = None
    feature: Optional[str] = None
    role: Optional[OrbRole] = None
    timestamp: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def with_persona(self, persona: OrbPersona) -> "ActionContext":
        return replace(self, persona=persona)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "session_id": self.session_id,
            "mode": enum_value(self.mode),
            "persona": enum_value(self.persona),
            "device_id": self.device_id,
            "device": enum_value(self.device),
            "feature": self.feature,
            "role": enum_value(self.role),
            "timestamp": self.timestamp,
            "metadata": dict(self.metadata),
        }


__all__ = ["ActionContext", "enum_value"]
