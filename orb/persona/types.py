# SPDX-License-Identifier: Apache-2.0
"""Persona classification inputs, rules and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from orb.identity.context import ActionContext, enum_value
from orb.identity.types import OrbDevice, OrbMode, OrbPersona


class PersonaSource(str, Enum):
    OVERRIDE = "override"
    EXPLICIT = "explicit"
    FEATURE = "feature"
    MODE = "mode"
    DEVICE = "device"
    TIME = "time"
    ACTIVITY = "activity"
    DEFAULT = "default"


@dataclass(frozen=True)
class PersonaContext:
    user_id: str
    device_id: Optional[str] = None
    device: Optional[OrbDevice] = None
    mode: Optional[OrbMode] = None
    feature: Optional[str] = None
    stream: Optional[str] = None
    location: Optional[str] = None
    time_of_day: Optional[str] = None
    recent_activity: tuple[str, ...] = ()
    explicit_persona: Optional[OrbPersona] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_action_context(cls, context: ActionContext) -> "PersonaContext":
        """Adapt an action context; a persona already on the context counts as an explicit choice."""
        activity = context.metadata.get("recent_activity") or ()
        return cls(
            user_id=context.user_id,
            device_id=context.device_id,
            device=context.device,
            mode=context.mode,
            feature=context.feature,
            stream=context.metadata.get("stream"),
            location=context.metadata.get("location"),
            time_of_day=context.timestamp,
            recent_activity=tuple(str(item) for item in activity) if isinstance(activity, (list, tuple)) else (),
            explicit_persona=context.persona,
            metadata=dict(context.metadata),
        )


PersonaPredicate = Callable[[PersonaContext], bool]


@dataclass(frozen=True)
class PersonaSignalRule:
    """One row of the classification table: predicate plus the persona it votes for."""

    id: str
    priority: int
    source: PersonaSource | str
    persona: OrbPersona
    confidence: float
    reasoning: str
    predicate: PersonaPredicate = field(compare=False)


@dataclass(frozen=True)
class PersonaAlternative:
    persona: OrbPersona
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {"persona": enum_value(self.persona), "confidence": self.confidence}


@dataclass(frozen=True)
class PersonaClassificationResult:
    persona: OrbPersona
    confidence: float
    source: PersonaSource | str
    reasoning: list[str]
    alternatives: Optional[list[PersonaAlternative]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "persona": enum_value(self.persona),
            "confidence": self.confidence,
            "source": enum_value(self.source),
            "reasoning": list(self.reasoning),
            "alternatives": [item.to_dict() for item in self.alternatives] if self.alternatives else None,
        }


__all__ = [
    "PersonaAlternative",
    "PersonaClassificationResult",
    "PersonaContext",
    "PersonaPredicate",
    "PersonaSignalRule",
    "PersonaSource",
]
