# SPDX-License-Identifier: Apache-2.0

"""Decision event taxonomy handed to an external event bus."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from orb.constraints.types import Decision
from orb.foundation import canonical_json

EVENT_TYPE_LUNA_DECISION = "luna_decision"
EVENT_TYPE_LUNA_ALLOW = "luna_allow"
EVENT_TYPE_LUNA_DENY = "luna_deny"
EVENT_TYPE_LUNA_REQUIRE_CONFIRMATION = "luna_require_confirmation"
EVENT_TYPE_MODE_CHANGE = "mode_change"

CANONICAL_EVENT_TYPES = {
    EVENT_TYPE_LUNA_DECISION,
    EVENT_TYPE_LUNA_ALLOW,
    EVENT_TYPE_LUNA_DENY,
    EVENT_TYPE_LUNA_REQUIRE_CONFIRMATION,
    EVENT_TYPE_MODE_CHANGE,
}

_DECISION_EVENT_TYPES: dict[Decision, str] = {
    Decision.ALLOW: EVENT_TYPE_LUNA_ALLOW,
    Decision.DENY: EVENT_TYPE_LUNA_DENY,
    Decision.REQUIRE_CONFIRMATION: EVENT_TYPE_LUNA_REQUIRE_CONFIRMATION,
}


def decision_event_type(decision: Decision | str) -> str:
    """Event type for a decision outcome; unknown outcomes fall back to the generic decision event."""
    return _DECISION_EVENT_TYPES.get(decision, EVENT_TYPE_LUNA_DECISION)  # type: ignore[call-overload]


@dataclass(frozen=True)
class DecisionEvent:
    event_type: str
    timestamp: str
    user_id: str
    session_id: Optional[str]
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "timestamp": self.timestamp,
            "user_id": self.user_id,
            "session_id": self.session_id,
            "payload": dict(self.payload),
        }

    def to_json(self) -> str:
        return canonical_json(self.to_dict())


class EventSink(Protocol):
    def __call__(self, event: DecisionEvent) -> None: ...


__all__ = [
    "CANONICAL_EVENT_TYPES",
    "EVENT_TYPE_LUNA_ALLOW",
    "EVENT_TYPE_LUNA_DECISION",
    "EVENT_TYPE_LUNA_DENY",
    "EVENT_TYPE_LUNA_REQUIRE_CONFIRMATION",
    "EVENT_TYPE_MODE_CHANGE",
    "DecisionEvent",
    "EventSink",
    "decision_event_type",
]
