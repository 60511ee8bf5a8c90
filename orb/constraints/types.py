# SPDX-License-Identifier: Apache-2.0
"""Constraint, action and decision types for the policy layer.

A :class:`Constraint` carries the fields every rule shares (identity,
severity, scoping) and a ``rule`` payload that is one variant of a closed
tagged union. The variant decides the constraint ``type`` and the predicate
applied by the evaluator; :class:`OtherRule` holds anything that could not be
interpreted and never triggers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from orb.identity.context import ActionContext, enum_value
from orb.identity.types import OrbDevice, OrbMode, OrbPersona, OrbRole


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


RISK_ORDER: tuple[RiskLevel, ...] = (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL)


def risk_rank(risk: RiskLevel | str | None) -> int | None:
    """Position of ``risk`` on the low < medium < high < critical scale, ``None`` if unknown."""
    for idx, level in enumerate(RISK_ORDER):
        if risk == level:
            return idx
    return None


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_SEVERITY_ALIASES: dict[str, Severity] = {"warn": Severity.WARNING, "block": Severity.CRITICAL}


def normalize_severity(value: Any) -> Severity:
    """Map hand-authored severities (including ``warn``/``block``) onto :class:`Severity`.

    Anything unrecognised degrades to ``warning`` so it can never escalate a decision.
    """
    if isinstance(value, Severity):
        return value
    if isinstance(value, str):
        raw = value.strip().lower()
        if raw in _SEVERITY_ALIASES:
            return _SEVERITY_ALIASES[raw]
        try:
            return Severity(raw)
        except ValueError:
            pass
    return Severity.WARNING


class ConstraintType(str, Enum):
    BLOCK_ACTION = "block_action"
    BLOCK_TOOL = "block_tool"
    MAX_RISK = "max_risk"
    REQUIRE_CONFIRMATION = "require_confirmation"
    MODE_TRANSITION = "mode_transition"
    PERSONA_MISMATCH = "persona_mismatch"
    DEVICE_RESTRICTION = "device_restriction"
    TIME_RESTRICTION = "time_restriction"
    OTHER = "other"


class ActionKind(str, Enum):
    TOOL_CALL = "tool_call"
    FILE_WRITE = "file_write"
    FILE_READ = "file_read"
    API_CALL = "api_call"
    MODE_CHANGE = "mode_change"
    OTHER = "other"


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    REQUIRE_CONFIRMATION = "require_confirmation"


# --- rule variants -----------------------------------------------------------


@dataclass(frozen=True)
class BlockActionRule:
    constraint_type: ClassVar[ConstraintType] = ConstraintType.BLOCK_ACTION
    action_id: Optional[str] = None


@dataclass(frozen=True)
class BlockToolRule:
    constraint_type: ClassVar[ConstraintType] = ConstraintType.BLOCK_TOOL
    tool_id: Optional[str] = None


@dataclass(frozen=True)
class MaxRiskRule:
    constraint_type: ClassVar[ConstraintType] = ConstraintType.MAX_RISK
    max_risk: RiskLevel = RiskLevel.LOW


@dataclass(frozen=True)
class RequireConfirmationRule:
    constraint_type: ClassVar[ConstraintType] = ConstraintType.REQUIRE_CONFIRMATION


@dataclass(frozen=True)
class ModeTransitionRule:
    constraint_type: ClassVar[ConstraintType] = ConstraintType.MODE_TRANSITION
    allowed_modes: tuple[OrbMode, ...] = ()


@dataclass(frozen=True)
class PersonaRule:
    constraint_type: ClassVar[ConstraintType] = ConstraintType.PERSONA_MISMATCH
    required_persona: Optional[OrbPersona] = None


@dataclass(frozen=True)
class DeviceRestrictionRule:
    constraint_type: ClassVar[ConstraintType] = ConstraintType.DEVICE_RESTRICTION
    allowed_devices: tuple[OrbDevice, ...] = ()


@dataclass(frozen=True)
class TimeRestrictionRule:
    """Allowed window ``[start_hour, end_hour)``; wraps past midnight when start > end."""

    constraint_type: ClassVar[ConstraintType] = ConstraintType.TIME_RESTRICTION
    start_hour: int = 0
    end_hour: int = 24


@dataclass(frozen=True)
class OtherRule:
    constraint_type: ClassVar[ConstraintType] = ConstraintType.OTHER
    description: str = ""


ConstraintRule = Union[
    BlockActionRule,
    BlockToolRule,
    MaxRiskRule,
    RequireConfirmationRule,
    ModeTransitionRule,
    PersonaRule,
    DeviceRestrictionRule,
    TimeRestrictionRule,
    OtherRule,
]


# --- constraints ---------------------------------------------------------------


@dataclass(frozen=True)
class Constraint:
    """
    A single scoped rule.

    Empty scoping tuples mean "applies regardless of that dimension"; every
    populated tuple must contain the context value (AND across dimensions).
    """

    id: str
    rule: ConstraintRule
    severity: Severity = Severity.ERROR
    active: bool = True
    modes: tuple[OrbMode, ...] = ()
    personas: tuple[OrbPersona, ...] = ()
    devices: tuple[OrbDevice, ...] = ()
    roles: tuple[OrbRole, ...] = ()
    features: tuple[str, ...] = ()
    action_kinds: tuple[ActionKind, ...] = ()
    label: Optional[str] = None
    description: Optional[str] = None
    reason: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> ConstraintType:
        return self.rule.constraint_type

    @property
    def is_global(self) -> bool:
        """No mode, persona or device scoping."""
        return not (self.modes or self.personas or self.devices)


@dataclass(frozen=True)
class ConstraintSet:
    """Named, prioritized bundle of constraints; higher priority is evaluated first."""

    id: str
    constraints: tuple[Constraint, ...] = ()
    name: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None
    scope: Optional[str] = None
    tags: tuple[str, ...] = ()
    priority: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_global(self) -> bool:
        return all(constraint.is_global for constraint in self.constraints)


# --- actions and results --------------------------------------------------------


@dataclass(frozen=True)
class ActionDescriptor:
    id: str
    kind: ActionKind
    role: OrbRole
    description: str = ""
    tool_id: Optional[str] = None
    target_path: Optional[str] = None
    api_endpoint: Optional[str] = None
    estimated_risk: RiskLevel = RiskLevel.LOW
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": enum_value(self.kind),
            "role": enum_value(self.role),
            "description": self.description,
            "tool_id": self.tool_id,
            "target_path": self.target_path,
            "api_endpoint": self.api_endpoint,
            "estimated_risk": enum_value(self.estimated_risk),
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class TriggeredConstraint:
    constraint_id: str
    constraint_type: ConstraintType
    severity: Severity
    reason: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "constraint_id": self.constraint_id,
            "constraint_type": enum_value(self.constraint_type),
            "severity": enum_value(self.severity),
            "reason": self.reason,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class ConstraintEvaluationResult:
    allowed: bool
    decision: Decision
    reasons: list[str]
    triggered_constraints: list[TriggeredConstraint]
    effective_risk: RiskLevel
    recommendations: Optional[list[str]] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "decision": enum_value(self.decision),
            "reasons": list(self.reasons),
            "triggered_constraints": [item.to_dict() for item in self.triggered_constraints],
            "effective_risk": enum_value(self.effective_risk),
            "recommendations": list(self.recommendations) if self.recommendations is not None else None,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class ModeTransitionRequest:
    from_mode: OrbMode
    to_mode: OrbMode
    context: ActionContext
    reason: Optional[str] = None
    forced: bool = False


@dataclass(frozen=True)
class ModeTransitionResult:
    allowed: bool
    from_mode: OrbMode
    to_mode: OrbMode
    reasons: list[str]
    triggered_constraints: list[TriggeredConstraint]
    timestamp: str
    recommendations: Optional[list[str]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "from_mode": enum_value(self.from_mode),
            "to_mode": enum_value(self.to_mode),
            "reasons": list(self.reasons),
            "triggered_constraints": [item.to_dict() for item in self.triggered_constraints],
            "recommendations": list(self.recommendations) if self.recommendations is not None else None,
            "timestamp": self.timestamp,
        }


__all__ = [
    "RISK_ORDER",
    "ActionDescriptor",
    "ActionKind",
    "BlockActionRule",
    "BlockToolRule",
    "Constraint",
    "ConstraintEvaluationResult",
    "ConstraintRule",
    "ConstraintSet",
    "ConstraintType",
    "Decision",
    "DeviceRestrictionRule",
    "MaxRiskRule",
    "ModeTransitionRequest",
    "ModeTransitionResult",
    "ModeTransitionRule",
    "OtherRule",
    "PersonaRule",
    "RequireConfirmationRule",
    "Severity",
    "TimeRestrictionRule",
    "TriggeredConstraint",
    "normalize_severity",
    "risk_rank",
]
