# SPDX-License-Identifier: Apache-2.0
"""Mode transition validation.

Modes do not form a state machine: every ``from -> to`` pair is allowed
unless a ``mode_transition`` constraint scoped to the source mode excludes
the target with ``error`` or ``critical`` severity. Descriptor affinity
checks only add advisory reasons.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from orb.constraints.evaluator import constraint_applies, sort_by_priority
from orb.constraints.types import (
    ActionKind,
    Constraint,
    ConstraintSet,
    ModeTransitionRequest,
    ModeTransitionResult,
    ModeTransitionRule,
    Severity,
    TriggeredConstraint,
)
from orb.foundation.clock import utc_now_iso
from orb.identity.context import ActionContext, enum_value
from orb.identity.descriptors import get_mode_descriptor
from orb.identity.types import OrbDevice, OrbMode, OrbPersona

FORCED_REASON = "Transition forced by user override"
SAME_MODE_REASON = "No transition needed (same mode)"

_DEVICE_MODES: dict[OrbDevice, OrbMode] = {
    OrbDevice.SOL: OrbMode.SOL,
    OrbDevice.LUNA: OrbMode.FORGE,
    OrbDevice.MARS: OrbMode.MARS,
    OrbDevice.EARTH: OrbMode.EARTH,
}

_PERSONA_MODES: dict[OrbPersona, OrbMode] = {
    OrbPersona.PERSONAL: OrbMode.SOL,
    OrbPersona.SWL: OrbMode.MARS,
    OrbPersona.REAL_ESTATE: OrbMode.REAL_ESTATE,
    OrbPersona.OPEN_PEOPLE: OrbMode.EXPLORER,
}

_DENIAL_REASONS: dict[str, str] = {
    "persona-mismatch": "Your current persona is not compatible with the target mode",
    "device-restriction": "The target mode is not available on your current device",
    "hard-constraint": "A system constraint prevents this transition",
    "time-restriction": "Mode transitions are restricted at this time",
    "unsafe-context": "Current system state makes this transition unsafe",
}


def _names(values: Sequence[object]) -> str:
    return ", ".join(str(enum_value(value)) for value in values)


def _transition_applies(constraint: Constraint, request: ModeTransitionRequest) -> bool:
    if constraint.modes and not any(request.from_mode == mode for mode in constraint.modes):
        return False
    if constraint.action_kinds and ActionKind.MODE_CHANGE not in constraint.action_kinds:
        return False
    return constraint_applies(replace(constraint, modes=(), action_kinds=()), request.context)


def validate_mode_transition(
    request: ModeTransitionRequest,
    constraint_sets: Sequence[ConstraintSet] = (),
    *,
    now: Optional[datetime] = None,
) -> ModeTransitionResult:
    timestamp = utc_now_iso(now)
    from_mode, to_mode, context = request.from_mode, request.to_mode, request.context

    if request.forced:
        return ModeTransitionResult(True, from_mode, to_mode, [FORCED_REASON], [], timestamp)
    if from_mode == to_mode:
        return ModeTransitionResult(True, from_mode, to_mode, [SAME_MODE_REASON], [], timestamp)

    reasons: list[str] = []
    recommendations: list[str] = []
    triggered: list[TriggeredConstraint] = []
    target = str(enum_value(to_mode))
    source = str(enum_value(from_mode))

    descriptor = get_mode_descriptor(to_mode)
    if descriptor is not None:
        if context.device is not None and context.device not in descriptor.default_devices:
            reasons.append(f"Mode {target} is not typically used on device {enum_value(context.device)}")
            recommendations.append(f"{target} is optimized for: {_names(descriptor.default_devices)}")
        if context.persona is not None and context.persona not in descriptor.default_personas:
            reasons.append(f"Mode {target} is not typically used with persona {enum_value(context.persona)}")
            recommendations.append(f"{target} is optimized for: {_names(descriptor.default_personas)}")

    for constraint_set in sort_by_priority(constraint_sets):
        for constraint in constraint_set.constraints:
            if not constraint.active or not isinstance(constraint.rule, ModeTransitionRule):
                continue
            if not _transition_applies(constraint, request):
                continue
            allowed_modes = constraint.rule.allowed_modes
            if not allowed_modes or any(to_mode == mode for mode in allowed_modes):
                continue
            triggered.append(
                TriggeredConstraint(
                    constraint_id=constraint.id,
                    constraint_type=constraint.type,
                    severity=constraint.severity,
                    reason=constraint.reason or f"Transition to {target} not allowed from {source}",
                    metadata={"constraint_set_id": constraint_set.id},
                )
            )
            reasons.append(constraint.reason or f"Transition to {target} is restricted by constraint {constraint.id}")
            recommendation = f"Allowed transitions from {source}: {_names(allowed_modes)}"
            if recommendation not in recommendations:
                recommendations.append(recommendation)

    allowed = not any(item.severity in (Severity.ERROR, Severity.CRITICAL) for item in triggered)
    if allowed:
        reasons.append(f"Transition from {source} to {target} allowed")
        if request.reason:
            reasons.append(f"Reason: {request.reason}")

    return ModeTransitionResult(
        allowed=allowed,
        from_mode=from_mode,
        to_mode=to_mode,
        reasons=reasons,
        triggered_constraints=triggered,
        timestamp=timestamp,
        recommendations=recommendations or None,
    )


def can_transition_mode(
    from_mode: OrbMode,
    to_mode: OrbMode,
    context: ActionContext,
    constraint_sets: Sequence[ConstraintSet] = (),
) -> bool:
    return validate_mode_transition(ModeTransitionRequest(from_mode, to_mode, context), constraint_sets).allowed


def get_recommended_mode(context: ActionContext) -> OrbMode:
    """Device first, then persona, then ``DEFAULT``."""
    if context.device is not None and context.device in _DEVICE_MODES:
        return _DEVICE_MODES[context.device]
    if context.persona is not None and context.persona in _PERSONA_MODES:
        return _PERSONA_MODES[context.persona]
    return OrbMode.DEFAULT


def get_mode_transition_denial_reasons() -> dict[str, str]:
    return dict(_DENIAL_REASONS)


__all__ = [
    "FORCED_REASON",
    "SAME_MODE_REASON",
    "can_transition_mode",
    "get_mode_transition_denial_reasons",
    "get_recommended_mode",
    "validate_mode_transition",
]
