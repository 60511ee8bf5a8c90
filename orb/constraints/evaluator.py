# SPDX-License-Identifier: Apache-2.0
"""Action constraint evaluation.

``evaluate_action`` is a pure function of the action, the context and the
constraint sets it is given. Retrieval is the caller's job; a failed
retrieval must fail the evaluation instead of proceeding with partial rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from orb.constraints.types import (
    ActionDescriptor,
    BlockActionRule,
    BlockToolRule,
    Constraint,
    ConstraintEvaluationResult,
    ConstraintSet,
    ConstraintType,
    Decision,
    DeviceRestrictionRule,
    MaxRiskRule,
    PersonaRule,
    RequireConfirmationRule,
    RiskLevel,
    Severity,
    TimeRestrictionRule,
    TriggeredConstraint,
    risk_rank,
)
from orb.foundation.clock import hour_of
from orb.identity.context import ActionContext, enum_value

if TYPE_CHECKING:
    from orb.constraints.store import ConstraintStore

NO_VIOLATIONS_REASON = "No constraints violated"

_BLOCKING_TYPES = (ConstraintType.BLOCK_ACTION, ConstraintType.BLOCK_TOOL)


@dataclass(frozen=True)
class Violation:
    reason: str
    recommendation: Optional[str] = None


def sort_by_priority(sets: Iterable[ConstraintSet]) -> list[ConstraintSet]:
    """Highest priority first; equal priorities keep their input order."""
    return sorted(sets, key=lambda item: item.priority, reverse=True)


def _member(value: object, allowed: Sequence[object]) -> bool:
    return value is not None and any(value == item for item in allowed)


def constraint_applies(constraint: Constraint, context: ActionContext, action: Optional[ActionDescriptor] = None) -> bool:
    """
    Scoping check. ``modes``, ``personas``, ``roles`` and ``action_kinds``
    require membership; ``devices`` and ``features`` only exclude when the
    context actually carries a value for them.
    """
    if constraint.modes and not _member(context.mode, constraint.modes):
        return False
    if constraint.personas and not _member(context.persona, constraint.personas):
        return False
    if constraint.devices and context.device is not None and not _member(context.device, constraint.devices):
        return False
    if constraint.features and context.feature is not None and not _member(context.feature, constraint.features):
        return False
    role = action.role if action is not None else context.role
    if constraint.roles and not _member(role, constraint.roles):
        return False
    if constraint.action_kinds and not _member(action.kind if action is not None else None, constraint.action_kinds):
        return False
    return True


def _label(value: object) -> str:
    return str(enum_value(value)) if value is not None else "unknown"


def _within_hours(hour: int, rule: TimeRestrictionRule) -> bool:
    if rule.start_hour <= rule.end_hour:
        return rule.start_hour <= hour < rule.end_hour
    return hour >= rule.start_hour or hour < rule.end_hour


def check_violation(constraint: Constraint, action: ActionDescriptor, context: ActionContext) -> Optional[Violation]:
    """Type-specific predicate; ``None`` when the constraint is satisfied or inert."""
    rule = constraint.rule

    if isinstance(rule, BlockActionRule):
        if rule.action_id is not None and rule.action_id == action.id:
            return Violation(
                reason=f"Action {action.id} is blocked by constraint {constraint.id}",
                recommendation="This action is not allowed in the current context",
            )
        return None

    if isinstance(rule, BlockToolRule):
        if rule.tool_id is not None and rule.tool_id == action.tool_id:
            return Violation(
                reason=f"Tool {action.tool_id} is blocked by constraint {constraint.id}",
                recommendation=constraint.reason or "Try using an alternative tool",
            )
        return None

    if isinstance(rule, MaxRiskRule):
        risk = action.estimated_risk or RiskLevel.LOW
        action_rank = risk_rank(risk)
        ceiling_rank = risk_rank(rule.max_risk)
        if action_rank is None or ceiling_rank is None:
            return None
        if action_rank > ceiling_rank:
            return Violation(
                reason=f"Action risk ({_label(risk)}) exceeds maximum allowed ({_label(rule.max_risk)})",
                recommendation="Consider a lower-risk approach or request approval",
            )
        return None

    if isinstance(rule, RequireConfirmationRule):
        # Soft gate: being in scope is the trigger.
        return Violation(
            reason=constraint.reason or "This action requires confirmation",
            recommendation="Review and confirm before proceeding",
        )

    if isinstance(rule, PersonaRule):
        if rule.required_persona is not None and context.persona != rule.required_persona:
            return Violation(
                reason=(
                    f"Action requires persona {_label(rule.required_persona)}, "
                    f"but current persona is {_label(context.persona)}"
                ),
                recommendation=f"Switch to {_label(rule.required_persona)} persona to perform this action",
            )
        return None

    if isinstance(rule, DeviceRestrictionRule):
        if rule.allowed_devices and context.device is not None and not _member(context.device, rule.allowed_devices):
            return Violation(
                reason=f"Action not allowed on device {_label(context.device)}",
                recommendation=f"This action is only allowed on: {', '.join(_label(d) for d in rule.allowed_devices)}",
            )
        return None

    if isinstance(rule, TimeRestrictionRule):
        hour = hour_of(context.timestamp)
        if hour is not None and not _within_hours(hour, rule):
            window = f"{rule.start_hour:02d}:00-{rule.end_hour:02d}:00"
            return Violation(
                reason=f"Action not allowed at {hour:02d}:00 (allowed window {window})",
                recommendation=f"This action is only allowed between {window}",
            )
        return None

    # mode_transition is checked by the transition validator; other never triggers.
    return None


def evaluate_action(
    action: ActionDescriptor,
    context: ActionContext,
    constraint_sets: Sequence[ConstraintSet],
) -> ConstraintEvaluationResult:
    """Decide allow / deny / require_confirmation for ``action`` in ``context``."""
    triggered: list[TriggeredConstraint] = []
    reasons: list[str] = []
    recommendations: list[str] = []
    decision = Decision.ALLOW

    for constraint_set in sort_by_priority(constraint_sets):
        for constraint in constraint_set.constraints:
            if not constraint.active or not constraint_applies(constraint, context, action):
                continue
            violation = check_violation(constraint, action, context)
            if violation is None:
                continue

            triggered.append(
                TriggeredConstraint(
                    constraint_id=constraint.id,
                    constraint_type=constraint.type,
                    severity=constraint.severity,
                    reason=violation.reason,
                    metadata={"constraint_set_id": constraint_set.id},
                )
            )
            reasons.append(violation.reason)
            if constraint.severity == Severity.CRITICAL or constraint.type in _BLOCKING_TYPES:
                decision = Decision.DENY
            elif constraint.severity == Severity.ERROR and decision != Decision.DENY:
                decision = Decision.REQUIRE_CONFIRMATION
            if violation.recommendation and violation.recommendation not in recommendations:
                recommendations.append(violation.recommendation)

    if not triggered:
        reasons.append(NO_VIOLATIONS_REASON)
        decision = Decision.ALLOW

    return ConstraintEvaluationResult(
        allowed=decision == Decision.ALLOW,
        decision=decision,
        reasons=reasons,
        triggered_constraints=triggered,
        effective_risk=action.estimated_risk or RiskLevel.LOW,
        recommendations=recommendations or None,
    )


def get_relevant_constraint_sets(store: "ConstraintStore", context: ActionContext) -> list[ConstraintSet]:
    """Fetch sets for ``context``; store failures propagate so callers fail closed."""
    return list(store.get_constraint_sets(context))


__all__ = [
    "NO_VIOLATIONS_REASON",
    "Violation",
    "check_violation",
    "constraint_applies",
    "evaluate_action",
    "get_relevant_constraint_sets",
    "sort_by_priority",
]
