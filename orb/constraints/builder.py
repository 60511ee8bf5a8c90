# SPDX-License-Identifier: Apache-2.0
"""Constructors for constraints and constraint sets, plus mode-tag parsing."""

from __future__ import annotations

import itertools
import threading
from typing import Any, Iterable, Mapping, Optional

from orb.constraints.types import (
    ActionKind,
    BlockActionRule,
    BlockToolRule,
    Constraint,
    ConstraintRule,
    ConstraintSet,
    DeviceRestrictionRule,
    MaxRiskRule,
    ModeTransitionRule,
    OtherRule,
    PersonaRule,
    RequireConfirmationRule,
    RiskLevel,
    Severity,
    TimeRestrictionRule,
    normalize_severity,
)
from orb.identity.context import enum_value
from orb.identity.types import OrbDevice, OrbMode, OrbPersona, OrbRole

_ID_COUNTER = itertools.count()
_ID_LOCK = threading.Lock()


def generate_constraint_id(prefix: str = "constraint") -> str:
    with _ID_LOCK:
        return f"{prefix}-{next(_ID_COUNTER)}"


def _build(
    prefix: str,
    rule: ConstraintRule,
    *,
    constraint_id: Optional[str] = None,
    severity: Severity | str = Severity.ERROR,
    active: bool = True,
    modes: Iterable[OrbMode] = (),
    personas: Iterable[OrbPersona] = (),
    devices: Iterable[OrbDevice] = (),
    roles: Iterable[OrbRole] = (),
    features: Iterable[str] = (),
    action_kinds: Iterable[ActionKind] = (),
    label: Optional[str] = None,
    description: Optional[str] = None,
    reason: Optional[str] = None,
    metadata: Optional[Mapping[str, Any]] = None,
) -> Constraint:
    return Constraint(
        id=constraint_id or generate_constraint_id(prefix),
        rule=rule,
        severity=normalize_severity(severity),
        active=active,
        modes=tuple(modes),
        personas=tuple(personas),
        devices=tuple(devices),
        roles=tuple(roles),
        features=tuple(features),
        action_kinds=tuple(action_kinds),
        label=label,
        description=description,
        reason=reason,
        metadata=dict(metadata or {}),
    )


def create_constraint_set(
    name: str,
    constraints: Iterable[Constraint],
    *,
    set_id: Optional[str] = None,
    label: Optional[str] = None,
    description: Optional[str] = None,
    scope: Optional[str] = None,
    tags: Iterable[str] = (),
    priority: int = 0,
    metadata: Optional[Mapping[str, Any]] = None,
) -> ConstraintSet:
    return ConstraintSet(
        id=set_id or generate_constraint_id("set"),
        constraints=tuple(constraints),
        name=name,
        label=label,
        description=description,
        scope=scope,
        tags=tuple(tags),
        priority=priority,
        metadata=dict(metadata or {}),
    )


def block_tool(tool_id: str, **options: Any) -> Constraint:
    options.setdefault("description", f"Block tool: {tool_id}")
    return _build("block-tool", BlockToolRule(tool_id=tool_id), **options)


def block_action(action_id: str, **options: Any) -> Constraint:
    options.setdefault("description", f"Block action: {action_id}")
    return _build("block-action", BlockActionRule(action_id=action_id), **options)


def max_risk(ceiling: RiskLevel | str, **options: Any) -> Constraint:
    level = RiskLevel(ceiling)
    options.setdefault("description", f"Maximum risk level: {level.value}")
    return _build("max-risk", MaxRiskRule(max_risk=level), **options)


def require_confirmation(description: str, **options: Any) -> Constraint:
    """Soft gate: in scope means confirmation is needed. ``severity="warning"`` makes it advisory only."""
    return _build("require-confirm", RequireConfirmationRule(), description=description, **options)


def restrict_mode_transition(allowed_modes: Iterable[OrbMode | str], **options: Any) -> Constraint:
    allowed = tuple(OrbMode(mode) for mode in allowed_modes)
    options.setdefault("description", f"Allowed modes: {', '.join(mode.value for mode in allowed)}")
    return _build("mode-transition", ModeTransitionRule(allowed_modes=allowed), **options)


def require_persona(required: OrbPersona | str, **options: Any) -> Constraint:
    persona = OrbPersona(required)
    options.setdefault("description", f"Required persona: {persona.value}")
    return _build("persona", PersonaRule(required_persona=persona), **options)


def restrict_to_devices(allowed_devices: Iterable[OrbDevice | str], **options: Any) -> Constraint:
    allowed = tuple(OrbDevice(device) for device in allowed_devices)
    options.setdefault("description", f"Allowed devices: {', '.join(device.value for device in allowed)}")
    return _build("device", DeviceRestrictionRule(allowed_devices=allowed), **options)


def restrict_to_hours(start_hour: int, end_hour: int, **options: Any) -> Constraint:
    if not 0 <= start_hour <= 23 or not 0 <= end_hour <= 24:
        raise ValueError(f"hours must fall within a day, received {start_hour}->{end_hour}")
    if start_hour == end_hour:
        raise ValueError(f"empty hour window {start_hour:02d}:00-{end_hour:02d}:00; use block_action to forbid outright")
    options.setdefault("description", f"Allowed hours: {start_hour:02d}:00-{end_hour:02d}:00")
    return _build("time", TimeRestrictionRule(start_hour=start_hour, end_hour=end_hour), **options)


def other_constraint(description: str, **options: Any) -> Constraint:
    options.setdefault("severity", Severity.WARNING)
    return _build("other", OtherRule(description=description), description=description, **options)


# tag -> (rule, severity, description, reason)
_TAG_TABLE: dict[str, tuple[ConstraintRule, Severity, str, Optional[str]]] = {
    "no-destructive-actions": (
        MaxRiskRule(max_risk=RiskLevel.MEDIUM),
        Severity.CRITICAL,
        "Prevent destructive actions",
        "Destructive actions are not allowed in this mode",
    ),
    "require-confirmation": (RequireConfirmationRule(), Severity.WARNING, "Actions require confirmation", None),
    "no-personal-notifications": (
        BlockActionRule(),
        Severity.WARNING,
        "Block personal notifications",
        "Personal notifications are muted in this mode",
    ),
    "fast-confirmations": (
        OtherRule(description="Use fast confirmation flows"),
        Severity.WARNING,
        "Use fast confirmation flows",
        "Optimize for speed in this mode",
    ),
    "no-work-alerts": (
        BlockActionRule(),
        Severity.WARNING,
        "Block work-related alerts",
        "Work alerts are muted in this mode",
    ),
    "limit-task-creation": (
        RequireConfirmationRule(),
        Severity.WARNING,
        "Require confirmation for task creation",
        "Task creation should be intentional in this mode",
    ),
    "suppress-non-research": (
        BlockActionRule(),
        Severity.WARNING,
        "Suppress non-research notifications",
        "Focus on research in this mode",
    ),
    "require-review": (
        RequireConfirmationRule(),
        Severity.WARNING,
        "Changes require review",
        "All changes must be reviewed before merging",
    ),
    "mute-personal": (
        BlockActionRule(),
        Severity.WARNING,
        "Mute personal notifications",
        "Personal notifications are muted during service",
    ),
    "require-deal-links": (
        RequireConfirmationRule(),
        Severity.WARNING,
        "Actions should link to deals",
        "Maintain traceability to deals/properties",
    ),
    "no-prod-writes": (
        BlockActionRule(),
        Severity.CRITICAL,
        "Block production writes",
        "Production writes are not allowed in builder mode",
    ),
}

KNOWN_CONSTRAINT_TAGS: tuple[str, ...] = tuple(_TAG_TABLE)


def parse_constraint_tag(tag: str, mode: Optional[OrbMode] = None) -> Constraint:
    """
    Translate a descriptor constraint tag into a concrete constraint scoped to ``mode``.

    Unknown tags are never dropped: they become an inert ``other`` constraint
    carrying the tag as description. Tag-derived ``block_action`` rules name no
    action and so never match one.
    """
    modes = (mode,) if mode is not None else ()
    entry = _TAG_TABLE.get(tag)
    if entry is None:
        return _build(tag, OtherRule(description=tag), severity=Severity.WARNING, modes=modes, description=tag)

    rule, severity, description, reason = entry
    return _build(
        tag,
        rule,
        severity=severity,
        modes=modes,
        description=description,
        reason=reason,
        metadata={"source_tag": tag, "mode": enum_value(mode)},
    )


__all__ = [
    "KNOWN_CONSTRAINT_TAGS",
    "block_action",
    "block_tool",
    "create_constraint_set",
    "generate_constraint_id",
    "max_risk",
    "other_constraint",
    "parse_constraint_tag",
    "require_confirmation",
    "require_persona",
    "restrict_mode_transition",
    "restrict_to_devices",
    "restrict_to_hours",
]
