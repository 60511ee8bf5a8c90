# SPDX-License-Identifier: Apache-2.0
"""Plain-dict (JSON) shape for constraints and constraint sets.

Field names mirror the in-memory model. Constraint entries are hand-authored
data, so a malformed entry degrades to an ``other`` constraint that never
triggers instead of failing the whole set. Only an uninterpretable set
envelope raises :class:`~orb.errors.ConstraintDataError`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Type

from orb.constraints.types import (
    ActionKind,
    BlockActionRule,
    BlockToolRule,
    Constraint,
    ConstraintRule,
    ConstraintSet,
    ConstraintType,
    DeviceRestrictionRule,
    MaxRiskRule,
    ModeTransitionRule,
    OtherRule,
    PersonaRule,
    RequireConfirmationRule,
    RiskLevel,
    TimeRestrictionRule,
    normalize_severity,
)
from orb.errors import ConstraintDataError
from orb.identity.context import enum_value
from orb.identity.types import OrbDevice, OrbMode, OrbPersona, OrbRole, coerce_enum

_LOGGER = logging.getLogger("orb.constraints.serialization")

_SCOPE_FIELDS: tuple[tuple[str, Optional[type]], ...] = (
    ("modes", OrbMode),
    ("personas", OrbPersona),
    ("devices", OrbDevice),
    ("roles", OrbRole),
    ("features", None),
    ("action_kinds", ActionKind),
)


class _MalformedConstraint(ValueError):
    pass


def _values(items: Iterable[Any]) -> list[Any]:
    return [enum_value(item) for item in items]


def _rule_to_dict(rule: ConstraintRule) -> dict[str, Any]:
    if isinstance(rule, BlockActionRule):
        return {"action_id": rule.action_id}
    if isinstance(rule, BlockToolRule):
        return {"tool_id": rule.tool_id}
    if isinstance(rule, MaxRiskRule):
        return {"max_risk": enum_value(rule.max_risk)}
    if isinstance(rule, ModeTransitionRule):
        return {"allowed_modes": _values(rule.allowed_modes)}
    if isinstance(rule, PersonaRule):
        return {"required_persona": enum_value(rule.required_persona)}
    if isinstance(rule, DeviceRestrictionRule):
        return {"allowed_devices": _values(rule.allowed_devices)}
    if isinstance(rule, TimeRestrictionRule):
        return {"start_hour": rule.start_hour, "end_hour": rule.end_hour}
    if isinstance(rule, OtherRule):
        return {"rule_description": rule.description}
    return {}


def constraint_to_dict(constraint: Constraint) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": constraint.id,
        "type": enum_value(constraint.type),
        "active": constraint.active,
        "severity": enum_value(constraint.severity),
    }
    for name, _ in _SCOPE_FIELDS:
        payload[name] = _values(getattr(constraint, name))
    payload.update(_rule_to_dict(constraint.rule))
    payload["label"] = constraint.label
    payload["description"] = constraint.description
    payload["reason"] = constraint.reason
    payload["metadata"] = dict(constraint.metadata)
    return payload


def constraint_set_to_dict(constraint_set: ConstraintSet) -> dict[str, Any]:
    return {
        "id": constraint_set.id,
        "name": constraint_set.name,
        "label": constraint_set.label,
        "description": constraint_set.description,
        "scope": constraint_set.scope,
        "tags": list(constraint_set.tags),
        "priority": constraint_set.priority,
        "metadata": dict(constraint_set.metadata),
        "constraints": [constraint_to_dict(constraint) for constraint in constraint_set.constraints],
    }


def _optional_str(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise _MalformedConstraint(f"{field_name} must be a string")
    return value


def _enum_list(value: Any, enum_cls: Optional[type], field_name: str) -> tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise _MalformedConstraint(f"{field_name} must be a list")
    items: list[Any] = []
    for item in value:
        if not isinstance(item, str):
            raise _MalformedConstraint(f"{field_name} entries must be strings")
        # Unknown values are kept verbatim so the scope still matches nothing.
        member = coerce_enum(enum_cls, item) if enum_cls is not None else None
        items.append(member if member is not None else item)
    return tuple(items)


def _required_enum(value: Any, enum_cls: Type[Any], field_name: str) -> Any:
    member = coerce_enum(enum_cls, value)
    if member is None:
        raise _MalformedConstraint(f"{field_name} has unknown value {value!r}")
    return member


def _hour(value: Any, field_name: str, upper: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= upper:
        raise _MalformedConstraint(f"{field_name} must be an integer in [0, {upper}]")
    return value


def _parse_rule(kind: ConstraintType, data: dict[str, Any]) -> ConstraintRule:
    if kind is ConstraintType.BLOCK_ACTION:
        return BlockActionRule(action_id=_optional_str(data.get("action_id"), "action_id"))
    if kind is ConstraintType.BLOCK_TOOL:
        return BlockToolRule(tool_id=_optional_str(data.get("tool_id"), "tool_id"))
    if kind is ConstraintType.MAX_RISK:
        return MaxRiskRule(max_risk=_required_enum(data.get("max_risk"), RiskLevel, "max_risk"))
    if kind is ConstraintType.REQUIRE_CONFIRMATION:
        return RequireConfirmationRule()
    if kind is ConstraintType.MODE_TRANSITION:
        return ModeTransitionRule(allowed_modes=_enum_list(data.get("allowed_modes"), OrbMode, "allowed_modes"))
    if kind is ConstraintType.PERSONA_MISMATCH:
        return PersonaRule(required_persona=_required_enum(data.get("required_persona"), OrbPersona, "required_persona"))
    if kind is ConstraintType.DEVICE_RESTRICTION:
        return DeviceRestrictionRule(allowed_devices=_enum_list(data.get("allowed_devices"), OrbDevice, "allowed_devices"))
    if kind is ConstraintType.TIME_RESTRICTION:
        start = _hour(data.get("start_hour", 0), "start_hour", 23)
        end = _hour(data.get("end_hour", 24), "end_hour", 24)
        if start == end:
            raise _MalformedConstraint("start_hour and end_hour describe an empty window")
        return TimeRestrictionRule(start_hour=start, end_hour=end)
    description = data.get("rule_description")
    if not isinstance(description, str):
        description = data.get("description") if isinstance(data.get("description"), str) else ""
    return OtherRule(description=description)


def constraint_from_dict(data: Any) -> Constraint:
    """Build a :class:`Constraint`; malformed entries come back as inert ``other`` constraints."""
    if not isinstance(data, dict):
        _LOGGER.warning("constraint entry is not an object; degrading to other", extra={"entry": repr(data)})
        return Constraint(id="unknown", rule=OtherRule(description=repr(data)), severity=normalize_severity(None))

    constraint_id = data.get("id") if isinstance(data.get("id"), str) and data.get("id") else "unknown"
    raw_type = data.get("type")
    kind = coerce_enum(ConstraintType, raw_type)
    description = data.get("description") if isinstance(data.get("description"), str) else None

    try:
        scopes = {name: _enum_list(data.get(name), enum_cls, name) for name, enum_cls in _SCOPE_FIELDS}
        if kind is None:
            _LOGGER.warning(
                "unknown constraint type; degrading to other",
                extra={"constraint_id": constraint_id, "type": repr(raw_type)},
            )
            rule: ConstraintRule = OtherRule(description=description or str(raw_type))
        else:
            rule = _parse_rule(kind, data)
        label = _optional_str(data.get("label"), "label")
        reason = _optional_str(data.get("reason"), "reason")
    except _MalformedConstraint as exc:
        _LOGGER.warning(
            "malformed constraint; degrading to other",
            extra={"constraint_id": constraint_id, "error": str(exc)},
        )
        return Constraint(
            id=constraint_id,
            rule=OtherRule(description=description or str(exc)),
            severity=normalize_severity(data.get("severity")),
            description=description,
        )

    active = data.get("active", True)
    if not isinstance(active, bool):
        _LOGGER.warning(
            "non-boolean active flag; treating constraint as active",
            extra={"constraint_id": constraint_id, "active": repr(active)},
        )
        active = True
    metadata = data.get("metadata")
    return Constraint(
        id=constraint_id,
        rule=rule,
        severity=normalize_severity(data.get("severity")),
        active=active,
        label=label,
        description=description,
        reason=reason,
        metadata=dict(metadata) if isinstance(metadata, dict) else {},
        **scopes,
    )


def constraint_set_from_dict(data: Any) -> ConstraintSet:
    if not isinstance(data, dict):
        raise ConstraintDataError("constraint set must be an object")
    set_id = data.get("id")
    if not isinstance(set_id, str) or not set_id.strip():
        raise ConstraintDataError("constraint set id must be a non-empty string")
    constraints = data.get("constraints", [])
    if not isinstance(constraints, list):
        raise ConstraintDataError(f"constraint set {set_id!r}: constraints must be a list")
    priority = data.get("priority", 0)
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ConstraintDataError(f"constraint set {set_id!r}: priority must be an integer")

    tags = data.get("tags") or []
    metadata = data.get("metadata")
    return ConstraintSet(
        id=set_id,
        constraints=tuple(constraint_from_dict(entry) for entry in constraints),
        name=data.get("name") if isinstance(data.get("name"), str) else None,
        label=data.get("label") if isinstance(data.get("label"), str) else None,
        description=data.get("description") if isinstance(data.get("description"), str) else None,
        scope=data.get("scope") if isinstance(data.get("scope"), str) else None,
        tags=tuple(str(tag) for tag in tags) if isinstance(tags, list) else (),
        priority=priority,
        metadata=dict(metadata) if isinstance(metadata, dict) else {},
    )


__all__ = [
    "constraint_from_dict",
    "constraint_set_from_dict",
    "constraint_set_to_dict",
    "constraint_to_dict",
]
