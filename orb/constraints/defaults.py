# SPDX-License-Identifier: Apache-2.0
"""Built-in constraint sets.

Two families ship with the policy layer: one ``default-<mode>`` set per mode
descriptor that carries constraint tags, and a handful of hand-registered
guard-rail sets (system safety, restaurant and real-estate ops, persona
defaults).
"""

from __future__ import annotations

from orb.constraints.builder import (
    create_constraint_set,
    max_risk,
    parse_constraint_tag,
    require_confirmation,
    require_persona,
    restrict_to_devices,
)
from orb.constraints.types import ActionKind, ConstraintSet, RiskLevel, Severity
from orb.identity.descriptors import ORB_MODE_DESCRIPTORS
from orb.identity.types import OrbDevice, OrbMode, OrbPersona

DEFAULT_MODE_SET_PRIORITY = 50


def load_default_constraint_sets() -> list[ConstraintSet]:
    """One set per mode descriptor with constraint tags, in descriptor order."""
    sets: list[ConstraintSet] = []
    for mode, descriptor in ORB_MODE_DESCRIPTORS.items():
        if not descriptor.default_constraints:
            continue
        sets.append(
            create_constraint_set(
                f"{mode.value}-defaults",
                [parse_constraint_tag(tag, mode) for tag in descriptor.default_constraints],
                set_id=f"default-{mode.value}",
                description=f"Default constraints for {mode.value} mode",
                scope="mode",
                tags=descriptor.default_constraints,
                priority=DEFAULT_MODE_SET_PRIORITY,
            )
        )
    return sets


def _system_safety() -> ConstraintSet:
    guarded_modes = [mode for mode in OrbMode if mode not in (OrbMode.FORGE, OrbMode.BUILDER)]
    return create_constraint_set(
        "system-safety",
        [
            max_risk(
                RiskLevel.MEDIUM,
                constraint_id="require-forge-for-high-risk",
                severity=Severity.CRITICAL,
                modes=guarded_modes,
                action_kinds=(ActionKind.FILE_WRITE, ActionKind.TOOL_CALL),
                label="High-Risk Actions Require Forge/Builder",
                description="High-risk file or tool actions may only run while Forge or Builder mode is active.",
                reason="High-risk actions are limited to Forge or Builder mode.",
            ),
            require_confirmation(
                "Surface a warning when editing files while Personal/Earth context is active.",
                constraint_id="warn-personal-file-writes",
                severity=Severity.WARNING,
                modes=(OrbMode.EARTH, OrbMode.DEFAULT),
                action_kinds=(ActionKind.FILE_WRITE,),
                label="Warn on File Writes in Personal Modes",
                reason="File writes in personal contexts require extra attention. Consider switching to Forge mode.",
            ),
        ],
        set_id="system.safety",
        label="System Guard Rails",
        description="Baseline guard rails that keep cross-role actions safe.",
        scope="system",
        tags=("safety", "defaults"),
        priority=10,
    )


def _restaurant_ops() -> ConstraintSet:
    return create_constraint_set(
        "restaurant-ops",
        [
            require_persona(
                OrbPersona.SWL,
                constraint_id="restaurant-persona-required",
                severity=Severity.CRITICAL,
                modes=(OrbMode.RESTAURANT, OrbMode.MARS),
                action_kinds=(ActionKind.MODE_CHANGE,),
                label="Restaurant persona required",
                reason="Restaurant/Mars mode is only available when the SWL persona is active.",
            ),
            restrict_to_devices(
                (OrbDevice.MARS,),
                constraint_id="restaurant-device-check",
                severity=Severity.WARNING,
                modes=(OrbMode.RESTAURANT,),
                action_kinds=(ActionKind.MODE_CHANGE,),
                label="Restaurant device alignment",
                reason="Restaurant mode expects the Mars device. Confirm context before switching.",
            ),
        ],
        set_id="mode.restaurant",
        label="Restaurant Ops",
        description="Constraints tied to the restaurant/mars modes.",
        scope="mode",
    )


def _real_estate_ops() -> ConstraintSet:
    return create_constraint_set(
        "real-estate-ops",
        [
            restrict_to_devices(
                (OrbDevice.MARS, OrbDevice.EARTH),
                constraint_id="real-estate-device-check",
                severity=Severity.ERROR,
                modes=(OrbMode.REAL_ESTATE,),
                action_kinds=(ActionKind.MODE_CHANGE,),
                label="Device scoped for Real Estate mode",
                description="Real Estate mode is optimized for Mars or Earth devices.",
                reason="Real Estate mode requires the Mars or Earth device profile.",
            ),
        ],
        set_id="mode.real_estate",
        label="Real Estate Ops",
        scope="mode",
    )


def _persona_defaults() -> ConstraintSet:
    return create_constraint_set(
        "persona-defaults",
        [
            max_risk(
                RiskLevel.MEDIUM,
                constraint_id="open-people-low-risk",
                severity=Severity.WARNING,
                personas=(OrbPersona.OPEN_PEOPLE,),
                action_kinds=(ActionKind.FILE_WRITE, ActionKind.TOOL_CALL),
                label="Open People discourages high-risk actions",
                reason="Open People persona prefers calm contexts; defer high-risk actions.",
            ),
        ],
        set_id="persona.defaults",
        label="Persona Defaults",
        scope="persona",
    )


def get_default_constraint_sets() -> list[ConstraintSet]:
    """Hand-registered guard-rail sets."""
    return [_system_safety(), _restaurant_ops(), _real_estate_ops(), _persona_defaults()]


__all__ = [
    "DEFAULT_MODE_SET_PRIORITY",
    "get_default_constraint_sets",
    "load_default_constraint_sets",
]
