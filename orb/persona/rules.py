# SPDX-License-Identifier: Apache-2.0
"""Declarative persona rule table and the generic matcher.

Within a priority tier the first declared rule wins, so rows are listed with
the most specific signal first.
"""

from __future__ import annotations

import logging
from typing import Iterable

from orb.foundation.clock import hour_of
from orb.identity.types import OrbDevice, OrbMode, OrbPersona
from orb.persona.types import PersonaContext, PersonaSignalRule, PersonaSource

_LOGGER = logging.getLogger("orb.persona.rules")


def _feature_in(*features: str):
    return lambda ctx: ctx.feature is not None and ctx.feature in features


def _mode_is(mode: OrbMode):
    return lambda ctx: ctx.mode is not None and ctx.mode == mode


def _device_in(*devices: OrbDevice):
    return lambda ctx: ctx.device is not None and any(ctx.device == device for device in devices)


def _activity_mentions(*needles: str):
    return lambda ctx: any(needle in item for item in ctx.recent_activity for needle in needles)


def _is_evening(ctx: PersonaContext) -> bool:
    hour = hour_of(ctx.time_of_day)
    return hour is not None and (hour >= 18 or hour < 6)


def _is_service_hours(ctx: PersonaContext) -> bool:
    hour = hour_of(ctx.time_of_day)
    return hour is not None and (11 <= hour <= 14 or 17 <= hour <= 21)


DEFAULT_PERSONA_RULES: tuple[PersonaSignalRule, ...] = (
    PersonaSignalRule(
        "feature-swl", 100, PersonaSource.FEATURE, OrbPersona.SWL, 0.95,
        "Feature context indicates restaurant/SWL operations", _feature_in("SWL", "restaurant"),
    ),
    PersonaSignalRule(
        "feature-real-estate", 100, PersonaSource.FEATURE, OrbPersona.REAL_ESTATE, 0.95,
        "Feature context indicates real estate operations", _feature_in("RealEstate", "deals"),
    ),
    PersonaSignalRule(
        "mode-restaurant", 90, PersonaSource.MODE, OrbPersona.SWL, 0.9,
        "Restaurant mode indicates SWL operations", _mode_is(OrbMode.RESTAURANT),
    ),
    PersonaSignalRule(
        "mode-mars", 80, PersonaSource.MODE, OrbPersona.SWL, 0.85,
        "Mars mode typically used for operational work (SWL)", _mode_is(OrbMode.MARS),
    ),
    PersonaSignalRule(
        "mode-real-estate", 90, PersonaSource.MODE, OrbPersona.REAL_ESTATE, 0.9,
        "Real Estate mode indicates real estate operations", _mode_is(OrbMode.REAL_ESTATE),
    ),
    PersonaSignalRule(
        "mode-explorer", 80, PersonaSource.MODE, OrbPersona.OPEN_PEOPLE, 0.85,
        "Explorer mode indicates research/knowledge work", _mode_is(OrbMode.EXPLORER),
    ),
    PersonaSignalRule(
        "mode-earth", 70, PersonaSource.MODE, OrbPersona.PERSONAL, 0.8,
        "Earth mode indicates personal/life context", _mode_is(OrbMode.EARTH),
    ),
    PersonaSignalRule(
        "device-mars", 60, PersonaSource.DEVICE, OrbPersona.SWL, 0.75,
        "Mars device typically used for restaurant operations", _device_in(OrbDevice.MARS),
    ),
    PersonaSignalRule(
        "device-earth", 60, PersonaSource.DEVICE, OrbPersona.PERSONAL, 0.7,
        "Earth device typically used for personal context", _device_in(OrbDevice.EARTH),
    ),
    PersonaSignalRule(
        "device-sol", 50, PersonaSource.DEVICE, OrbPersona.PERSONAL, 0.65,
        "Sol/Luna devices typically used for design/development work", _device_in(OrbDevice.SOL, OrbDevice.LUNA),
    ),
    PersonaSignalRule(
        "time-evening", 30, PersonaSource.TIME, OrbPersona.PERSONAL, 0.5,
        "Evening/night time suggests personal context", _is_evening,
    ),
    PersonaSignalRule(
        "time-service-hours", 30, PersonaSource.TIME, OrbPersona.SWL, 0.45,
        "Service hours suggest potential restaurant operations", _is_service_hours,
    ),
    PersonaSignalRule(
        "activity-contacts", 40, PersonaSource.ACTIVITY, OrbPersona.OPEN_PEOPLE, 0.6,
        "Recent contact/messaging activity suggests relationship-focused work",
        _activity_mentions("contact", "message", "calendar"),
    ),
    PersonaSignalRule(
        "activity-tasks", 40, PersonaSource.ACTIVITY, OrbPersona.SWL, 0.55,
        "Task-focused activity suggests operational work",
        _activity_mentions("task", "todo", "checklist"),
    ),
)


def select_matching_rules(rules: Iterable[PersonaSignalRule], context: PersonaContext) -> list[PersonaSignalRule]:
    """Matching rules, highest priority first, ties kept in declaration order."""
    matched: list[PersonaSignalRule] = []
    for rule in rules:
        try:
            if rule.predicate(context):
                matched.append(rule)
        except Exception as exc:
            _LOGGER.warning("persona rule failed; treating as no match", extra={"rule_id": rule.id, "error": repr(exc)})
    return sorted(matched, key=lambda rule: rule.priority, reverse=True)


__all__ = ["DEFAULT_PERSONA_RULES", "select_matching_rules"]
