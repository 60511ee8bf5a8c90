# SPDX-License-Identifier: Apache-2.0
"""Closed identity enumerations shared by every policy decision.

Devices are the endpoints a session runs on, personas the operating identity
of the user, modes the behavioural profile of the session and roles the agent
issuing an action. All enums are ``str``-valued so raw strings compare equal
to their members; strings outside the closed set match nothing.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)


class OrbDevice(str, Enum):
    SOL = "sol"      # primary studio machine
    LUNA = "luna"    # secondary / forge host
    MARS = "mars"    # operations terminal
    EARTH = "earth"  # mobile personal surface


class OrbPersona(str, Enum):
    PERSONAL = "personal"
    SWL = "swl"
    REAL_ESTATE = "real_estate"
    OPEN_PEOPLE = "open_people"


class OrbMode(str, Enum):
    SOL = "sol"
    MARS = "mars"
    EARTH = "earth"
    DEFAULT = "default"
    EXPLORER = "explorer"
    FORGE = "forge"
    RESTAURANT = "restaurant"
    REAL_ESTATE = "real_estate"
    BUILDER = "builder"


class OrbRole(str, Enum):
    ORB = "orb"      # orchestrator
    SOL = "sol"      # analyzer / inference engine
    TE = "te"        # reflector
    MAV = "mav"      # executor
    LUNA = "luna"    # adapter (preferences, intent, constraints)
    FORGE = "forge"  # coordinator


ROLE_ORDER: tuple[OrbRole, ...] = (
    OrbRole.ORB,
    OrbRole.SOL,
    OrbRole.TE,
    OrbRole.MAV,
    OrbRole.LUNA,
    OrbRole.FORGE,
)

_DEVICE_NAMES: dict[OrbDevice, str] = {
    OrbDevice.SOL: "Sol",
    OrbDevice.LUNA: "Luna",
    OrbDevice.MARS: "Mars",
    OrbDevice.EARTH: "Earth",
}

_PERSONA_NAMES: dict[OrbPersona, str] = {
    OrbPersona.PERSONAL: "Personal",
    OrbPersona.SWL: "SWL",
    OrbPersona.REAL_ESTATE: "Real Estate",
    OrbPersona.OPEN_PEOPLE: "Open People",
}

_MODE_NAMES: dict[OrbMode, str] = {
    OrbMode.DEFAULT: "Default",
    OrbMode.SOL: "Sol",
    OrbMode.MARS: "Mars",
    OrbMode.EARTH: "Earth",
    OrbMode.EXPLORER: "Explorer",
    OrbMode.FORGE: "Forge",
    OrbMode.RESTAURANT: "Restaurant",
    OrbMode.REAL_ESTATE: "Real Estate",
    OrbMode.BUILDER: "Builder",
}

_ROLE_NAMES: dict[OrbRole, str] = {
    OrbRole.ORB: "Orb",
    OrbRole.SOL: "Sol",
    OrbRole.TE: "Te",
    OrbRole.MAV: "Mav",
    OrbRole.LUNA: "Luna",
    OrbRole.FORGE: "Forge",
}

_ROLE_DESCRIPTIONS: dict[OrbRole, str] = {
    OrbRole.ORB: "System orchestrator and coordinator",
    OrbRole.SOL: "What the model runs on (engine/inference/brain)",
    OrbRole.TE: "What the model reflects on (memory/evaluation/self-critique)",
    OrbRole.MAV: "What the model accomplishes (actions/tools/execution)",
    OrbRole.LUNA: "What the user decides they want it to be (intent/preferences/constraints)",
    OrbRole.FORGE: "Multi-agent coordination and orchestration",
}


def coerce_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    """Return the ``enum_cls`` member for ``value`` or ``None`` when it is outside the closed set."""
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _display(table: dict[Any, str], value: Any) -> str:
    return table.get(value, str(getattr(value, "value", value)))


def get_device_display_name(device: OrbDevice | str) -> str:
    return _display(_DEVICE_NAMES, device)


def get_persona_display_name(persona: OrbPersona | str) -> str:
    return _display(_PERSONA_NAMES, persona)


def get_mode_display_name(mode: OrbMode | str) -> str:
    return _display(_MODE_NAMES, mode)


def get_role_display_name(role: OrbRole | str) -> str:
    return _display(_ROLE_NAMES, role)


def get_role_description(role: OrbRole | str) -> str:
    return _ROLE_DESCRIPTIONS.get(role, "")  # type: ignore[call-overload]


__all__ = [
    "ROLE_ORDER",
    "OrbDevice",
    "OrbMode",
    "OrbPersona",
    "OrbRole",
    "coerce_enum",
    "get_device_display_name",
    "get_mode_display_name",
    "get_persona_display_name",
    "get_role_description",
    "get_role_display_name",
]
