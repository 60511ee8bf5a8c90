# SPDX-License-Identifier: Apache-2.0
"""Identity model: devices, personas, modes, roles and the action context."""

from orb.identity.context import ActionContext, enum_value
from orb.identity.descriptors import (
    ORB_DEVICE_PROFILES,
    ORB_MODE_DESCRIPTORS,
    ORB_PERSONA_PROFILES,
    DeviceProfile,
    ModeDescriptor,
    PersonaProfile,
    get_device_profile,
    get_mode_descriptor,
    get_persona_profile,
)
from orb.identity.types import (
    ROLE_ORDER,
    OrbDevice,
    OrbMode,
    OrbPersona,
    OrbRole,
    coerce_enum,
    get_device_display_name,
    get_mode_display_name,
    get_persona_display_name,
    get_role_description,
    get_role_display_name,
)

__all__ = [
    "ActionContext",
    "DeviceProfile",
    "ModeDescriptor",
    "ORB_DEVICE_PROFILES",
    "ORB_MODE_DESCRIPTORS",
    "ORB_PERSONA_PROFILES",
    "OrbDevice",
    "OrbMode",
    "OrbPersona",
    "OrbRole",
    "PersonaProfile",
    "ROLE_ORDER",
    "coerce_enum",
    "enum_value",
    "get_device_display_name",
    "get_device_profile",
    "get_mode_descriptor",
    "get_mode_display_name",
    "get_persona_display_name",
    "get_persona_profile",
    "get_role_description",
    "get_role_display_name",
]
