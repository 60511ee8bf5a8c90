# SPDX-License-Identifier: Apache-2.0
"""Static mode, persona and device descriptors.

Descriptors are loaded once at import time and never mutated. Mode
descriptors feed two consumers: the transition validator (device/persona
affinity warnings) and the constraint store (default constraint tags).
"""

from __future__ import annotations

from dataclasses import dataclass

from orb.identity.types import OrbDevice, OrbMode, OrbPersona


@dataclass(frozen=True)
class ModeDescriptor:
    id: OrbMode
    label: str
    intent: str
    description: str
    default_devices: tuple[OrbDevice, ...]
    default_personas: tuple[OrbPersona, ...]
    default_preferences: tuple[str, ...] = ()
    default_constraints: tuple[str, ...] = ()


@dataclass(frozen=True)
class PersonaProfile:
    id: OrbPersona
    label: str
    intent: str
    preferred_modes: tuple[OrbMode, ...]


@dataclass(frozen=True)
class DeviceProfile:
    id: OrbDevice
    label: str
    description: str
    default_mode: OrbMode
    supported_modes: tuple[OrbMode, ...]


ORB_MODE_DESCRIPTORS: dict[OrbMode, ModeDescriptor] = {
    OrbMode.SOL: ModeDescriptor(
        id=OrbMode.SOL,
        label="Sol · Exploration",
        intent="Deep exploration, design work, and system building.",
        description="Distraction-free creative flow optimized for architecture and prototyping.",
        default_devices=(OrbDevice.SOL, OrbDevice.LUNA),
        default_personas=(OrbPersona.PERSONAL, OrbPersona.OPEN_PEOPLE),
        default_preferences=("clarity-first", "deep-focus", "command-palette"),
        default_constraints=("no-destructive-actions", "require-confirmation"),
    ),
    OrbMode.MARS: ModeDescriptor(
        id=OrbMode.MARS,
        label="Mars · Operations",
        intent="Restaurant operations and time-sensitive coordination.",
        description="Urgent task execution with prioritized contacts and financial visibility.",
        default_devices=(OrbDevice.MARS,),
        default_personas=(OrbPersona.SWL,),
        default_preferences=("task-speed", "notification-priority", "finance-visibility"),
        default_constraints=("no-personal-notifications", "fast-confirmations"),
    ),
    OrbMode.EARTH: ModeDescriptor(
        id=OrbMode.EARTH,
        label="Earth · Personal",
        intent="Personal life, relationships, reflection, and rest.",
        description="Calm surfaces emphasizing contacts, reflection, and health.",
        default_devices=(OrbDevice.EARTH,),
        default_personas=(OrbPersona.OPEN_PEOPLE, OrbPersona.PERSONAL),
        default_preferences=("calm-ui", "relationship-focus", "reflection-prompts"),
        default_constraints=("no-work-alerts", "limit-task-creation"),
    ),
    OrbMode.DEFAULT: ModeDescriptor(
        id=OrbMode.DEFAULT,
        label="Default · Auto",
        intent="Baseline context before personalization kicks in.",
        description="Balanced mode used before a better match is detected.",
        default_devices=(OrbDevice.SOL, OrbDevice.LUNA, OrbDevice.EARTH),
        default_personas=(OrbPersona.PERSONAL, OrbPersona.SWL, OrbPersona.REAL_ESTATE, OrbPersona.OPEN_PEOPLE),
        default_preferences=("balanced-ui",),
    ),
    OrbMode.EXPLORER: ModeDescriptor(
        id=OrbMode.EXPLORER,
        label="Explorer",
        intent="Curiosity-driven research sessions.",
        description="Emphasizes discovery tools, search, and quick capture.",
        default_devices=(OrbDevice.SOL, OrbDevice.EARTH),
        default_personas=(OrbPersona.OPEN_PEOPLE,),
        default_preferences=("graph-visibility", "instant-search"),
        default_constraints=("suppress-non-research",),
    ),
    OrbMode.FORGE: ModeDescriptor(
        id=OrbMode.FORGE,
        label="Forge",
        intent="Multi-agent building sessions and automation.",
        description="Highlights task tickets, diffs, and agent coordination.",
        default_devices=(OrbDevice.LUNA,),
        default_personas=(OrbPersona.PERSONAL,),
        default_preferences=("code-quality", "guard-rails"),
        default_constraints=("require-review",),
    ),
    OrbMode.RESTAURANT: ModeDescriptor(
        id=OrbMode.RESTAURANT,
        label="Restaurant Focus",
        intent="Task view specialized for service operations.",
        description="Shortcut view layered on top of Mars mode for service-specific tooling.",
        default_devices=(OrbDevice.MARS,),
        default_personas=(OrbPersona.SWL,),
        default_preferences=("staff-priority", "fast-task-switch"),
        default_constraints=("mute-personal",),
    ),
    OrbMode.REAL_ESTATE: ModeDescriptor(
        id=OrbMode.REAL_ESTATE,
        label="Real Estate",
        intent="Deal + relationship tracking for transactions.",
        description="Puts pipeline, documents, and contact graphs front-and-center.",
        default_devices=(OrbDevice.MARS, OrbDevice.EARTH),
        default_personas=(OrbPersona.REAL_ESTATE,),
        default_preferences=("pipeline-clarity", "document-tracking"),
        default_constraints=("require-deal-links",),
    ),
    OrbMode.BUILDER: ModeDescriptor(
        id=OrbMode.BUILDER,
        label="Builder",
        intent="Heads-down implementation with strong guard rails.",
        description="Focuses on implementation details, tests, and execution safety.",
        default_devices=(OrbDevice.SOL, OrbDevice.LUNA),
        default_personas=(OrbPersona.PERSONAL,),
        default_preferences=("test-first", "code-review"),
        default_constraints=("no-prod-writes",),
    ),
}

ORB_PERSONA_PROFILES: dict[OrbPersona, PersonaProfile] = {
    OrbPersona.PERSONAL: PersonaProfile(
        id=OrbPersona.PERSONAL,
        label="Architect / Designer",
        intent="Design and architect complex systems with clarity.",
        preferred_modes=(OrbMode.SOL, OrbMode.EXPLORER, OrbMode.FORGE),
    ),
    OrbPersona.SWL: PersonaProfile(
        id=OrbPersona.SWL,
        label="Restaurateur / Operator",
        intent="Coordinate high-tempo operations with zero friction.",
        preferred_modes=(OrbMode.MARS, OrbMode.RESTAURANT),
    ),
    OrbPersona.REAL_ESTATE: PersonaProfile(
        id=OrbPersona.REAL_ESTATE,
        label="Real Estate Operator",
        intent="Manage listings, clients, and multi-step pipelines.",
        preferred_modes=(OrbMode.REAL_ESTATE, OrbMode.MARS, OrbMode.EARTH),
    ),
    OrbPersona.OPEN_PEOPLE: PersonaProfile(
        id=OrbPersona.OPEN_PEOPLE,
        label="Researcher / Writer",
        intent="Gather, synthesize, and reflect on information calmly.",
        preferred_modes=(OrbMode.EARTH, OrbMode.SOL, OrbMode.DEFAULT),
    ),
}

ORB_DEVICE_PROFILES: dict[OrbDevice, DeviceProfile] = {
    OrbDevice.SOL: DeviceProfile(
        id=OrbDevice.SOL,
        label="Sol · Primary Studio",
        description="Primary architect/developer machine focused on exploration, design, and system building.",
        default_mode=OrbMode.SOL,
        supported_modes=(OrbMode.SOL, OrbMode.EXPLORER, OrbMode.FORGE, OrbMode.DEFAULT),
    ),
    OrbDevice.LUNA: DeviceProfile(
        id=OrbDevice.LUNA,
        label="Luna · Secondary/Forge Host",
        description="Secondary machine optimized for Forge sessions, infra jobs, and orchestration.",
        default_mode=OrbMode.FORGE,
        supported_modes=(OrbMode.FORGE, OrbMode.DEFAULT, OrbMode.SOL),
    ),
    OrbDevice.MARS: DeviceProfile(
        id=OrbDevice.MARS,
        label="Mars · Operations Terminal",
        description="Remote/server instance tuned for restaurant operations, time-sensitive coordination, and data sync.",
        default_mode=OrbMode.MARS,
        supported_modes=(OrbMode.MARS, OrbMode.RESTAURANT, OrbMode.REAL_ESTATE),
    ),
    OrbDevice.EARTH: DeviceProfile(
        id=OrbDevice.EARTH,
        label="Earth · Personal Surface",
        description="Mobile/portable surface focused on personal relationships, reflection, and calm contexts.",
        default_mode=OrbMode.EARTH,
        supported_modes=(OrbMode.EARTH, OrbMode.DEFAULT, OrbMode.REAL_ESTATE),
    ),
}


def get_mode_descriptor(mode: OrbMode | str) -> ModeDescriptor | None:
    return ORB_MODE_DESCRIPTORS.get(mode)  # type: ignore[call-overload]


def get_persona_profile(persona: OrbPersona | str) -> PersonaProfile | None:
    return ORB_PERSONA_PROFILES.get(persona)  # type: ignore[call-overload]


def get_device_profile(device: OrbDevice | str) -> DeviceProfile | None:
    return ORB_DEVICE_PROFILES.get(device)  # type: ignore[call-overload]


__all__ = [
    "ORB_DEVICE_PROFILES",
    "ORB_MODE_DESCRIPTORS",
    "ORB_PERSONA_PROFILES",
    "DeviceProfile",
    "ModeDescriptor",
    "PersonaProfile",
    "get_device_profile",
    "get_mode_descriptor",
    "get_persona_profile",
]
