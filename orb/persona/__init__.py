# SPDX-License-Identifier: Apache-2.0
"""Persona classification."""

from orb.persona.classifier import PersonaClassifier
from orb.persona.rules import DEFAULT_PERSONA_RULES, select_matching_rules
from orb.persona.types import (
    PersonaAlternative,
    PersonaClassificationResult,
    PersonaContext,
    PersonaSignalRule,
    PersonaSource,
)

__all__ = [
    "DEFAULT_PERSONA_RULES",
    "PersonaAlternative",
    "PersonaClassificationResult",
    "PersonaClassifier",
    "PersonaContext",
    "PersonaSignalRule",
    "PersonaSource",
    "select_matching_rules",
]
