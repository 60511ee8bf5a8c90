# SPDX-License-Identifier: Apache-2.0
"""Rules-based persona classification with per-user overrides."""

from __future__ import annotations

import threading
from typing import Iterable, Optional

from orb.identity.context import ActionContext
from orb.identity.types import OrbPersona
from orb.persona.rules import DEFAULT_PERSONA_RULES, select_matching_rules
from orb.persona.types import (
    PersonaAlternative,
    PersonaClassificationResult,
    PersonaContext,
    PersonaSignalRule,
    PersonaSource,
)

DEFAULT_CONFIDENCE = 0.3
MAX_ALTERNATIVES = 3


class PersonaClassifier:
    """
    Owns the rule table and the user -> persona override map.

    Classification only reads the override map; writes go through the
    override methods and are serialized by a lock.
    """

    def __init__(self, rules: Optional[Iterable[PersonaSignalRule]] = None) -> None:
        self._rules: list[PersonaSignalRule] = list(DEFAULT_PERSONA_RULES if rules is None else rules)
        self._overrides: dict[str, OrbPersona] = {}
        self._lock = threading.Lock()

    @property
    def rules(self) -> tuple[PersonaSignalRule, ...]:
        return tuple(self._rules)

    def register_rule(self, rule: PersonaSignalRule) -> None:
        with self._lock:
            self._rules.append(rule)

    def set_override(self, user_id: str, persona: Optional[OrbPersona]) -> None:
        with self._lock:
            if persona is None:
                self._overrides.pop(user_id, None)
            else:
                self._overrides[user_id] = persona

    def get_override(self, user_id: str) -> Optional[OrbPersona]:
        with self._lock:
            return self._overrides.get(user_id)

    def clear_override(self, user_id: str) -> None:
        self.set_override(user_id, None)

    def classify(self, context: PersonaContext | ActionContext) -> PersonaClassificationResult:
        if isinstance(context, ActionContext):
            context = PersonaContext.from_action_context(context)

        override = self.get_override(context.user_id)
        if override is not None:
            return PersonaClassificationResult(
                persona=override,
                confidence=1.0,
                source=PersonaSource.OVERRIDE,
                reasoning=["User override is active for this persona"],
            )

        if context.explicit_persona is not None:
            return PersonaClassificationResult(
                persona=context.explicit_persona,
                confidence=1.0,
                source=PersonaSource.EXPLICIT,
                reasoning=["User explicitly selected this persona"],
            )

        with self._lock:
            rules = list(self._rules)
        matched = select_matching_rules(rules, context)
        if not matched:
            return PersonaClassificationResult(
                persona=OrbPersona.PERSONAL,
                confidence=DEFAULT_CONFIDENCE,
                source=PersonaSource.DEFAULT,
                reasoning=["No specific signals detected, defaulting to Personal persona"],
            )

        top = matched[0]
        alternatives = [
            PersonaAlternative(persona=rule.persona, confidence=rule.confidence)
            for rule in matched[1 : 1 + MAX_ALTERNATIVES]
        ]
        return PersonaClassificationResult(
            persona=top.persona,
            confidence=top.confidence,
            source=top.source,
            reasoning=[top.reasoning] if top.reasoning else [],
            alternatives=alternatives or None,
        )

    def recommended_persona(self, context: PersonaContext | ActionContext) -> OrbPersona:
        return self.classify(context).persona


__all__ = ["DEFAULT_CONFIDENCE", "MAX_ALTERNATIVES", "PersonaClassifier"]
