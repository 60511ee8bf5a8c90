# SPDX-License-Identifier: Apache-2.0
"""Policy session: the constructed owner of the classifier, the store and decision auditing."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from orb.constraints.evaluator import evaluate_action, get_relevant_constraint_sets
from orb.constraints.mode_transitions import validate_mode_transition
from orb.config import load_config
from orb.constraints.store import ConstraintStore
from orb.constraints.types import (
    ActionDescriptor,
    ConstraintEvaluationResult,
    ConstraintSet,
    ModeTransitionRequest,
    ModeTransitionResult,
)
from orb.errors import ConstraintStoreError
from orb.events import (
    EVENT_TYPE_LUNA_DECISION,
    EVENT_TYPE_MODE_CHANGE,
    DecisionEvent,
    EventSink,
    decision_event_type,
)
from orb.foundation import utc_now_iso
from orb.identity.context import ActionContext, enum_value
from orb.identity.types import OrbMode
from orb.interfaces.ilogger import ILogger
from orb.logger import get_logger
from orb.persona.classifier import PersonaClassifier
from orb.state.constraint_store import build_constraint_store


class PolicySession:
    """
    Explicit replacement for process-wide singletons.

    Each session owns its persona override table (through the classifier) and
    its constraint store; without an explicit store the ``ORB_*`` configuration
    picks the backend. Constraint retrieval failures propagate to the
    caller so that no decision is made on partial rules.
    """

    def __init__(
        self,
        store: Optional[ConstraintStore] = None,
        classifier: Optional[PersonaClassifier] = None,
        event_sink: Optional[EventSink] = None,
        logger: Optional[ILogger] = None,
    ) -> None:
        self.store: ConstraintStore = store if store is not None else build_constraint_store(load_config())
        self.classifier = classifier if classifier is not None else PersonaClassifier()
        self._event_sink = event_sink
        self._logger = logger if logger is not None else get_logger("policy")

    # --- persona ---------------------------------------------------------------

    def resolve_persona(self, context: ActionContext) -> ActionContext:
        """Return ``context`` carrying the persona the classifier settles on (overrides win)."""
        result = self.classifier.classify(context)
        if context.persona == result.persona:
            return context
        self._logger.debug(
            "persona resolved",
            user_id=context.user_id,
            persona=enum_value(result.persona),
            source=enum_value(result.source),
            confidence=result.confidence,
        )
        return context.with_persona(result.persona)

    # --- decisions -------------------------------------------------------------

    def _constraint_sets(self, context: ActionContext) -> list[ConstraintSet]:
        try:
            return get_relevant_constraint_sets(self.store, context)
        except ConstraintStoreError as exc:
            self._logger.error("constraint lookup failed", error=exc, user_id=context.user_id, session_id=context.session_id)
            raise

    def evaluate_action(self, action: ActionDescriptor, context: ActionContext) -> ConstraintEvaluationResult:
        context = self.resolve_persona(context)
        result = evaluate_action(action, context, self._constraint_sets(context))

        self._logger.audit(
            EVENT_TYPE_LUNA_DECISION,
            actor=str(enum_value(action.role)),
            outcome=enum_value(result.decision),
            action_id=action.id,
            action_kind=enum_value(action.kind),
            user_id=context.user_id,
            session_id=context.session_id,
            mode=enum_value(context.mode),
            persona=enum_value(context.persona),
            triggered=[item.constraint_id for item in result.triggered_constraints],
        )

        payload = {"action": action.to_dict(), "context": context.to_dict(), "result": result.to_dict()}
        self._emit(EVENT_TYPE_LUNA_DECISION, context, payload)
        self._emit(decision_event_type(result.decision), context, payload)
        return result

    def validate_mode_transition(
        self,
        request: ModeTransitionRequest,
        *,
        now: Optional[datetime] = None,
    ) -> ModeTransitionResult:
        context = self.resolve_persona(request.context)
        result = validate_mode_transition(
            ModeTransitionRequest(request.from_mode, request.to_mode, context, request.reason, request.forced),
            self._constraint_sets(context),
            now=now,
        )

        self._logger.audit(
            "mode_transition",
            actor=context.user_id,
            outcome="allowed" if result.allowed else "denied",
            from_mode=enum_value(result.from_mode),
            to_mode=enum_value(result.to_mode),
            forced=request.forced,
            session_id=context.session_id,
            triggered=[item.constraint_id for item in result.triggered_constraints],
        )

        if result.allowed:
            self._emit(EVENT_TYPE_MODE_CHANGE, context, {"context": context.to_dict(), "result": result.to_dict()})
        return result

    def can_transition_mode(self, from_mode: OrbMode, to_mode: OrbMode, context: ActionContext) -> bool:
        return self.validate_mode_transition(ModeTransitionRequest(from_mode, to_mode, context)).allowed

    # --- store passthrough -------------------------------------------------------

    def register_constraint_set(self, constraint_set: ConstraintSet) -> None:
        self.store.save_constraint_set(constraint_set)
        self._logger.info("constraint set registered", set_id=constraint_set.id, priority=constraint_set.priority)

    def remove_constraint_set(self, set_id: str) -> None:
        self.store.delete_constraint_set(set_id)
        self._logger.info("constraint set removed", set_id=set_id)

    # --- events ------------------------------------------------------------------

    def _emit(self, event_type: str, context: ActionContext, payload: dict[str, Any]) -> None:
        if self._event_sink is None:
            return
        event = DecisionEvent(
            event_type=event_type,
            timestamp=utc_now_iso(),
            user_id=context.user_id,
            session_id=context.session_id,
            payload=payload,
        )
        try:
            self._event_sink(event)
        except Exception as exc:
            # The decision stands even when the bus rejects the event.
            self._logger.error("event sink rejected decision event", error=exc, event_type=event_type)


__all__ = ["PolicySession"]
