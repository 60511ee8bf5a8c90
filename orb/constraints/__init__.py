# SPDX-License-Identifier: Apache-2.0
"""Constraint model, builders, evaluators and the store contract."""

from orb.constraints.builder import (
    KNOWN_CONSTRAINT_TAGS,
    block_action,
    block_tool,
    create_constraint_set,
    generate_constraint_id,
    max_risk,
    other_constraint,
    parse_constraint_tag,
    require_confirmation,
    require_persona,
    restrict_mode_transition,
    restrict_to_devices,
    restrict_to_hours,
)
from orb.constraints.defaults import get_default_constraint_sets, load_default_constraint_sets
from orb.constraints.evaluator import (
    NO_VIOLATIONS_REASON,
    check_violation,
    constraint_applies,
    evaluate_action,
    get_relevant_constraint_sets,
)
from orb.constraints.mode_transitions import (
    can_transition_mode,
    get_mode_transition_denial_reasons,
    get_recommended_mode,
    validate_mode_transition,
)
from orb.constraints.serialization import (
    constraint_from_dict,
    constraint_set_from_dict,
    constraint_set_to_dict,
    constraint_to_dict,
)
from orb.constraints.store import ConstraintStore, InMemoryConstraintStore
from orb.constraints.types import (
    ActionDescriptor,
    ActionKind,
    BlockActionRule,
    BlockToolRule,
    Constraint,
    ConstraintEvaluationResult,
    ConstraintSet,
    ConstraintType,
    Decision,
    DeviceRestrictionRule,
    MaxRiskRule,
    ModeTransitionRequest,
    ModeTransitionResult,
    ModeTransitionRule,
    OtherRule,
    PersonaRule,
    RequireConfirmationRule,
    RiskLevel,
    Severity,
    TimeRestrictionRule,
    TriggeredConstraint,
    normalize_severity,
)

__all__ = [
    "KNOWN_CONSTRAINT_TAGS",
    "NO_VIOLATIONS_REASON",
    "ActionDescriptor",
    "ActionKind",
    "BlockActionRule",
    "BlockToolRule",
    "Constraint",
    "ConstraintEvaluationResult",
    "ConstraintSet",
    "ConstraintStore",
    "ConstraintType",
    "Decision",
    "DeviceRestrictionRule",
    "InMemoryConstraintStore",
    "MaxRiskRule",
    "ModeTransitionRequest",
    "ModeTransitionResult",
    "ModeTransitionRule",
    "OtherRule",
    "PersonaRule",
    "RequireConfirmationRule",
    "RiskLevel",
    "Severity",
    "TimeRestrictionRule",
    "TriggeredConstraint",
    "block_action",
    "block_tool",
    "can_transition_mode",
    "check_violation",
    "constraint_applies",
    "constraint_from_dict",
    "constraint_set_from_dict",
    "constraint_set_to_dict",
    "constraint_to_dict",
    "create_constraint_set",
    "evaluate_action",
    "generate_constraint_id",
    "get_default_constraint_sets",
    "get_mode_transition_denial_reasons",
    "get_recommended_mode",
    "get_relevant_constraint_sets",
    "load_default_constraint_sets",
    "max_risk",
    "normalize_severity",
    "other_constraint",
    "parse_constraint_tag",
    "require_confirmation",
    "require_persona",
    "restrict_mode_transition",
    "restrict_to_devices",
    "restrict_to_hours",
    "validate_mode_transition",
]
