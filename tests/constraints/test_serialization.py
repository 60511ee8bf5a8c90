# SPDX-License-Identifier: Apache-2.0

import json
import logging

import pytest

from orb.constraints import (
    ActionKind,
    ConstraintType,
    OtherRule,
    RiskLevel,
    Severity,
    block_tool,
    constraint_from_dict,
    constraint_set_from_dict,
    constraint_set_to_dict,
    constraint_to_dict,
    create_constraint_set,
    get_default_constraint_sets,
    load_default_constraint_sets,
    max_risk,
    require_persona,
    restrict_mode_transition,
    restrict_to_devices,
    restrict_to_hours,
)
from orb.errors import ConstraintDataError
from orb.identity import OrbDevice, OrbMode, OrbPersona, OrbRole


def _sample_set():
    return create_constraint_set(
        "ops-guard",
        [
            block_tool("pos.refund", modes=[OrbMode.MARS], reason="Refunds go through the manager"),
            max_risk(RiskLevel.MEDIUM, roles=[OrbRole.MAV], action_kinds=[ActionKind.FILE_WRITE]),
            restrict_mode_transition([OrbMode.EARTH], modes=[OrbMode.RESTAURANT], severity=Severity.CRITICAL),
            require_persona(OrbPersona.SWL, features=["SWL"]),
            restrict_to_devices([OrbDevice.MARS, OrbDevice.EARTH], label="ops devices"),
            restrict_to_hours(22, 6, metadata={"shift": "night"}),
        ],
        set_id="ops.guard",
        description="Operations guard rails",
        scope="mode",
        tags=["ops"],
        priority=75,
        metadata={"owner": "ops"},
    )


def test_constraint_set_survives_a_json_round_trip() -> None:
    original = _sample_set()

    restored = constraint_set_from_dict(json.loads(json.dumps(constraint_set_to_dict(original))))

    assert restored == original


def test_builtin_sets_survive_a_json_round_trip() -> None:
    for original in [*load_default_constraint_sets(), *get_default_constraint_sets()]:
        assert constraint_set_from_dict(json.loads(json.dumps(constraint_set_to_dict(original)))) == original


def test_persisted_shape_uses_model_field_names() -> None:
    payload = constraint_to_dict(block_tool("pos.refund", constraint_id="c-1", modes=[OrbMode.MARS]))

    assert payload["id"] == "c-1"
    assert payload["type"] == "block_tool"
    assert payload["tool_id"] == "pos.refund"
    assert payload["severity"] == "error"
    assert payload["modes"] == ["mars"]
    assert payload["active"] is True


def test_unknown_type_degrades_to_other() -> None:
    constraint = constraint_from_dict({"id": "c-9", "type": "teleport", "severity": "critical", "description": "beam me up"})

    assert constraint.type is ConstraintType.OTHER
    assert constraint.rule == OtherRule(description="beam me up")
    assert constraint.severity is Severity.CRITICAL


def test_malformed_fields_degrade_to_other() -> None:
    bad_risk = constraint_from_dict({"id": "c-1", "type": "max_risk", "max_risk": "extreme"})
    bad_scope = constraint_from_dict({"id": "c-2", "type": "block_tool", "tool_id": "x", "modes": 7})
    not_an_object = constraint_from_dict(["nope"])

    assert bad_risk.type is ConstraintType.OTHER
    assert bad_scope.type is ConstraintType.OTHER
    assert not_an_object.type is ConstraintType.OTHER
    assert not_an_object.id == "unknown"


def test_unknown_scope_values_are_kept_so_they_match_nothing() -> None:
    constraint = constraint_from_dict({"id": "c-3", "type": "block_tool", "tool_id": "x", "devices": ["pluto"]})

    assert constraint.type is ConstraintType.BLOCK_TOOL
    assert constraint.devices == ("pluto",)
    assert constraint.is_global is False


def test_legacy_severity_aliases_are_normalised() -> None:
    assert constraint_from_dict({"id": "a", "type": "require_confirmation", "severity": "warn"}).severity is Severity.WARNING
    assert constraint_from_dict({"id": "b", "type": "block_action", "severity": "block"}).severity is Severity.CRITICAL


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ("not-a-dict", "must be an object"),
        ({"constraints": []}, "id must be a non-empty string"),
        ({"id": "x", "constraints": {}}, "constraints must be a list"),
        ({"id": "x", "priority": "high"}, "priority must be an integer"),
    ],
)
def test_uninterpretable_set_envelope_raises(payload, message) -> None:
    with pytest.raises(ConstraintDataError, match=message):
        constraint_set_from_dict(payload)


def test_non_boolean_active_flag_is_reported(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="orb.constraints.serialization"):
        constraint = constraint_from_dict({"id": "c-4", "type": "block_tool", "tool_id": "x", "active": "false"})

    assert constraint.active is True
    assert "non-boolean active flag" in caplog.text


def test_empty_hour_window_degrades_to_other() -> None:
    constraint = constraint_from_dict({"id": "c-5", "type": "time_restriction", "start_hour": 9, "end_hour": 9})

    assert constraint.type is ConstraintType.OTHER
