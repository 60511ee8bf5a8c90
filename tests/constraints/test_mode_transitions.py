# SPDX-License-Identifier: Apache-2.0

import json
from datetime import datetime, timezone

import pytest

from orb.constraints import (
    ModeTransitionRequest,
    Severity,
    can_transition_mode,
    create_constraint_set,
    get_mode_transition_denial_reasons,
    get_recommended_mode,
    restrict_mode_transition,
    validate_mode_transition,
)
from orb.identity import ActionContext, OrbDevice, OrbMode, OrbPersona

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _context(**overrides) -> ActionContext:
    fields = {"user_id": "u-1", "session_id": "s-1", "mode": OrbMode.MARS, "persona": OrbPersona.SWL, "device": OrbDevice.MARS}
    fields.update(overrides)
    return ActionContext(**fields)


def _lockdown(severity=Severity.ERROR, **options):
    return create_constraint_set(
        "lockdown",
        [restrict_mode_transition([OrbMode.RESTAURANT], modes=[OrbMode.MARS], severity=severity, **options)],
    )


@pytest.mark.parametrize("mode", list(OrbMode))
def test_same_mode_transition_is_always_allowed(mode) -> None:
    request = ModeTransitionRequest(mode, mode, _context(mode=mode))

    result = validate_mode_transition(request, [_lockdown(Severity.CRITICAL)], now=NOW)

    assert result.allowed is True
    assert result.reasons == ["No transition needed (same mode)"]
    assert result.timestamp == "2024-05-01T12:00:00Z"


def test_forced_transition_bypasses_constraints() -> None:
    request = ModeTransitionRequest(OrbMode.MARS, OrbMode.SOL, _context(), forced=True)

    result = validate_mode_transition(request, [_lockdown(Severity.CRITICAL)])

    assert result.allowed is True
    assert result.reasons == ["Transition forced by user override"]
    assert result.triggered_constraints == []


def test_blocking_transition_constraint_denies() -> None:
    lockdown = _lockdown()
    request = ModeTransitionRequest(OrbMode.MARS, OrbMode.EARTH, _context(device=OrbDevice.EARTH, persona=OrbPersona.PERSONAL))

    result = validate_mode_transition(request, [lockdown])

    assert result.allowed is False
    assert len(result.triggered_constraints) == 1
    triggered = result.triggered_constraints[0]
    assert triggered.reason == "Transition to earth not allowed from mars"
    assert f"Transition to earth is restricted by constraint {triggered.constraint_id}" in result.reasons
    assert result.recommendations == ["Allowed transitions from mars: restaurant"]


def test_allowed_target_passes_and_reports_reason() -> None:
    request = ModeTransitionRequest(OrbMode.MARS, OrbMode.RESTAURANT, _context(), reason="dinner service")

    result = validate_mode_transition(request, [_lockdown()])

    assert result.allowed is True
    assert result.reasons == ["Transition from mars to restaurant allowed", "Reason: dinner service"]
    assert result.recommendations is None


def test_warning_transition_constraint_does_not_block() -> None:
    request = ModeTransitionRequest(OrbMode.MARS, OrbMode.EARTH, _context(device=OrbDevice.EARTH, persona=OrbPersona.PERSONAL))

    result = validate_mode_transition(request, [_lockdown(Severity.WARNING)])

    assert result.allowed is True
    assert len(result.triggered_constraints) == 1
    assert result.reasons[-1] == "Transition from mars to earth allowed"


def test_constraint_scoped_to_other_source_mode_is_ignored() -> None:
    request = ModeTransitionRequest(OrbMode.SOL, OrbMode.EARTH, _context(mode=OrbMode.SOL, device=OrbDevice.EARTH, persona=OrbPersona.PERSONAL))

    assert validate_mode_transition(request, [_lockdown(Severity.CRITICAL)]).allowed is True


def test_overlapping_transition_constraints_are_anded() -> None:
    sets = [
        create_constraint_set("a", [restrict_mode_transition([OrbMode.EARTH, OrbMode.SOL], modes=[OrbMode.MARS])]),
        create_constraint_set("b", [restrict_mode_transition([OrbMode.EARTH], modes=[OrbMode.MARS])]),
    ]
    context = _context(device=None, persona=None)

    assert can_transition_mode(OrbMode.MARS, OrbMode.EARTH, context, sets) is True
    assert can_transition_mode(OrbMode.MARS, OrbMode.SOL, context, sets) is False


def test_transition_constraint_respects_persona_scope() -> None:
    lockdown = _lockdown(personas=[OrbPersona.PERSONAL])

    assert can_transition_mode(OrbMode.MARS, OrbMode.SOL, _context(persona=OrbPersona.SWL), [lockdown]) is True
    assert can_transition_mode(OrbMode.MARS, OrbMode.SOL, _context(persona=OrbPersona.PERSONAL), [lockdown]) is False


def test_affinity_mismatches_are_advisory() -> None:
    request = ModeTransitionRequest(OrbMode.MARS, OrbMode.FORGE, _context())

    result = validate_mode_transition(request, [])

    assert result.allowed is True
    assert result.reasons == [
        "Mode forge is not typically used on device mars",
        "Mode forge is not typically used with persona swl",
        "Transition from mars to forge allowed",
    ]
    assert result.recommendations == ["forge is optimized for: luna", "forge is optimized for: personal"]


def test_affinity_checks_skip_unknown_device_and_persona() -> None:
    request = ModeTransitionRequest(OrbMode.MARS, OrbMode.FORGE, _context(device=None, persona=None))

    result = validate_mode_transition(request, [])

    assert result.reasons == ["Transition from mars to forge allowed"]
    assert result.recommendations is None


def test_result_is_json_serializable() -> None:
    request = ModeTransitionRequest(OrbMode.MARS, OrbMode.EARTH, _context())

    decoded = json.loads(json.dumps(validate_mode_transition(request, [_lockdown()], now=NOW).to_dict()))

    assert decoded["allowed"] is False
    assert decoded["from_mode"] == "mars"
    assert decoded["triggered_constraints"][0]["constraint_type"] == "mode_transition"


@pytest.mark.parametrize(
    ("device", "persona", "expected"),
    [
        (OrbDevice.SOL, OrbPersona.SWL, OrbMode.SOL),
        (OrbDevice.LUNA, None, OrbMode.FORGE),
        (OrbDevice.MARS, None, OrbMode.MARS),
        (OrbDevice.EARTH, None, OrbMode.EARTH),
        (None, OrbPersona.PERSONAL, OrbMode.SOL),
        (None, OrbPersona.SWL, OrbMode.MARS),
        (None, OrbPersona.REAL_ESTATE, OrbMode.REAL_ESTATE),
        (None, OrbPersona.OPEN_PEOPLE, OrbMode.EXPLORER),
        (None, None, OrbMode.DEFAULT),
        ("pluto", None, OrbMode.DEFAULT),
    ],
)
def test_recommended_mode(device, persona, expected) -> None:
    assert get_recommended_mode(_context(device=device, persona=persona)) is expected


def test_denial_reasons_catalogue() -> None:
    reasons = get_mode_transition_denial_reasons()

    assert set(reasons) == {"persona-mismatch", "device-restriction", "hard-constraint", "time-restriction", "unsafe-context"}
    reasons["hard-constraint"] = "mutated"
    assert get_mode_transition_denial_reasons()["hard-constraint"] == "A system constraint prevents this transition"
