# SPDX-License-Identifier: Apache-2.0

import logging

import pytest

from orb.identity import ActionContext, OrbDevice, OrbMode, OrbPersona
from orb.persona import (
    DEFAULT_PERSONA_RULES,
    PersonaClassifier,
    PersonaContext,
    PersonaSignalRule,
    PersonaSource,
    select_matching_rules,
)


def test_default_fallback_when_no_signals() -> None:
    result = PersonaClassifier().classify(PersonaContext(user_id="x"))

    assert result.persona is OrbPersona.PERSONAL
    assert result.confidence < 0.5
    assert result.source is PersonaSource.DEFAULT
    assert result.reasoning == ["No specific signals detected, defaulting to Personal persona"]
    assert result.alternatives is None


def test_override_takes_precedence_over_signals() -> None:
    classifier = PersonaClassifier()
    classifier.set_override("u", OrbPersona.REAL_ESTATE)

    result = classifier.classify(PersonaContext(user_id="u", device=OrbDevice.MARS, mode=OrbMode.MARS))

    assert result.persona is OrbPersona.REAL_ESTATE
    assert result.source is PersonaSource.OVERRIDE
    assert result.confidence == 1.0
    assert classifier.classify(PersonaContext(user_id="other", mode=OrbMode.MARS)).persona is OrbPersona.SWL


def test_override_beats_explicit_choice_and_can_be_cleared() -> None:
    classifier = PersonaClassifier()
    classifier.set_override("u", OrbPersona.SWL)
    context = PersonaContext(user_id="u", explicit_persona=OrbPersona.OPEN_PEOPLE)

    assert classifier.classify(context).source is PersonaSource.OVERRIDE
    classifier.clear_override("u")
    assert classifier.get_override("u") is None
    explicit = classifier.classify(context)
    assert explicit.persona is OrbPersona.OPEN_PEOPLE
    assert explicit.source is PersonaSource.EXPLICIT
    assert explicit.reasoning == ["User explicitly selected this persona"]


def test_set_override_none_clears() -> None:
    classifier = PersonaClassifier()
    classifier.set_override("u", OrbPersona.SWL)
    classifier.set_override("u", None)

    assert classifier.get_override("u") is None


def test_overrides_are_per_instance() -> None:
    first, second = PersonaClassifier(), PersonaClassifier()
    first.set_override("u", OrbPersona.SWL)

    assert second.get_override("u") is None


def test_feature_rule_outranks_mode_and_device() -> None:
    context = PersonaContext(user_id="u", feature="deals", mode=OrbMode.MARS, device=OrbDevice.MARS)

    result = PersonaClassifier().classify(context)

    assert result.persona is OrbPersona.REAL_ESTATE
    assert result.confidence == 0.95
    assert result.source is PersonaSource.FEATURE
    assert [(alt.persona, alt.confidence) for alt in result.alternatives] == [
        (OrbPersona.SWL, 0.85),
        (OrbPersona.SWL, 0.75),
    ]


def test_alternatives_are_capped_at_three() -> None:
    context = PersonaContext(
        user_id="u",
        feature="SWL",
        mode=OrbMode.RESTAURANT,
        device=OrbDevice.MARS,
        recent_activity=("task.created", "contact.viewed"),
        time_of_day="2024-05-01T12:30:00Z",
    )

    result = PersonaClassifier().classify(context)

    assert result.persona is OrbPersona.SWL
    assert len(result.alternatives) == 3


def test_equal_priority_ties_follow_declaration_order() -> None:
    # activity-contacts and activity-tasks share priority 40.
    context = PersonaContext(user_id="u", device=OrbDevice.EARTH, recent_activity=("calendar.sync", "todo.add"))

    result = PersonaClassifier().classify(context)

    assert result.persona is OrbPersona.PERSONAL
    assert result.source is PersonaSource.DEVICE
    assert [alt.persona for alt in result.alternatives] == [OrbPersona.OPEN_PEOPLE, OrbPersona.SWL]


@pytest.mark.parametrize(
    ("time_of_day", "expected"),
    [
        ("2024-05-01T20:00:00Z", OrbPersona.PERSONAL),
        ("2024-05-01T12:00:00Z", OrbPersona.SWL),
        ("02:00", OrbPersona.PERSONAL),
        ("garbage", OrbPersona.PERSONAL),
    ],
)
def test_time_of_day_rules(time_of_day, expected) -> None:
    assert PersonaClassifier().recommended_persona(PersonaContext(user_id="u", time_of_day=time_of_day)) is expected


def test_unknown_device_matches_no_rule() -> None:
    result = PersonaClassifier().classify(PersonaContext(user_id="u", device="pluto"))

    assert result.source is PersonaSource.DEFAULT


def test_registered_rules_join_the_table() -> None:
    classifier = PersonaClassifier()
    classifier.register_rule(
        PersonaSignalRule(
            "stream-relationships", 95, "stream", OrbPersona.OPEN_PEOPLE, 0.9,
            "Relationship stream", lambda ctx: ctx.stream == "relationships",
        )
    )

    result = classifier.classify(PersonaContext(user_id="u", stream="relationships", mode=OrbMode.MARS))

    assert result.persona is OrbPersona.OPEN_PEOPLE
    assert result.source == "stream"
    assert len(classifier.rules) == len(DEFAULT_PERSONA_RULES) + 1
    assert len(PersonaClassifier().rules) == len(DEFAULT_PERSONA_RULES)


def test_failing_rule_is_logged_and_ignored(caplog) -> None:
    def explode(_ctx):
        raise RuntimeError("boom")

    rules = [
        PersonaSignalRule("broken", 200, PersonaSource.FEATURE, OrbPersona.SWL, 1.0, "never", explode),
        *DEFAULT_PERSONA_RULES,
    ]

    with caplog.at_level(logging.WARNING, logger="orb.persona.rules"):
        matched = select_matching_rules(rules, PersonaContext(user_id="u", mode=OrbMode.EARTH))

    assert [rule.id for rule in matched] == ["mode-earth"]
    assert "persona rule failed" in caplog.text


def test_action_context_persona_is_treated_as_explicit() -> None:
    context = ActionContext(
        user_id="u",
        session_id="s",
        mode=OrbMode.MARS,
        persona=OrbPersona.OPEN_PEOPLE,
        metadata={"recent_activity": ["task.created"]},
    )

    adapted = PersonaContext.from_action_context(context)

    assert adapted.explicit_persona is OrbPersona.OPEN_PEOPLE
    assert adapted.recent_activity == ("task.created",)
    assert PersonaClassifier().classify(context).source is PersonaSource.EXPLICIT
    assert PersonaClassifier().classify(context.with_persona(None)).persona is OrbPersona.SWL
