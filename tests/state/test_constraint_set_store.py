# SPDX-License-Identifier: Apache-2.0

import json
import sqlite3
from pathlib import Path

import pytest

from orb.config import PolicyConfig
from orb.constraints import ConstraintStore, InMemoryConstraintStore, OtherRule, block_tool, create_constraint_set
from orb.errors import ConstraintStoreError
from orb.identity import ActionContext, OrbMode, OrbPersona
from orb.state import ConstraintSetStore, build_constraint_store


def _sample(set_id: str, priority: int = 0):
    return create_constraint_set(
        set_id,
        [block_tool(f"{set_id}.tool", constraint_id=f"{set_id}-block", modes=[OrbMode.MARS])],
        set_id=set_id,
        priority=priority,
    )


def test_json_sqlite_parity(tmp_path) -> None:
    json_store = ConstraintSetStore(tmp_path / "sets.json", backend="json")
    sqlite_store = ConstraintSetStore(tmp_path / "sets.json", sqlite_path=tmp_path / "sets.sqlite", backend="sqlite")

    sets = [_sample("b", 5), _sample("a", 1)]
    for store in (json_store, sqlite_store):
        for item in sets:
            store.save_constraint_set(item)

    assert json_store.list_constraint_sets() == sqlite_store.list_constraint_sets()
    assert [item.id for item in json_store.list_constraint_sets()] == ["a", "b"]
    assert isinstance(json_store, ConstraintStore)


def test_json_file_is_keyed_by_set_id(tmp_path) -> None:
    path = tmp_path / "sets.json"
    store = ConstraintSetStore(path)
    store.save_constraint_set(_sample("ops"))

    payload = json.loads(path.read_text(encoding="utf-8"))

    assert list(payload) == ["ops"]
    assert payload["ops"]["constraints"][0]["type"] == "block_tool"


@pytest.mark.parametrize("backend", ["json", "sqlite"])
def test_save_replace_delete(tmp_path, backend) -> None:
    store = ConstraintSetStore(tmp_path / "sets.json", backend=backend)
    store.save_constraint_set(_sample("ops", 1))
    store.save_constraint_set(_sample("ops", 9))

    assert store.get_constraint_set("ops").priority == 9
    store.delete_constraint_set("ops")
    assert store.get_constraint_set("ops") is None
    assert store.list_constraint_sets() == []


def test_context_selection_matches_in_memory_store(tmp_path) -> None:
    sets = [
        _sample("mars"),
        create_constraint_set("earth", [block_tool("x", modes=[OrbMode.EARTH])], set_id="earth"),
        create_constraint_set("global", [block_tool("y")], set_id="global"),
    ]
    durable = ConstraintSetStore(tmp_path / "sets.json")
    for item in sets:
        durable.save_constraint_set(item)
    memory = InMemoryConstraintStore(sets)
    context = ActionContext(user_id="u", session_id="s", mode=OrbMode.MARS, persona=OrbPersona.SWL)

    assert sorted(item.id for item in durable.get_constraint_sets(context)) == sorted(
        item.id for item in memory.get_constraint_sets(context)
    )


def test_malformed_json_fails_closed(tmp_path) -> None:
    path = tmp_path / "sets.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConstraintStoreError, match="malformed JSON"):
        ConstraintSetStore(path).list_constraint_sets()


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"ops": {"id": "ops", "priority": "high", "constraints": []}},
        {"ops": {"id": "ops", "constraints": "nope"}},
        {"ops": {"id": "other", "constraints": []}},
        {"ops": "not-an-object"},
    ],
)
def test_structurally_invalid_sets_fail_closed(tmp_path, payload) -> None:
    path = tmp_path / "sets.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ConstraintStoreError):
        ConstraintSetStore(path).list_constraint_sets()


def test_malformed_constraint_degrades_without_failing_the_set(tmp_path) -> None:
    path = tmp_path / "sets.json"
    path.write_text(
        json.dumps(
            {
                "ops": {
                    "id": "ops",
                    "priority": 3,
                    "constraints": [
                        {"id": "c-1", "type": "block_tool", "tool_id": "pos.refund"},
                        {"id": "c-2", "type": "quantum_lock"},
                        "garbage",
                    ],
                }
            }
        ),
        encoding="utf-8",
    )

    loaded = ConstraintSetStore(path).get_constraint_set("ops")

    assert [item.id for item in loaded.constraints] == ["c-1", "c-2", "unknown"]
    assert isinstance(loaded.constraints[1].rule, OtherRule)


def test_corrupt_sqlite_payload_fails_closed(tmp_path) -> None:
    store = ConstraintSetStore(tmp_path / "sets.json", backend="sqlite")
    with sqlite3.connect(store.sqlite_path) as conn:
        conn.execute("INSERT INTO constraint_sets(id, priority, payload_json) VALUES ('ops', 0, '{broken')")

    with pytest.raises(ConstraintStoreError, match="malformed JSON"):
        store.list_constraint_sets()


def test_invalid_backend_rejected(tmp_path) -> None:
    with pytest.raises(ValueError, match="invalid_store_backend"):
        ConstraintSetStore(tmp_path / "sets.json", backend="postgres")


def test_seed_defaults_is_idempotent(tmp_path) -> None:
    store = ConstraintSetStore(tmp_path / "sets.json")

    first = store.seed_defaults()
    second = store.seed_defaults()

    assert first > 0
    assert second == 0
    assert store.get_constraint_set("system.safety") is not None


def test_build_constraint_store_selects_backend(tmp_path) -> None:
    memory = build_constraint_store(PolicyConfig(seed_default_constraints=False))
    durable = build_constraint_store(PolicyConfig(store_backend="sqlite", store_path=tmp_path / "sets.json"))

    assert isinstance(memory, InMemoryConstraintStore)
    assert memory.list_constraint_sets() == []
    assert isinstance(durable, ConstraintSetStore)
    assert durable.backend == "sqlite"
    assert durable.get_constraint_set("default-sol") is not None


def test_failed_json_write_leaves_no_temp_file(tmp_path, monkeypatch) -> None:
    store_dir = tmp_path / "store"
    store = ConstraintSetStore(store_dir / "sets.json")

    def refuse_replace(self, target):
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", refuse_replace)

    with pytest.raises(ConstraintStoreError, match="write failed"):
        store.save_constraint_set(_sample("ops"))

    assert list(store_dir.iterdir()) == []
