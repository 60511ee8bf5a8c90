# SPDX-License-Identifier: Apache-2.0
"""
Module: constraint_store
Purpose: Durable JSON/SQLite persistence for constraint sets.
Integration points:
  - Imports from: orb.constraints.serialization, orb.foundation.canonical_json
  - Consumed by: orb.session.PolicySession via build_constraint_store
  - Policy impact: high; a corrupt store raises instead of returning partial rules
"""

from __future__ import annotations

import json
import sqlite3
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, StrictInt, ValidationError

from orb.config import PolicyConfig
from orb.constraints.defaults import get_default_constraint_sets, load_default_constraint_sets
from orb.constraints.serialization import constraint_set_from_dict, constraint_set_to_dict
from orb.constraints.store import (
    ConstraintStore,
    InMemoryConstraintStore,
    select_by_mode,
    select_by_persona,
    select_for_context,
)
from orb.constraints.types import ConstraintSet
from orb.errors import ConstraintDataError, ConstraintStoreError
from orb.foundation import canonical_json
from orb.identity.context import ActionContext
from orb.identity.types import OrbMode, OrbPersona


class ConstraintSetEnvelope(BaseModel):
    """Set-level shape of a persisted constraint set. Individual constraints are checked later."""

    id: str = Field(min_length=1)
    priority: StrictInt = 0
    constraints: List[Any] = Field(default_factory=list)
    name: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None
    scope: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


def _decode_set(key: str, payload: Any) -> ConstraintSet:
    try:
        envelope = ConstraintSetEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise ConstraintStoreError(f"constraint set {key!r} failed validation: {exc.error_count()} error(s)") from exc
    if envelope.id != key:
        raise ConstraintStoreError(f"constraint set stored under {key!r} declares id {envelope.id!r}")
    try:
        return constraint_set_from_dict(envelope.model_dump())
    except ConstraintDataError as exc:
        raise ConstraintStoreError(str(exc)) from exc


class ConstraintSetStore:
    """Constraint set persistence adapter with deterministic JSON and SQLite backends."""

    def __init__(self, json_path: Path, *, sqlite_path: Path | None = None, backend: str = "json") -> None:
        if backend not in {"json", "sqlite"}:
            raise ValueError("invalid_store_backend")
        self.json_path = Path(json_path)
        self.sqlite_path = Path(sqlite_path) if sqlite_path else self.json_path.with_suffix(".sqlite")
        self.backend = backend
        self._lock = threading.RLock()
        try:
            self.json_path.parent.mkdir(parents=True, exist_ok=True)
            self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            if self.backend == "sqlite":
                self._init_sqlite()
        except (OSError, sqlite3.Error) as exc:
            raise ConstraintStoreError(f"constraint store unavailable: {exc}") from exc

    def _init_sqlite(self) -> None:
        with sqlite3.connect(self.sqlite_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS constraint_sets (
                    id TEXT PRIMARY KEY,
                    priority INTEGER NOT NULL,
                    payload_json TEXT NOT NULL
                )
                """
            )

    # --- raw persistence -----------------------------------------------------

    def _load_raw(self) -> dict[str, Any]:
        if self.backend == "sqlite":
            try:
                with sqlite3.connect(self.sqlite_path) as conn:
                    rows = conn.execute("SELECT id, payload_json FROM constraint_sets ORDER BY id ASC").fetchall()
            except sqlite3.Error as exc:
                raise ConstraintStoreError(f"constraint store unreadable: {exc}") from exc
            raw: dict[str, Any] = {}
            for set_id, payload_json in rows:
                try:
                    raw[set_id] = json.loads(payload_json)
                except json.JSONDecodeError as exc:
                    raise ConstraintStoreError(f"constraint set {set_id!r} holds malformed JSON") from exc
            return raw

        if not self.json_path.exists():
            return {}
        try:
            payload = json.loads(self.json_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConstraintStoreError(f"constraint store unreadable: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConstraintStoreError(f"constraint store holds malformed JSON: {self.json_path}") from exc
        if not isinstance(payload, dict):
            raise ConstraintStoreError("constraint store root must be an object keyed by set id")
        return {str(key): payload[key] for key in sorted(payload, key=str)}

    def _save_raw(self, registry: dict[str, dict[str, Any]]) -> None:
        ordered = {set_id: registry[set_id] for set_id in sorted(registry)}
        try:
            if self.backend == "sqlite":
                with sqlite3.connect(self.sqlite_path) as conn:
                    conn.execute("DELETE FROM constraint_sets")
                    conn.executemany(
                        "INSERT INTO constraint_sets(id, priority, payload_json) VALUES (?, ?, ?)",
                        [(set_id, int(payload.get("priority", 0)), canonical_json(payload)) for set_id, payload in ordered.items()],
                    )
                return

            self._write_json_atomic(json.dumps(ordered, indent=2, sort_keys=True, ensure_ascii=False))
        except (OSError, sqlite3.Error) as exc:
            raise ConstraintStoreError(f"constraint store write failed: {exc}") from exc

    def _write_json_atomic(self, text: str) -> None:
        temp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.json_path.parent,
                prefix=f".{self.json_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(text)
            temp_path.replace(self.json_path)
        except OSError:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise

    # --- store contract ------------------------------------------------------

    def list_constraint_sets(self) -> list[ConstraintSet]:
        with self._lock:
            raw = self._load_raw()
        return [_decode_set(set_id, payload) for set_id, payload in raw.items()]

    def get_constraint_set(self, set_id: str) -> Optional[ConstraintSet]:
        with self._lock:
            raw = self._load_raw()
        if set_id not in raw:
            return None
        return _decode_set(set_id, raw[set_id])

    def get_constraint_sets(self, context: ActionContext) -> list[ConstraintSet]:
        return select_for_context(self.list_constraint_sets(), context)

    def get_constraint_sets_by_mode(self, mode: OrbMode) -> list[ConstraintSet]:
        return select_by_mode(self.list_constraint_sets(), mode)

    def get_constraint_sets_by_persona(self, persona: Optional[OrbPersona]) -> list[ConstraintSet]:
        return select_by_persona(self.list_constraint_sets(), persona)

    def save_constraint_set(self, constraint_set: ConstraintSet) -> None:
        with self._lock:
            raw = self._load_raw()
            raw[constraint_set.id] = constraint_set_to_dict(constraint_set)
            self._save_raw(raw)

    def delete_constraint_set(self, set_id: str) -> None:
        with self._lock:
            raw = self._load_raw()
            if raw.pop(set_id, None) is not None:
                self._save_raw(raw)

    def seed_defaults(self) -> int:
        """Persist built-in sets whose ids are not stored yet; returns how many were added."""
        with self._lock:
            raw = self._load_raw()
            added = 0
            for item in [*load_default_constraint_sets(), *get_default_constraint_sets()]:
                if item.id not in raw:
                    raw[item.id] = constraint_set_to_dict(item)
                    added += 1
            if added:
                self._save_raw(raw)
        return added


def build_constraint_store(config: PolicyConfig) -> ConstraintStore:
    """Pick the store backend named by ``config``."""
    if config.store_backend == "memory":
        return InMemoryConstraintStore(seed_defaults=config.seed_default_constraints)
    store = ConstraintSetStore(config.store_path, backend=config.store_backend)
    if config.seed_default_constraints:
        store.seed_defaults()
    return store


__all__ = ["ConstraintSetEnvelope", "ConstraintSetStore", "build_constraint_store"]
