# SPDX-License-Identifier: Apache-2.0
"""Constraint store contract, relevance selection and the in-memory store."""

from __future__ import annotations

import threading
from typing import Iterable, Optional, Protocol, runtime_checkable

from orb.constraints.defaults import get_default_constraint_sets, load_default_constraint_sets
from orb.constraints.types import ConstraintSet
from orb.identity.context import ActionContext
from orb.identity.types import OrbMode, OrbPersona


@runtime_checkable
class ConstraintStore(Protocol):
    """Anything that can hand back the constraint sets relevant to a context."""

    def get_constraint_sets(self, context: ActionContext) -> list[ConstraintSet]: ...

    def get_constraint_sets_by_mode(self, mode: OrbMode) -> list[ConstraintSet]: ...

    def get_constraint_sets_by_persona(self, persona: Optional[OrbPersona]) -> list[ConstraintSet]: ...

    def save_constraint_set(self, constraint_set: ConstraintSet) -> None: ...

    def delete_constraint_set(self, set_id: str) -> None: ...

    def get_constraint_set(self, set_id: str) -> Optional[ConstraintSet]: ...

    def list_constraint_sets(self) -> list[ConstraintSet]: ...


def select_by_mode(sets: Iterable[ConstraintSet], mode: OrbMode) -> list[ConstraintSet]:
    """Sets with at least one constraint that is unscoped by mode or scoped to ``mode``."""
    return [
        item
        for item in sets
        if any(not c.modes or any(mode == m for m in c.modes) for c in item.constraints)
    ]


def select_by_persona(sets: Iterable[ConstraintSet], persona: Optional[OrbPersona]) -> list[ConstraintSet]:
    return [
        item
        for item in sets
        if any(not c.personas or (persona is not None and any(persona == p for p in c.personas)) for c in item.constraints)
    ]


def select_for_context(sets: Iterable[ConstraintSet], context: ActionContext) -> list[ConstraintSet]:
    """Union of mode-relevant, persona-relevant and global sets, de-duplicated by id in that order."""
    candidates = list(sets)
    selected: dict[str, ConstraintSet] = {}
    for item in [
        *select_by_mode(candidates, context.mode),
        *select_by_persona(candidates, context.persona),
        *(c for c in candidates if c.is_global),
    ]:
        selected.setdefault(item.id, item)
    return list(selected.values())


class InMemoryConstraintStore:
    """Dict-backed store keyed by set id; saving under an existing id replaces the set."""

    def __init__(self, constraint_sets: Iterable[ConstraintSet] = (), *, seed_defaults: bool = False) -> None:
        self._lock = threading.RLock()
        self._sets: dict[str, ConstraintSet] = {}
        if seed_defaults:
            for item in [*load_default_constraint_sets(), *get_default_constraint_sets()]:
                self._sets[item.id] = item
        for item in constraint_sets:
            self._sets[item.id] = item

    def get_constraint_sets(self, context: ActionContext) -> list[ConstraintSet]:
        return select_for_context(self.list_constraint_sets(), context)

    def get_constraint_sets_by_mode(self, mode: OrbMode) -> list[ConstraintSet]:
        return select_by_mode(self.list_constraint_sets(), mode)

    def get_constraint_sets_by_persona(self, persona: Optional[OrbPersona]) -> list[ConstraintSet]:
        return select_by_persona(self.list_constraint_sets(), persona)

    def save_constraint_set(self, constraint_set: ConstraintSet) -> None:
        with self._lock:
            self._sets[constraint_set.id] = constraint_set

    def delete_constraint_set(self, set_id: str) -> None:
        with self._lock:
            self._sets.pop(set_id, None)

    def get_constraint_set(self, set_id: str) -> Optional[ConstraintSet]:
        with self._lock:
            return self._sets.get(set_id)

    def list_constraint_sets(self) -> list[ConstraintSet]:
        with self._lock:
            return list(self._sets.values())

    def clear(self) -> None:
        with self._lock:
            self._sets.clear()


__all__ = [
    "ConstraintStore",
    "InMemoryConstraintStore",
    "select_by_mode",
    "select_by_persona",
    "select_for_context",
]
