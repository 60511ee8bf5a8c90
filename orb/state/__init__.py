# SPDX-License-Identifier: Apache-2.0
"""Durable constraint set storage."""

from orb.state.constraint_store import ConstraintSetEnvelope, ConstraintSetStore, build_constraint_store

__all__ = ["ConstraintSetEnvelope", "ConstraintSetStore", "build_constraint_store"]
