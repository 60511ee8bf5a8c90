# SPDX-License-Identifier: Apache-2.0
"""Error taxonomy for the policy layer."""

from __future__ import annotations


class PolicyError(Exception):
    """Base class for policy layer failures surfaced to callers."""


class ConstraintStoreError(PolicyError):
    """Raised when constraint sets cannot be loaded or persisted (fail-closed)."""


class ConstraintDataError(PolicyError, ValueError):
    """Raised when a constraint set envelope cannot be interpreted at all."""


class PolicyConfigError(ValueError):
    """Raised when a configuration value is missing or invalid."""


__all__ = ["ConstraintDataError", "ConstraintStoreError", "PolicyConfigError", "PolicyError"]
