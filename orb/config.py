# SPDX-License-Identifier: Apache-2.0
"""Environment-driven configuration for the policy layer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from orb.errors import PolicyConfigError

STORE_BACKENDS: tuple[str, ...] = ("memory", "json", "sqlite")

DEFAULT_LOG_DIR = Path("data/logs")
DEFAULT_CONSTRAINT_STORE_PATH = Path("data/constraints/constraint_sets.json")


def _is_truthy_env(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class PolicyConfig:
    log_dir: Path = DEFAULT_LOG_DIR
    store_backend: str = "memory"
    store_path: Path = DEFAULT_CONSTRAINT_STORE_PATH
    seed_default_constraints: bool = True


def load_config(env: Mapping[str, str] | None = None) -> PolicyConfig:
    """Build a :class:`PolicyConfig` from ``ORB_*`` environment variables."""
    source = os.environ if env is None else env

    backend = source.get("ORB_CONSTRAINT_STORE_BACKEND", "memory").strip().lower() or "memory"
    if backend not in STORE_BACKENDS:
        raise PolicyConfigError(f"ORB_CONSTRAINT_STORE_BACKEND must be one of {STORE_BACKENDS}, received {backend!r}")

    log_dir = source.get("ORB_LOG_DIR", "").strip()
    store_path = source.get("ORB_CONSTRAINT_STORE_PATH", "").strip()
    seed_raw = source.get("ORB_SEED_DEFAULT_CONSTRAINTS")

    return PolicyConfig(
        log_dir=Path(log_dir) if log_dir else DEFAULT_LOG_DIR,
        store_backend=backend,
        store_path=Path(store_path) if store_path else DEFAULT_CONSTRAINT_STORE_PATH,
        seed_default_constraints=True if seed_raw is None else _is_truthy_env(seed_raw),
    )


__all__ = [
    "DEFAULT_CONSTRAINT_STORE_PATH",
    "DEFAULT_LOG_DIR",
    "PolicyConfig",
    "STORE_BACKENDS",
    "load_config",
]
