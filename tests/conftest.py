# SPDX-License-Identifier: Apache-2.0

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from orb.logger import reset_logger_cache  # noqa: E402

_ORB_ENV = (
    "ORB_CONSTRAINT_STORE_BACKEND",
    "ORB_CONSTRAINT_STORE_PATH",
    "ORB_SEED_DEFAULT_CONSTRAINTS",
)


@pytest.fixture(autouse=True)
def isolated_policy_env(tmp_path, monkeypatch):
    for name in _ORB_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ORB_LOG_DIR", str(tmp_path / "logs"))
    reset_logger_cache()
    yield
    reset_logger_cache()
