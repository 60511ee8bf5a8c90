# SPDX-License-Identifier: Apache-2.0
"""Policy foundation primitives."""

from orb.foundation.canonical import canonical_json
from orb.foundation.clock import hour_of, utc_now_iso

__all__ = [
    "canonical_json",
    "hour_of",
    "utc_now_iso",
]
