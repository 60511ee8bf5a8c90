# SPDX-License-Identifier: Apache-2.0
"""UTC clock helpers shared by decision results and the event boundary."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now_iso(now: datetime | None = None) -> str:
    """Second-precision UTC timestamp with a ``Z`` suffix.

    Pass ``now`` to pin the clock; naive values are taken to be UTC already.
    """

    moment = now if now is not None else datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def hour_of(value: object) -> int | None:
    """Best-effort hour extraction from an ISO timestamp, ``HH:MM`` string, datetime or int.

    Returns ``None`` when the value cannot be interpreted.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.hour
    if isinstance(value, int):
        return value if 0 <= value <= 23 else None
    if not isinstance(value, str) or not value.strip():
        return None

    raw = value.strip()
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).hour
    except ValueError:
        pass
    head = raw.split(":", 1)[0]
    if head.isdigit() and 0 <= int(head) <= 23:
        return int(head)
    return None


__all__ = ["utc_now_iso", "hour_of"]
