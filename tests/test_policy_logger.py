# SPDX-License-Identifier: Apache-2.0

import json

from orb.interfaces.ilogger import ILogger
from orb.logger import AUDIT_LEVEL, JSONLogger, get_logger, redact_context


def _entries(logger: JSONLogger) -> list[dict]:
    return [json.loads(line) for line in logger.log_path.read_text(encoding="utf-8").splitlines()]


def test_logger_writes_json_lines_under_configured_dir(tmp_path) -> None:
    logger = get_logger("policy")

    logger.info("constraint set registered", set_id="ops")

    assert isinstance(logger, ILogger)
    assert logger.log_path == tmp_path / "logs" / "policy.jsonl"
    entry = _entries(logger)[0]
    assert set(entry) == {"ts", "lvl", "cmp", "msg", "ctx"}
    assert entry["lvl"] == "INFO"
    assert entry["cmp"] == "policy"
    assert entry["ctx"] == {"set_id": "ops"}


def test_audit_entries_use_the_audit_level(tmp_path) -> None:
    logger = get_logger("audit", log_file=tmp_path / "audit.jsonl")

    logger.audit("luna_decision", actor="mav", outcome="deny", triggered=["c-1"])

    entry = _entries(logger)[0]
    assert AUDIT_LEVEL == 25
    assert entry["lvl"] == "AUDIT"
    assert entry["msg"] == "luna_decision"
    assert entry["ctx"] == {"action": "luna_decision", "actor": "mav", "outcome": "deny", "triggered": ["c-1"]}


def test_sensitive_keys_are_redacted(tmp_path) -> None:
    logger = get_logger("policy", log_file=tmp_path / "redact.jsonl")

    logger.info("session opened", token="abc", user_id="u-1")

    assert _entries(logger)[0]["ctx"] == {"token": "<redacted>", "user_id": "u-1"}
    assert redact_context({"password": "p", "mode": "mars"}, {"mode"}) == {"password": "p", "mode": "<redacted>"}


def test_errors_carry_exception_details(tmp_path) -> None:
    logger = get_logger("policy", log_file=tmp_path / "errors.jsonl")
    try:
        raise RuntimeError("bus down")
    except RuntimeError as exc:
        logger.error("event sink rejected decision event", error=exc, event_type="luna_deny")

    entry = _entries(logger)[0]
    assert entry["lvl"] == "ERROR"
    assert entry["ctx"]["error"] == "RuntimeError('bus down')"
    assert "Traceback" in entry["ctx"]["exc"]


def test_loggers_are_cached_per_component() -> None:
    assert get_logger("policy") is get_logger("policy")
    assert get_logger("policy") is not get_logger("store")


def test_redaction_reaches_nested_metadata() -> None:
    scrubbed = redact_context({"metadata": {"Auth_Token": "t", "items": [{"api_key": "k"}]}, "mode": "mars"})

    assert scrubbed == {"metadata": {"Auth_Token": "<redacted>", "items": [{"api_key": "<redacted>"}]}, "mode": "mars"}
