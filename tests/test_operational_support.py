from __future__ import annotations

import json
import logging

from infra.logging_config import setup_logging
from infra.operational_support import (
    REDACTED,
    REDACTED_EMAIL,
    OperationalSupport,
    bind_trace_id,
    current_trace_id,
)


def test_operational_support_emits_redacted_structured_event(tmp_path):
    events_path = tmp_path / "support-events.jsonl"
    support = OperationalSupport(events_path=events_path)

    with bind_trace_id("inc-test-123"):
        trace_id = support.emit_event(
            event_type="support.test",
            message="token=abc123 alice@example.com",
            data={
                "password": "StrongPass123",
                "contact": "alice@example.com",
                "nested": {"api_token": "secret-value"},
            },
        )

    assert trace_id == "inc-test-123"
    rows = events_path.read_text(encoding="utf-8").splitlines()
    assert len(rows) == 1
    payload = json.loads(rows[0])
    assert payload["trace_id"] == "inc-test-123"
    assert payload["event_type"] == "support.test"
    assert "abc123" not in payload["message"]
    assert "alice@example.com" not in payload["message"]
    assert payload["data"]["password"] == REDACTED
    assert payload["data"]["nested"]["api_token"] == REDACTED
    assert payload["data"]["contact"] == REDACTED_EMAIL


def test_bind_trace_id_nests_and_restores():
    assert current_trace_id() is None
    with bind_trace_id() as outer:
        assert outer.startswith("op-")
        with bind_trace_id() as inner:
            assert inner == outer
        with bind_trace_id("explicit") as explicit:
            assert current_trace_id() == explicit == "explicit"
        assert current_trace_id() == outer
    assert current_trace_id() is None


def test_read_events_filters_by_trace_and_type(tmp_path):
    support = OperationalSupport(events_path=tmp_path / "events.jsonl")
    support.emit_event(event_type="allocation.side_effect_failed", message="a", trace_id="t-1")
    support.emit_event(event_type="allocation.side_effect_skipped", message="b", trace_id="t-1")
    support.emit_event(event_type="allocation.side_effect_failed", message="c", trace_id="t-2")
    with support.events_path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n")

    assert [e["message"] for e in support.read_events(trace_id="t-1")] == ["a", "b"]
    assert [e["message"] for e in support.read_events(event_type="allocation.side_effect_failed")] == ["a", "c"]


def test_setup_logging_writes_trace_ids_to_rotating_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path)
        with bind_trace_id("trace-log-1"):
            logging.getLogger("core.services.workspace").info("hello from the workspace")
        for handler in root.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "trace=trace-log-1" in text
        assert "hello from the workspace" in text
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
