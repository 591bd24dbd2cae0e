"""Tests for metrics helpers."""
from __future__ import annotations

import logging
from typing import Any, Dict

from profitbot.observability import metrics
from profitbot.observability import tracing


class _DummyTrace:
    def __init__(self, name: str, metadata: Dict[str, Any]):
        self.name = name
        self.metadata = metadata
        self.ended = False

    def end(self) -> None:
        self.ended = True


class _DummyClient:
    def __init__(self):
        self.traces: list[_DummyTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None):
        trace = _DummyTrace(name, metadata or {})
        self.traces.append(trace)
        return trace


def test_log_metric_closes_trace(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    metrics.log_metric("calendar.toggle.done", 1, metadata={"identity": "plan_abc"})

    assert dummy_client.traces, "Metric call should record a trace"
    recorded = dummy_client.traces[0]
    assert recorded.name == "metric:calendar.toggle.done"
    assert recorded.metadata["value"] == 1
    assert recorded.metadata["identity"] == "plan_abc"
    assert recorded.ended is True


def test_log_metric_is_noop_without_client(monkeypatch, caplog) -> None:
    lookups: list[int] = []

    def _no_client():
        lookups.append(1)
        return None

    monkeypatch.setattr(tracing, "get_opik_client", _no_client)
    caplog.set_level(logging.DEBUG, logger="profitbot.observability.metrics")

    assert metrics.log_metric("plan.generate.success", 0) is None
    assert lookups == [1]
    with tracing.trace("metric:plan.generate.success") as opened:
        assert opened is None
    assert lookups == [1, 1]
    assert "metric plan.generate.success=0" in caplog.text
