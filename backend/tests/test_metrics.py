"""Tests for metrics helpers."""
from __future__ import annotations

from typing import Any, Dict

from family_scheduler.observability import metrics, tracing


class _RecordedTrace:
    def __init__(self, name: str, metadata: Dict[str, Any]):
        self.name = name
        self.metadata = metadata
        self.ended = False

    def end(self) -> None:
        self.ended = True


class _RecordingClient:
    def __init__(self):
        self.traces: list[_RecordedTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None):
        recorded = _RecordedTrace(name, metadata or {})
        self.traces.append(recorded)
        return recorded


def test_turn_outcome_metric_is_recorded_as_closed_trace(monkeypatch) -> None:
    recorder = _RecordingClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: recorder)

    metrics.log_metric("turn.days_merged", 3, metadata={"recovered": True})

    assert len(recorder.traces) == 1
    recorded = recorder.traces[0]
    assert recorded.name == "metric:turn.days_merged"
    assert recorded.metadata == {"value": 3, "recovered": True}
    assert recorded.ended is True


def test_metric_without_tracing_is_silent(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    metrics.log_metric("proxy.chat.status", 200)
