"""Tests for the MetricsHook protocol and its wiring.

Covers:
  - Protocol conformance (isinstance, structural subtyping)
  - NoopMetricsHook behaviour
  - resolve_metrics
  - Every documented metric name is emitted somewhere in the package
"""
from __future__ import annotations

from pathlib import Path

import pytest

from notionblog.observability.metrics import MetricsHook, NoopMetricsHook, resolve_metrics

PACKAGE_ROOT = Path(__file__).resolve().parents[2] / "src" / "notionblog"

DOCUMENTED_METRICS = [
    "notionblog.requests_total",
    "notionblog.request_duration_ms",
    "notionblog.blocks_fetched_total",
    "notionblog.fetch_failures_total",
    "notionblog.unsupported_blocks_total",
    "notionblog.enrichment_fallbacks_total",
    "notionblog.enrichment_duration_ms",
    "notionblog.exports_total",
    "notionblog.export_duration_ms",
]


class TestProtocol:
    def test_noop_satisfies_protocol(self):
        assert isinstance(NoopMetricsHook(), MetricsHook)

    def test_recording_hook_satisfies_protocol(self, metrics):
        assert isinstance(metrics, MetricsHook)

    def test_object_without_methods_does_not(self):
        assert not isinstance(object(), MetricsHook)


class TestNoopMetricsHook:
    def test_methods_return_none(self):
        hook = NoopMetricsHook()
        assert hook.increment("x") is None
        assert hook.increment("x", 3, tags={"a": "b"}) is None
        assert hook.timing("y", 1.5) is None
        assert hook.timing("y", 1.5, tags={"a": "b"}) is None

    def test_has_no_instance_dict(self):
        with pytest.raises(AttributeError):
            NoopMetricsHook().extra = 1


class TestResolveMetrics:
    def test_none_gives_noop(self):
        assert isinstance(resolve_metrics(None), NoopMetricsHook)

    def test_hook_passed_through(self, metrics):
        assert resolve_metrics(metrics) is metrics


@pytest.mark.parametrize("name", DOCUMENTED_METRICS)
def test_metric_name_emitted_in_source(name):
    sources = [
        p.read_text(encoding="utf-8")
        for p in PACKAGE_ROOT.rglob("*.py")
        if p.name != "metrics.py"
    ]
    assert any(f'"{name}"' in src for src in sources)
