"""Metrics hook protocol and its no-op default.

Callers route counters and timings to their own backend by passing any
object that satisfies :class:`MetricsHook` as ``NotionBlogConfig.metrics``.

Emitted metric names:

* ``notionblog.requests_total``             -- counter, tags: method, status
* ``notionblog.request_duration_ms``        -- timing, tags: method, status
* ``notionblog.blocks_fetched_total``       -- counter
* ``notionblog.fetch_failures_total``       -- counter
* ``notionblog.unsupported_blocks_total``   -- counter, tags: block_type
* ``notionblog.enrichment_fallbacks_total`` -- counter, tags: reason
* ``notionblog.enrichment_duration_ms``     -- timing
* ``notionblog.exports_total``              -- counter, tags: plan
* ``notionblog.export_duration_ms``         -- timing
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol every metrics backend must satisfy.

    *tags* map string keys to string values; backends translate them into
    their own labelling scheme.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Add *value* to the counter *name*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...


class NoopMetricsHook:
    """Discards every data point.  Used when no backend is configured."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(hook: Any | None) -> MetricsHook:
    """Return *hook*, or a :class:`NoopMetricsHook` when it is ``None``."""
    return hook if hook is not None else NoopMetricsHook()
