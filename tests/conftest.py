"""Shared test fixtures for the notionblog test suite."""

from __future__ import annotations

import pytest

from notionblog.config import NotionBlogConfig
from notionblog.converter.html_renderer import BlockHtmlRenderer
from notionblog.converter.markdown import MarkdownRenderer


class RecordingMetrics:
    """MetricsHook that keeps every data point for assertions."""

    def __init__(self) -> None:
        self.counters: list[tuple[str, int, dict | None]] = []
        self.timings: list[tuple[str, float, dict | None]] = []

    def increment(self, name, value=1, tags=None):
        self.counters.append((name, value, tags))

    def timing(self, name, ms, tags=None):
        self.timings.append((name, ms, tags))

    def count(self, name: str) -> int:
        return sum(value for n, value, _ in self.counters if n == name)


@pytest.fixture
def config() -> NotionBlogConfig:
    """Default test configuration with a dummy token."""
    return NotionBlogConfig(token="test_token_1234")


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def renderer(config: NotionBlogConfig) -> BlockHtmlRenderer:
    """Block-to-HTML renderer using the default test config."""
    return BlockHtmlRenderer(config)


@pytest.fixture
def md_renderer(config: NotionBlogConfig) -> MarkdownRenderer:
    """Block-to-Markdown renderer using the default test config."""
    return MarkdownRenderer(config)
