"""Tests for ExportOrchestrator.

The Notion side is mocked at the client boundary (``convert_page``) or, for
the end-to-end cases, at the PageAPI / BlockAPI wrappers.  Persistence uses
:class:`InMemoryExportStore`.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import httpx
import pytest
import yaml

from notionblog.client import NotionBlogClient
from notionblog.config import NotionBlogConfig
from notionblog.enrichment import SeoEnricher
from notionblog.errors import (
    NotionBlogAuthError,
    NotionBlogInvalidUrlError,
    NotionBlogNotFoundError,
    NotionBlogPageAccessError,
    NotionBlogQuotaExceededError,
    NotionBlogStorageError,
    NotionBlogValidationError,
)
from notionblog.exporter import ExportOrchestrator, _iso_timestamp
from notionblog.identity import Account, StaticIdentityProvider
from notionblog.models import ConversionWarning, Frontmatter, PageConversion, PageMetadata
from notionblog.quota import Plan
from notionblog.storage import InMemoryExportStore

PAGE_ID = "0123456789abcdef0123456789abcdef"
URL = f"https://www.notion.so/acme/My-Post-{PAGE_ID}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _conversion(title: str = "My Post", warnings=None) -> PageConversion:
    return PageConversion(
        page_id=PAGE_ID,
        metadata=PageMetadata(title=title),
        body_html="<p>Hi</p>\n",
        html="<h1>My Post</h1>\n<p>Hi</p>\n",
        markdown="Hi\n\n",
        warnings=list(warnings or []),
    )


def _mock_client(config: NotionBlogConfig | None = None, conversion=None) -> MagicMock:
    client = MagicMock()
    client.config = config or NotionBlogConfig(token="test_token_1234")
    client.convert_page.return_value = conversion or _conversion()
    return client


def _identity() -> StaticIdentityProvider:
    return StaticIdentityProvider({
        "tok-free": Account("user-free"),
        "tok-basic": Account("user-basic", Plan.BASIC),
        "tok-pro": Account("user-pro", Plan.PRO),
    })


def _enricher(handler, metrics=None) -> SeoEnricher:
    config = NotionBlogConfig(token="t", enrichment_api_key="ai-key", metrics=metrics)
    return SeoEnricher(config, client=httpx.Client(transport=httpx.MockTransport(handler)))


def _seed(store: InMemoryExportStore, user_id: str, n: int) -> None:
    fm = Frontmatter(title="t", description="d", slug="s", date="2026-01-01T00:00:00.000Z")
    for _ in range(n):
        store.create(user_id, URL, "t", "<p></p>", fm)


@pytest.fixture
def store() -> InMemoryExportStore:
    return InMemoryExportStore()


@pytest.fixture
def client() -> MagicMock:
    return _mock_client()


@pytest.fixture
def orchestrator(client, store) -> ExportOrchestrator:
    return ExportOrchestrator(client, store, _identity())


# ---------------------------------------------------------------------------
# export: happy path
# ---------------------------------------------------------------------------

class TestExport:
    def test_result_and_persisted_record(self, orchestrator, client, store):
        result = orchestrator.export(URL, "tok-free")

        client.convert_page.assert_called_once_with(PAGE_ID)
        assert result.title == "My Post"
        assert result.slug == "my-post"
        assert result.description == "My Post"
        assert result.html == "<h1>My Post</h1>\n<p>Hi</p>\n"
        assert result.warnings == []

        saved = store.get(result.export_id)
        assert saved is not None
        assert saved.user_id == "user-free"
        assert saved.notion_url == URL
        assert saved.html_content == result.html
        assert saved.frontmatter.slug == "my-post"
        assert saved.created_at == result.created_at

    def test_markdown_has_yaml_frontmatter(self, orchestrator):
        result = orchestrator.export(URL, "tok-free")
        assert result.markdown.startswith("---\n")
        _, header, body = result.markdown.split("---\n", 2)
        meta = yaml.safe_load(header)
        assert list(meta) == ["title", "description", "slug", "date"]
        assert meta["title"] == "My Post"
        assert meta["date"].endswith("Z")
        assert body == "\nHi\n\n"

    def test_bearer_prefix_accepted(self, orchestrator):
        assert orchestrator.export(URL, "Bearer tok-free").title == "My Post"

    def test_bare_page_id_accepted(self, orchestrator, client):
        orchestrator.export(PAGE_ID, "tok-free")
        client.convert_page.assert_called_once_with(PAGE_ID)

    def test_url_is_trimmed(self, orchestrator, store):
        result = orchestrator.export(f"  {URL}  ", "tok-free")
        assert store.get(result.export_id).notion_url == URL

    def test_conversion_warnings_passed_through(self, store):
        warning = ConversionWarning(code="UNSUPPORTED_BLOCK", message="x")
        client = _mock_client(conversion=_conversion(warnings=[warning]))
        result = ExportOrchestrator(client, store, _identity()).export(URL, "tok-free")
        assert result.warnings == [warning]

    def test_metrics(self, store, metrics):
        client = _mock_client(config=NotionBlogConfig(token="t", metrics=metrics))
        ExportOrchestrator(client, store, _identity()).export(URL, "tok-basic")
        assert ("notionblog.exports_total", 1, {"plan": "basic"}) in metrics.counters
        assert any(name == "notionblog.export_duration_ms" for name, _, _ in metrics.timings)


# ---------------------------------------------------------------------------
# export: rejections
# ---------------------------------------------------------------------------

class TestExportRejections:
    @pytest.mark.parametrize("url", ["", "   "])
    def test_blank_url(self, orchestrator, url):
        with pytest.raises(NotionBlogValidationError) as exc_info:
            orchestrator.export(url, "tok-free")
        assert exc_info.value.message == "Notion URL is required"

    @pytest.mark.parametrize("token", ["", "Bearer ", "unknown"])
    def test_unauthorized(self, orchestrator, client, token):
        with pytest.raises(NotionBlogAuthError) as exc_info:
            orchestrator.export(URL, token)
        assert exc_info.value.message == "Unauthorized"
        client.convert_page.assert_not_called()

    def test_invalid_url_fails_before_fetch(self, orchestrator, client, store):
        with pytest.raises(NotionBlogInvalidUrlError) as exc_info:
            orchestrator.export("https://example.com/blog/post", "tok-free")
        assert exc_info.value.message == "Invalid Notion URL format"
        client.convert_page.assert_not_called()
        assert len(store) == 0

    def test_free_quota_exhausted(self, orchestrator, client, store):
        _seed(store, "user-free", 5)
        with pytest.raises(NotionBlogQuotaExceededError) as exc_info:
            orchestrator.export(URL, "tok-free")
        assert exc_info.value.message == "Export limit reached. Please upgrade your plan."
        assert exc_info.value.context == {"plan": "free", "used": 5, "limit": 5}
        client.convert_page.assert_not_called()
        assert len(store) == 5

    def test_free_quota_last_slot(self, orchestrator, store):
        _seed(store, "user-free", 4)
        orchestrator.export(URL, "tok-free")
        assert store.count_since("user-free", datetime(2000, 1, 1, tzinfo=timezone.utc)) == 5

    def test_quota_counted_per_user(self, orchestrator, store):
        _seed(store, "someone-else", 10)
        orchestrator.export(URL, "tok-free")

    def test_pro_is_unlimited(self, orchestrator, store):
        _seed(store, "user-pro", 100)
        orchestrator.export(URL, "tok-pro")

    def test_page_access_error_propagates(self, orchestrator, client, store):
        client.convert_page.side_effect = NotionBlogPageAccessError(message="nope")
        with pytest.raises(NotionBlogPageAccessError):
            orchestrator.export(URL, "tok-free")
        assert len(store) == 0

    def test_storage_failure_is_wrapped(self, client):
        store = MagicMock()
        store.count_since.return_value = 0
        store.create.side_effect = RuntimeError("disk full")
        orchestrator = ExportOrchestrator(client, store, _identity())
        with pytest.raises(NotionBlogStorageError) as exc_info:
            orchestrator.export(URL, "tok-free")
        assert exc_info.value.message == "Failed to save export"
        assert isinstance(exc_info.value.cause, RuntimeError)


# ---------------------------------------------------------------------------
# export: enrichment
# ---------------------------------------------------------------------------

class TestExportEnrichment:
    def test_enriched_metadata_used(self, client, store):
        content = json.dumps({"title": "SEO Title", "description": "Desc", "slug": "seo-title"})

        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

        orchestrator = ExportOrchestrator(client, store, _identity(), enricher=_enricher(handler))
        result = orchestrator.export(URL, "tok-free")

        assert (result.title, result.description, result.slug) == ("SEO Title", "Desc", "seo-title")
        assert result.warnings == []
        assert store.get(result.export_id).title == "SEO Title"
        # HTML is never rewritten by enrichment
        assert result.html == _conversion().html

    def test_failed_enrichment_warns_and_falls_back(self, client, store):
        orchestrator = ExportOrchestrator(
            client, store, _identity(), enricher=_enricher(lambda r: httpx.Response(500))
        )
        result = orchestrator.export(URL, "tok-free")
        assert result.slug == "my-post"
        assert [w.code for w in result.warnings] == ["ENRICHMENT_FALLBACK"]

    @pytest.mark.parametrize("content", [["{}"], 7, {"title": "x"}])
    def test_non_text_completion_does_not_abort_export(self, client, store, content):
        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

        orchestrator = ExportOrchestrator(client, store, _identity(), enricher=_enricher(handler))
        result = orchestrator.export(URL, "tok-free")
        assert (result.title, result.slug) == ("My Post", "my-post")
        assert [w.code for w in result.warnings] == ["ENRICHMENT_FALLBACK"]
        assert store.get(result.export_id) is not None

    def test_disabled_enrichment_does_not_warn(self, orchestrator):
        assert orchestrator.export(URL, "tok-free").warnings == []


# ---------------------------------------------------------------------------
# Export management
# ---------------------------------------------------------------------------

class TestExportManagement:
    def test_get_own_export(self, orchestrator):
        result = orchestrator.export(URL, "tok-free")
        assert orchestrator.get_export(result.export_id, "tok-free").id == result.export_id

    def test_get_foreign_export_is_not_found(self, orchestrator):
        result = orchestrator.export(URL, "tok-free")
        with pytest.raises(NotionBlogNotFoundError):
            orchestrator.get_export(result.export_id, "tok-basic")

    def test_list_newest_first_and_limited(self, orchestrator):
        ids = [orchestrator.export(URL, "tok-pro").export_id for _ in range(3)]
        listed = orchestrator.list_exports("tok-pro", limit=2)
        assert len(listed) == 2
        assert {e.id for e in listed} <= set(ids)
        assert listed[0].created_at >= listed[1].created_at

    def test_list_only_own(self, orchestrator):
        orchestrator.export(URL, "tok-free")
        assert orchestrator.list_exports("tok-basic") == []

    def test_delete(self, orchestrator, store):
        result = orchestrator.export(URL, "tok-free")
        orchestrator.delete(result.export_id, "tok-free")
        assert store.get(result.export_id) is None

    def test_delete_foreign_export(self, orchestrator, store):
        result = orchestrator.export(URL, "tok-free")
        with pytest.raises(NotionBlogNotFoundError) as exc_info:
            orchestrator.delete(result.export_id, "tok-basic")
        assert exc_info.value.message == "Export not found"
        assert store.get(result.export_id) is not None

    def test_delete_unknown(self, orchestrator):
        with pytest.raises(NotionBlogNotFoundError):
            orchestrator.delete("missing", "tok-free")

    def test_management_requires_auth(self, orchestrator):
        with pytest.raises(NotionBlogAuthError):
            orchestrator.list_exports("bad")


# ---------------------------------------------------------------------------
# End to end through NotionBlogClient
# ---------------------------------------------------------------------------

class TestEndToEnd:
    def _client(self) -> NotionBlogClient:
        client = NotionBlogClient(token="test_token_1234", include_styles=False)
        client._pages.retrieve = MagicMock(return_value={
            "id": PAGE_ID,
            "icon": {"type": "emoji", "emoji": "🚀"},
            "properties": {
                "title": {"type": "title", "title": [{"type": "text", "plain_text": "Launch Notes"}]},
            },
        })
        client._blocks.list_children = MagicMock(return_value={
            "results": [
                {
                    "id": "h",
                    "type": "heading_1",
                    "has_children": False,
                    "heading_1": {"rich_text": [{"type": "text", "plain_text": "Intro"}]},
                },
                {
                    "id": "p",
                    "type": "paragraph",
                    "has_children": False,
                    "paragraph": {"rich_text": [{"type": "text", "plain_text": "We shipped."}]},
                },
            ],
            "has_more": False,
            "next_cursor": None,
        })
        return client

    def test_full_export(self, store):
        client = self._client()
        result = ExportOrchestrator(client, store, _identity()).export(URL, "tok-free")
        assert result.html == (
            '<div class="page-icon">🚀</div>\n'
            "<h1>Launch Notes</h1>\n"
            '<h1 id="intro">Intro</h1>\n'
            "<p>We shipped.</p>\n"
        )
        assert result.slug == "launch-notes"
        assert "# Intro" in result.markdown
        assert "We shipped\\." in result.markdown
        client.close()

    def test_inaccessible_page(self, store):
        client = self._client()
        client._pages.retrieve.side_effect = NotionBlogNotFoundError(message="not shared")
        with pytest.raises(NotionBlogPageAccessError) as exc_info:
            ExportOrchestrator(client, store, _identity()).export(URL, "tok-free")
        assert "shared with your integration" in exc_info.value.message
        assert len(store) == 0
        client.close()


# ---------------------------------------------------------------------------
# Resource management
# ---------------------------------------------------------------------------

class TestOrchestratorClose:
    def test_closes_enricher_it_created(self, client, store):
        orchestrator = ExportOrchestrator(client, store, _identity())
        orchestrator.close()
        assert orchestrator._enricher._client.is_closed

    def test_leaves_injected_enricher_open(self, client, store):
        enricher = _enricher(lambda r: httpx.Response(200, json={}))
        ExportOrchestrator(client, store, _identity(), enricher=enricher).close()
        assert not enricher._client.is_closed
        enricher.close()

    def test_context_manager(self, client, store):
        with ExportOrchestrator(client, store, _identity()) as orchestrator:
            orchestrator.export(URL, "tok-free")
        assert orchestrator._enricher._client.is_closed
        client.close.assert_not_called()


def test_iso_timestamp():
    moment = datetime(2026, 3, 4, 5, 6, 7, 891000, tzinfo=timezone.utc)
    assert _iso_timestamp(moment) == "2026-03-04T05:06:07.891Z"
