"""notionblog: export shared Notion pages as blog-ready HTML and Markdown.

Public re-exports
-----------------

* **Clients:** :class:`NotionBlogClient`, :class:`AsyncNotionBlogClient`
* **Workflow:** :class:`ExportOrchestrator`, :class:`SeoEnricher`,
  :class:`QuotaPolicy`, :class:`InMemoryExportStore`,
  :class:`StaticIdentityProvider`
* **Configuration:** :class:`NotionBlogConfig`
* **Errors:** Every :class:`NotionBlogError` subclass and :class:`ErrorCode`
* **Models:** Blocks, spans, results and export records

Usage::

    from notionblog import NotionBlogClient

    with NotionBlogClient(token="secret_xxx") as client:
        conversion = client.convert_page("https://www.notion.so/Post-<id>")
"""

from __future__ import annotations

# ── Clients ────────────────────────────────────────────────────────────
from notionblog.async_client import AsyncNotionBlogClient
from notionblog.client import NotionBlogClient

# ── Configuration ───────────────────────────────────────────────────────
from notionblog.config import MAX_FETCH_DEPTH, NotionBlogConfig

# ── Workflow ────────────────────────────────────────────────────────────
from notionblog.enrichment import SeoEnricher, fallback_metadata

# ── Errors ──────────────────────────────────────────────────────────────
from notionblog.errors import (
    ErrorCode,
    NotionBlogAuthError,
    NotionBlogEnrichmentError,
    NotionBlogError,
    NotionBlogInvalidUrlError,
    NotionBlogNetworkError,
    NotionBlogNotFoundError,
    NotionBlogPageAccessError,
    NotionBlogPermissionError,
    NotionBlogQuotaExceededError,
    NotionBlogRateLimitError,
    NotionBlogStorageError,
    NotionBlogValidationError,
)
from notionblog.exporter import ExportOrchestrator
from notionblog.identity import Account, IdentityProvider, StaticIdentityProvider

# ── Models ──────────────────────────────────────────────────────────────
from notionblog.models import (
    Annotations,
    Block,
    BlockType,
    ConversionWarning,
    Export,
    ExportResult,
    ExportStatus,
    FetchResult,
    Frontmatter,
    ListKind,
    ListRun,
    PageConversion,
    PageMetadata,
    RichTextSpan,
    SeoMetadata,
)
from notionblog.quota import Plan, QuotaPolicy
from notionblog.storage import ExportStore, InMemoryExportStore

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Clients
    "NotionBlogClient",
    "AsyncNotionBlogClient",
    # Configuration
    "NotionBlogConfig",
    "MAX_FETCH_DEPTH",
    # Workflow
    "ExportOrchestrator",
    "SeoEnricher",
    "fallback_metadata",
    "Plan",
    "QuotaPolicy",
    "ExportStore",
    "InMemoryExportStore",
    "Account",
    "IdentityProvider",
    "StaticIdentityProvider",
    # Errors
    "NotionBlogError",
    "ErrorCode",
    "NotionBlogValidationError",
    "NotionBlogAuthError",
    "NotionBlogPermissionError",
    "NotionBlogNotFoundError",
    "NotionBlogRateLimitError",
    "NotionBlogNetworkError",
    "NotionBlogInvalidUrlError",
    "NotionBlogQuotaExceededError",
    "NotionBlogPageAccessError",
    "NotionBlogEnrichmentError",
    "NotionBlogStorageError",
    # Models
    "Annotations",
    "RichTextSpan",
    "Block",
    "BlockType",
    "ListKind",
    "ListRun",
    "FetchResult",
    "ConversionWarning",
    "PageMetadata",
    "SeoMetadata",
    "Frontmatter",
    "PageConversion",
    "Export",
    "ExportStatus",
    "ExportResult",
]
