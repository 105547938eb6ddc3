"""Request-level export workflow.

:class:`ExportOrchestrator` turns a user-supplied Notion URL into a stored
:class:`~notionblog.models.Export`::

    authenticate -> check quota -> resolve page id -> fetch + render
        -> enrich SEO metadata (optional) -> persist -> ExportResult

Errors that abort an export are raised as :class:`NotionBlogError`
subclasses with user-facing messages.  Enrichment never aborts an export.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone

from notionblog.client import NotionBlogClient, resolve_page_id
from notionblog.converter.markdown import render_document
from notionblog.enrichment import SeoEnricher
from notionblog.errors import (
    NotionBlogAuthError,
    NotionBlogError,
    NotionBlogNotFoundError,
    NotionBlogStorageError,
    NotionBlogValidationError,
)
from notionblog.identity import Account, IdentityProvider
from notionblog.models import ConversionWarning, Export, ExportResult, Frontmatter
from notionblog.observability import get_logger, log_event, resolve_metrics
from notionblog.quota import QuotaPolicy, start_of_month
from notionblog.storage import ExportStore

log = get_logger("notionblog.exporter")


def _iso_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class ExportOrchestrator:
    """Runs exports on behalf of authenticated callers.

    Parameters
    ----------
    client:
        Notion client used to fetch and render pages.
    store:
        Where exports are persisted and counted.
    identity:
        Resolves access tokens to accounts.
    quota:
        Monthly limits per plan.  Defaults to :class:`QuotaPolicy`.
    enricher:
        SEO metadata source.  Defaults to a :class:`SeoEnricher` built from
        the client's configuration.
    """

    def __init__(
        self,
        client: NotionBlogClient,
        store: ExportStore,
        identity: IdentityProvider,
        quota: QuotaPolicy | None = None,
        enricher: SeoEnricher | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._identity = identity
        self._quota = quota or QuotaPolicy()
        self._owns_enricher = enricher is None
        self._enricher = enricher or SeoEnricher(client.config)
        self._metrics = resolve_metrics(client.config.metrics)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, notion_url: str, access_token: str) -> ExportResult:
        """Convert and persist a Notion page.

        Parameters
        ----------
        notion_url:
            Any supported Notion page URL shape, or a bare page id.
        access_token:
            The caller's access token.

        Returns
        -------
        ExportResult

        Raises
        ------
        NotionBlogValidationError
            The URL is blank.
        NotionBlogAuthError
            The access token is not recognised.
        NotionBlogQuotaExceededError
            The caller's plan limit for this month is used up.
        NotionBlogInvalidUrlError
            No page id could be extracted from the URL.
        NotionBlogPageAccessError
            The page could not be fetched.
        NotionBlogStorageError
            The export could not be saved.
        """
        if not notion_url or not notion_url.strip():
            raise NotionBlogValidationError(
                message="Notion URL is required",
                context={"field": "notion_url"},
            )
        notion_url = notion_url.strip()

        account = self._authenticate(access_token)
        used = self._store.count_since(account.user_id, start_of_month())
        self._quota.check(account.plan, used)

        page_id = resolve_page_id(notion_url)
        start = time.monotonic()

        conversion = self._client.convert_page(page_id)
        title = conversion.metadata.title
        warnings = list(conversion.warnings)

        seo = self._enricher.enrich(title, conversion.html)
        if self._enricher.enabled and seo.source == "fallback":
            warnings.append(
                ConversionWarning(
                    code="ENRICHMENT_FALLBACK",
                    message="SEO enrichment failed; metadata derived from the page title",
                    context={"page_id": page_id},
                )
            )

        frontmatter = Frontmatter(
            title=seo.title,
            description=seo.description,
            slug=seo.slug,
            date=_iso_timestamp(datetime.now(timezone.utc)),
        )
        markdown = render_document(frontmatter, conversion.markdown)
        export = self._persist(account, notion_url, seo.title, conversion.html, frontmatter, markdown)

        elapsed_ms = (time.monotonic() - start) * 1000
        self._metrics.increment("notionblog.exports_total", tags={"plan": account.plan.value})
        self._metrics.timing("notionblog.export_duration_ms", elapsed_ms)
        log.info(
            "Export saved",
            extra=log_event(
                "export",
                export_id=export.id,
                user_id=account.user_id,
                page_id=page_id,
                html_chars=len(export.html_content),
                warnings=len(warnings),
                duration_ms=round(elapsed_ms, 1),
            ),
        )

        return ExportResult(
            export_id=export.id,
            title=seo.title,
            description=seo.description,
            slug=seo.slug,
            html=export.html_content,
            markdown=export.markdown_content,
            created_at=export.created_at,
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Export management
    # ------------------------------------------------------------------

    def get_export(self, export_id: str, access_token: str) -> Export:
        """Return one of the caller's exports.

        Raises
        ------
        NotionBlogNotFoundError
            The export does not exist or belongs to someone else.
        """
        account = self._authenticate(access_token)
        return self._owned(export_id, account)

    def list_exports(self, access_token: str, limit: int = 10) -> list[Export]:
        """The caller's most recent exports, newest first."""
        account = self._authenticate(access_token)
        return self._store.list_for_user(account.user_id, limit=limit)

    def delete(self, export_id: str, access_token: str) -> None:
        """Delete one of the caller's exports.

        Raises
        ------
        NotionBlogNotFoundError
            The export does not exist or belongs to someone else.
        """
        account = self._authenticate(access_token)
        self._owned(export_id, account)
        self._store.delete(export_id)
        log.info(
            "Export deleted",
            extra=log_event("delete_export", export_id=export_id, user_id=account.user_id),
        )

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the enrichment HTTP client if this orchestrator created it.

        The Notion client and any injected enricher belong to the caller.
        """
        if self._owns_enricher:
            self._enricher.close()

    def __enter__(self) -> ExportOrchestrator:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _authenticate(self, access_token: str) -> Account:
        account = self._identity.authenticate(access_token)
        if account is None:
            raise NotionBlogAuthError(message="Unauthorized")
        return account

    def _owned(self, export_id: str, account: Account) -> Export:
        export = self._store.get(export_id)
        if export is None or export.user_id != account.user_id:
            raise NotionBlogNotFoundError(
                message="Export not found",
                context={"export_id": export_id},
            )
        return export

    def _persist(
        self,
        account: Account,
        notion_url: str,
        title: str,
        html: str,
        frontmatter: Frontmatter,
        markdown: str,
    ) -> Export:
        try:
            return self._store.create(
                user_id=account.user_id,
                notion_url=notion_url,
                title=title,
                html_content=html,
                frontmatter=frontmatter,
                markdown_content=markdown,
            )
        except NotionBlogError:
            raise
        except Exception as exc:
            log.error(
                "Failed to save export",
                extra=log_event("export", user_id=account.user_id, error=str(exc)),
            )
            raise NotionBlogStorageError(
                message="Failed to save export",
                context={"user_id": account.user_id},
                cause=exc,
            ) from exc
