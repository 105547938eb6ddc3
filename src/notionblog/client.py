"""Synchronous notionblog client.

:class:`NotionBlogClient` reads a shared Notion page and converts it to
styled HTML and Markdown.

Usage::

    from notionblog import NotionBlogClient

    with NotionBlogClient(token="secret_xxx") as client:
        conversion = client.convert_page("https://www.notion.so/My-Post-<id>")
        print(conversion.html)
"""

from __future__ import annotations

from typing import Any

from notionblog.config import NotionBlogConfig
from notionblog.converter.html_renderer import BlockHtmlRenderer
from notionblog.converter.markdown import MarkdownRenderer
from notionblog.converter.page_metadata import extract_metadata, render_page_header
from notionblog.converter.styles import STYLESHEET
from notionblog.errors import NotionBlogError, NotionBlogInvalidUrlError, NotionBlogPageAccessError
from notionblog.models import FetchResult, PageConversion
from notionblog.notion_api.blocks import BlockAPI
from notionblog.notion_api.pages import PageAPI
from notionblog.notion_api.transport import NotionTransport
from notionblog.notion_api.tree import BlockTreeFetcher
from notionblog.observability import get_logger, log_event
from notionblog.utils.page_id import extract_page_id

log = get_logger("notionblog.client")

PAGE_ACCESS_MESSAGE = (
    "Failed to fetch Notion page. Make sure the page is shared with your integration."
)


def resolve_page_id(url_or_id: str) -> str:
    """Return the dash-free page id in *url_or_id*.

    Raises
    ------
    NotionBlogInvalidUrlError
        If no page id can be found.
    """
    page_id = extract_page_id(url_or_id)
    if page_id is None:
        raise NotionBlogInvalidUrlError(
            message="Invalid Notion URL format",
            context={"url": url_or_id},
        )
    return page_id


def page_access_error(page_id: str, exc: NotionBlogError) -> NotionBlogPageAccessError:
    log.error(
        "Failed to fetch page",
        extra=log_event("fetch_page", page_id=page_id, error_code=exc.code, error=exc.message),
    )
    return NotionBlogPageAccessError(
        message=PAGE_ACCESS_MESSAGE,
        context={"page_id": page_id, "error_code": exc.code},
        cause=exc,
    )


def assemble_conversion(
    config: NotionBlogConfig,
    page_id: str,
    page: dict[str, Any],
    fetched: FetchResult,
) -> PageConversion:
    """Render a fetched page into a :class:`PageConversion`.

    The HTML is the stylesheet (when ``config.include_styles``), the page
    icon and ``<h1>`` title, then the rendered block tree.
    """
    metadata = extract_metadata(page)

    html_renderer = BlockHtmlRenderer(config)
    body_html = html_renderer.render_blocks(fetched.blocks)
    markdown = MarkdownRenderer(config).render_blocks(fetched.blocks)

    html = STYLESHEET + "\n" if config.include_styles else ""
    html += render_page_header(metadata) + body_html

    warnings = [*fetched.warnings, *html_renderer.warnings]
    log.info(
        "Converted page",
        extra=log_event(
            "convert_page",
            page_id=page_id,
            top_level_blocks=len(fetched.blocks),
            html_chars=len(html),
            warnings=len(warnings),
        ),
    )
    return PageConversion(
        page_id=page_id,
        metadata=metadata,
        body_html=body_html,
        html=html,
        markdown=markdown,
        warnings=warnings,
    )


class NotionBlogClient:
    """Synchronous notionblog client.

    Parameters
    ----------
    token:
        Notion integration token.  **Required.**
    **kwargs:
        All remaining keyword arguments are forwarded to
        :class:`NotionBlogConfig`.
    """

    def __init__(self, token: str, **kwargs: Any) -> None:
        self._config = NotionBlogConfig(token=token, **kwargs)
        self._transport = NotionTransport(self._config)
        self._pages = PageAPI(self._transport)
        self._blocks = BlockAPI(self._transport, page_size=self._config.page_size)
        self._fetcher = BlockTreeFetcher(
            self._blocks,
            max_depth=self._config.max_fetch_depth,
            metrics=self._config.metrics,
        )

    @property
    def config(self) -> NotionBlogConfig:
        return self._config

    def fetch_page(self, page_id: str) -> dict[str, Any]:
        """Retrieve the raw page object."""
        return self._pages.retrieve(page_id)

    def fetch_blocks(self, page_id: str) -> FetchResult:
        """Fetch the page's whole block tree (up to ``max_fetch_depth``)."""
        return self._fetcher.fetch_all(page_id)

    def convert_page(self, url_or_id: str) -> PageConversion:
        """Fetch a page and render it to HTML and Markdown.

        Parameters
        ----------
        url_or_id:
            A Notion page URL in any supported shape, or a bare page id.

        Returns
        -------
        PageConversion

        Raises
        ------
        NotionBlogInvalidUrlError
            If no page id can be extracted.
        NotionBlogPageAccessError
            If the page object itself cannot be fetched.
        """
        page_id = resolve_page_id(url_or_id)
        log.info("Fetching Notion page", extra=log_event("convert_page", page_id=page_id))

        fetched = self.fetch_blocks(page_id)
        try:
            page = self.fetch_page(page_id)
        except NotionBlogError as exc:
            raise page_access_error(page_id, exc) from exc

        return assemble_conversion(self._config, page_id, page, fetched)

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP transport."""
        self._transport.close()

    def __enter__(self) -> NotionBlogClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
