"""Asynchronous notionblog client.

:class:`AsyncNotionBlogClient` mirrors :class:`NotionBlogClient` but every
I/O method is a coroutine.  Sibling subtrees are fetched concurrently.

Usage::

    import asyncio
    from notionblog import AsyncNotionBlogClient

    async def main():
        async with AsyncNotionBlogClient(token="secret_xxx") as client:
            conversion = await client.convert_page("<page url>")
            print(conversion.metadata.title)

    asyncio.run(main())
"""

from __future__ import annotations

from typing import Any

from notionblog.client import assemble_conversion, page_access_error, resolve_page_id
from notionblog.config import NotionBlogConfig
from notionblog.errors import NotionBlogError
from notionblog.models import FetchResult, PageConversion
from notionblog.notion_api.blocks import AsyncBlockAPI
from notionblog.notion_api.pages import AsyncPageAPI
from notionblog.notion_api.transport import AsyncNotionTransport
from notionblog.notion_api.tree import AsyncBlockTreeFetcher
from notionblog.observability import get_logger, log_event

log = get_logger("notionblog.client")


class AsyncNotionBlogClient:
    """Asynchronous notionblog client.

    Parameters
    ----------
    token:
        Notion integration token.  **Required.**
    **kwargs:
        Forwarded to :class:`NotionBlogConfig`.
    """

    def __init__(self, token: str, **kwargs: Any) -> None:
        self._config = NotionBlogConfig(token=token, **kwargs)
        self._transport = AsyncNotionTransport(self._config)
        self._pages = AsyncPageAPI(self._transport)
        self._blocks = AsyncBlockAPI(self._transport, page_size=self._config.page_size)
        self._fetcher = AsyncBlockTreeFetcher(
            self._blocks,
            max_depth=self._config.max_fetch_depth,
            metrics=self._config.metrics,
        )

    @property
    def config(self) -> NotionBlogConfig:
        return self._config

    async def fetch_page(self, page_id: str) -> dict[str, Any]:
        return await self._pages.retrieve(page_id)

    async def fetch_blocks(self, page_id: str) -> FetchResult:
        return await self._fetcher.fetch_all(page_id)

    async def convert_page(self, url_or_id: str) -> PageConversion:
        """Fetch a page and render it (async).

        See :meth:`NotionBlogClient.convert_page`.
        """
        page_id = resolve_page_id(url_or_id)
        log.info("Fetching Notion page", extra=log_event("convert_page", page_id=page_id))

        fetched = await self.fetch_blocks(page_id)
        try:
            page = await self.fetch_page(page_id)
        except NotionBlogError as exc:
            raise page_access_error(page_id, exc) from exc

        return assemble_conversion(self._config, page_id, page, fetched)

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the HTTP transport."""
        await self._transport.close()

    async def __aenter__(self) -> AsyncNotionBlogClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
