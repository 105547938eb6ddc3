"""Page API wrappers for the Notion API.

:class:`PageAPI` (sync) and :class:`AsyncPageAPI` (async) read page
objects, whose ``properties`` and ``icon`` feed the metadata extractor.
"""

from __future__ import annotations

from typing import Any

from .transport import AsyncNotionTransport, NotionTransport


class PageAPI:
    """Synchronous wrapper for the Notion Pages API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport`.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def retrieve(self, page_id: str) -> dict[str, Any]:
        """Retrieve a page by id (with or without hyphens).

        Returns
        -------
        dict
            The page object, including ``properties`` and ``icon``.
        """
        return self._transport.request("GET", f"/pages/{page_id}")


class AsyncPageAPI:
    """Asynchronous wrapper for the Notion Pages API."""

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def retrieve(self, page_id: str) -> dict[str, Any]:
        """Retrieve a page by id (async).

        See :meth:`PageAPI.retrieve`.
        """
        return await self._transport.request("GET", f"/pages/{page_id}")
