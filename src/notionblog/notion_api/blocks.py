"""Block API wrappers for the Notion API.

:class:`BlockAPI` (sync) and :class:`AsyncBlockAPI` (async) wrap the
read-only ``/blocks`` endpoints the exporter needs.  :meth:`list_children`
returns one page of results so callers control pagination and can stop at
the first failed page.
"""

from __future__ import annotations

from typing import Any

from .transport import AsyncNotionTransport, NotionTransport


def _children_params(page_size: int, cursor: str | None) -> dict[str, Any]:
    params: dict[str, Any] = {"page_size": page_size}
    if cursor is not None:
        params["start_cursor"] = cursor
    return params


class BlockAPI:
    """Synchronous wrapper for the Notion Blocks API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport`.
    page_size:
        Number of children requested per listing call (max 100).
    """

    def __init__(self, transport: NotionTransport, page_size: int = 100) -> None:
        self._transport = transport
        self._page_size = page_size

    def list_children(self, block_id: str, cursor: str | None = None) -> dict[str, Any]:
        """Fetch one page of a block's children.

        Parameters
        ----------
        block_id:
            The parent block or page id.
        cursor:
            ``next_cursor`` from the previous page, or ``None`` for the
            first page.

        Returns
        -------
        dict
            The list response: ``results``, ``has_more``, ``next_cursor``.
        """
        return self._transport.request(
            "GET",
            f"/blocks/{block_id}/children",
            params=_children_params(self._page_size, cursor),
        )


class AsyncBlockAPI:
    """Asynchronous wrapper for the Notion Blocks API.

    Mirrors :class:`BlockAPI`; every method is a coroutine.
    """

    def __init__(self, transport: AsyncNotionTransport, page_size: int = 100) -> None:
        self._transport = transport
        self._page_size = page_size

    async def list_children(self, block_id: str, cursor: str | None = None) -> dict[str, Any]:
        """Fetch one page of a block's children (async)."""
        return await self._transport.request(
            "GET",
            f"/blocks/{block_id}/children",
            params=_children_params(self._page_size, cursor),
        )
