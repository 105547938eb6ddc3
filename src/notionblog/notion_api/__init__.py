"""notionblog.notion_api -- Notion API transport, endpoint wrappers and
block tree fetching.

* :mod:`.transport` -- single-attempt HTTP transport with typed errors.
* :mod:`.pages` -- page retrieval.
* :mod:`.blocks` -- paginated child listing.
* :mod:`.tree` -- recursive, depth-bounded block tree fetchers.
"""

from __future__ import annotations

from .blocks import AsyncBlockAPI, BlockAPI
from .pages import AsyncPageAPI, PageAPI
from .transport import AsyncNotionTransport, NotionTransport
from .tree import AsyncBlockTreeFetcher, BlockTreeFetcher

__all__ = [
    "AsyncBlockAPI",
    "AsyncBlockTreeFetcher",
    "AsyncNotionTransport",
    "AsyncPageAPI",
    "BlockAPI",
    "BlockTreeFetcher",
    "NotionTransport",
    "PageAPI",
]
