"""Export persistence.

:class:`ExportStore` is the interface the orchestrator persists through.
:class:`InMemoryExportStore` keeps exports in a dict guarded by a
:class:`threading.Lock`; it backs tests and local runs.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from notionblog.models import Export, Frontmatter


@runtime_checkable
class ExportStore(Protocol):
    """Storage backend for :class:`~notionblog.models.Export` records."""

    def create(
        self,
        user_id: str,
        notion_url: str,
        title: str,
        html_content: str,
        frontmatter: Frontmatter,
        markdown_content: str | None = None,
    ) -> Export:
        """Persist a new export and return it with its id and timestamp."""
        ...

    def get(self, export_id: str) -> Export | None:
        ...

    def list_for_user(self, user_id: str, limit: int = 10) -> list[Export]:
        """Most recent exports of *user_id* first."""
        ...

    def delete(self, export_id: str) -> bool:
        """Remove an export.  Returns ``False`` when it did not exist."""
        ...

    def count_since(self, user_id: str, since: datetime) -> int:
        """Number of exports *user_id* created at or after *since*."""
        ...


class InMemoryExportStore:
    """Thread-safe, process-local :class:`ExportStore`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._exports: dict[str, Export] = {}

    def create(
        self,
        user_id: str,
        notion_url: str,
        title: str,
        html_content: str,
        frontmatter: Frontmatter,
        markdown_content: str | None = None,
    ) -> Export:
        export = Export(
            id=str(uuid.uuid4()),
            user_id=user_id,
            notion_url=notion_url,
            title=title,
            html_content=html_content,
            frontmatter=frontmatter,
            created_at=datetime.now(timezone.utc),
            markdown_content=markdown_content,
        )
        with self._lock:
            self._exports[export.id] = export
        return export

    def get(self, export_id: str) -> Export | None:
        with self._lock:
            return self._exports.get(export_id)

    def list_for_user(self, user_id: str, limit: int = 10) -> list[Export]:
        with self._lock:
            owned = [e for e in self._exports.values() if e.user_id == user_id]
        owned.sort(key=lambda e: e.created_at, reverse=True)
        return owned[:limit]

    def delete(self, export_id: str) -> bool:
        with self._lock:
            return self._exports.pop(export_id, None) is not None

    def count_since(self, user_id: str, since: datetime) -> int:
        with self._lock:
            return sum(
                1
                for e in self._exports.values()
                if e.user_id == user_id and e.created_at >= since
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._exports)
