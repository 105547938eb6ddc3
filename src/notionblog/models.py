"""Data models for notionblog.

Request-scoped content types (:class:`Block`, :class:`RichTextSpan`,
:class:`ListRun`, :class:`FetchResult`) are parsed from Notion API payloads
and discarded after rendering.  :class:`Export` is the persisted output
contract and is frozen: an export is created once and only ever deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BlockType(str, Enum):
    """Every Notion block type the renderers know about.

    Raw tags that are not listed here resolve to :attr:`UNKNOWN` through
    :attr:`Block.kind`; the raw tag itself is kept on :attr:`Block.type`.
    """

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    CALLOUT = "callout"
    QUOTE = "quote"
    CODE = "code"
    IMAGE = "image"
    VIDEO = "video"
    EMBED = "embed"
    BOOKMARK = "bookmark"
    DIVIDER = "divider"
    TABLE = "table"
    TABLE_ROW = "table_row"
    COLUMN_LIST = "column_list"
    COLUMN = "column"
    SYNCED_BLOCK = "synced_block"
    CHILD_PAGE = "child_page"
    CHILD_DATABASE = "child_database"
    EQUATION = "equation"
    FILE = "file"
    PDF = "pdf"
    AUDIO = "audio"
    LINK_PREVIEW = "link_preview"
    TABLE_OF_CONTENTS = "table_of_contents"
    BREADCRUMB = "breadcrumb"
    UNKNOWN = "unknown"


_KNOWN_TYPES: dict[str, BlockType] = {
    bt.value: bt for bt in BlockType if bt is not BlockType.UNKNOWN
}


class ListKind(str, Enum):
    """The HTML list element a run of list items is wrapped in."""

    UNORDERED = "ul"
    ORDERED = "ol"


class ExportStatus(str, Enum):
    """Lifecycle status stored on an :class:`Export`."""

    COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Rich text
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Annotations:
    """Formatting flags on one rich-text span."""

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False
    color: str = "default"

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> Annotations:
        data = data or {}
        return cls(
            bold=bool(data.get("bold", False)),
            italic=bool(data.get("italic", False)),
            strikethrough=bool(data.get("strikethrough", False)),
            underline=bool(data.get("underline", False)),
            code=bool(data.get("code", False)),
            color=data.get("color") or "default",
        )


@dataclass(frozen=True)
class RichTextSpan:
    """One formatted text run.

    Attributes
    ----------
    text:
        Raw, unescaped content.
    annotations:
        Formatting flags applied to the whole run.
    href:
        Optional link target.
    equation:
        True for inline equation spans; :attr:`text` holds the expression.
    """

    text: str
    annotations: Annotations = field(default_factory=Annotations)
    href: str | None = None
    equation: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RichTextSpan:
        """Parse a Notion rich_text object.

        API responses carry ``plain_text``; locally built payloads may only
        have ``text.content``.  Equation spans use their expression as text.
        """
        text = data.get("plain_text")
        if not text:
            if data.get("type") == "equation":
                text = (data.get("equation") or {}).get("expression", "")
            else:
                text = (data.get("text") or {}).get("content", "")
        href = data.get("href")
        if not href:
            link = (data.get("text") or {}).get("link") or {}
            href = link.get("url")
        return cls(
            text=text or "",
            annotations=Annotations.from_api(data.get("annotations")),
            href=href or None,
            equation=data.get("type") == "equation",
        )


def parse_rich_text(items: list[Any] | None) -> list[RichTextSpan]:
    """Parse a rich_text array, passing through already-parsed spans."""
    if not items:
        return []
    spans: list[RichTextSpan] = []
    for item in items:
        if isinstance(item, RichTextSpan):
            spans.append(item)
        elif isinstance(item, dict):
            spans.append(RichTextSpan.from_api(item))
    return spans


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

@dataclass
class Block:
    """A node of the Notion content tree.

    Attributes
    ----------
    id:
        Block identifier, unique within the workspace.
    type:
        The raw type tag as sent by the API.
    payload:
        The type-keyed object (``block[block["type"]]``).
    has_children:
        Whether the API reported descendants.
    children:
        Child blocks in source order, filled in by the tree fetcher.  May be
        empty even when :attr:`has_children` is set.
    """

    id: str
    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    has_children: bool = False
    children: list[Block] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Block:
        """Build a block from a Notion API block object.

        An embedded ``children`` list (on the block or inside its payload) is
        parsed recursively, so hand-built fixture trees load in one call.
        """
        block_type = data.get("type", "") or ""
        payload = data.get(block_type)
        if not isinstance(payload, dict):
            payload = {}
        raw_children = data.get("children") or payload.get("children") or []
        children = [
            c if isinstance(c, Block) else cls.from_api(c)
            for c in raw_children
        ]
        return cls(
            id=data.get("id", "") or "",
            type=block_type,
            payload=payload,
            has_children=bool(data.get("has_children", False) or children),
            children=children,
        )

    @property
    def kind(self) -> BlockType:
        return _KNOWN_TYPES.get(self.type, BlockType.UNKNOWN)

    @property
    def rich_text(self) -> list[RichTextSpan]:
        return parse_rich_text(self.payload.get("rich_text"))

    @property
    def caption(self) -> list[RichTextSpan]:
        return parse_rich_text(self.payload.get("caption"))

    @property
    def is_list_item(self) -> bool:
        return self.kind in (BlockType.BULLETED_LIST_ITEM, BlockType.NUMBERED_LIST_ITEM)

    def media_url(self) -> str:
        """URL of a file/external media payload (image, video, file, ...)."""
        for source in ("file", "external"):
            url = (self.payload.get(source) or {}).get("url")
            if url:
                return url
        return ""


# ---------------------------------------------------------------------------
# Rendering accumulator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ListRun:
    """An in-progress run of consecutive sibling list items.

    Instances are immutable; :meth:`push` and :meth:`flush` return the next
    state so a renderer can fold over a block sequence without shared
    mutable state.
    """

    kind: ListKind | None = None
    items: tuple[str, ...] = ()

    def push(self, kind: ListKind, item: str) -> tuple[str, ListRun]:
        """Add a rendered ``<li>`` to the run.

        Returns ``(flushed_html, next_run)``.  When *kind* differs from the
        active kind the pending run is flushed first, so ordered and
        unordered items never share one list element.
        """
        flushed = ""
        run = self
        if self.items and self.kind is not kind:
            flushed, run = self.flush()
        return flushed, ListRun(kind=kind, items=(*run.items, item))

    def flush(self) -> tuple[str, ListRun]:
        """Emit the wrapping list element and return an empty run."""
        if not self.items:
            return "", ListRun()
        tag = (self.kind or ListKind.UNORDERED).value
        body = "\n".join(self.items)
        return f"<{tag}>\n{body}\n</{tag}>\n", ListRun()


# ---------------------------------------------------------------------------
# Warnings and results
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal issue met while fetching or rendering.

    Attributes
    ----------
    code:
        Machine-readable code (``"FETCH_FAILED"``, ``"UNSUPPORTED_BLOCK"``,
        ``"ENRICHMENT_FALLBACK"``).
    message:
        Human-readable description.
    context:
        Structured diagnostic data.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class FetchResult:
    """Blocks fetched for one node plus diagnostics from degraded subtrees."""

    blocks: list[Block] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)


@dataclass(frozen=True)
class PageMetadata:
    """Title and icon taken from a page's properties."""

    title: str
    icon: str = ""


@dataclass(frozen=True)
class SeoMetadata:
    """Search metadata for an export.

    ``source`` is ``"enrichment"`` when the enrichment service supplied the
    values and ``"fallback"`` when they were derived from the page title.
    """

    title: str
    description: str
    slug: str
    source: str = "fallback"


@dataclass(frozen=True)
class Frontmatter:
    """Front matter stored with an export and written into its Markdown."""

    title: str
    description: str
    slug: str
    date: str

    def to_dict(self) -> dict[str, str]:
        return {
            "title": self.title,
            "description": self.description,
            "slug": self.slug,
            "date": self.date,
        }


@dataclass
class PageConversion:
    """A rendered page, before enrichment and persistence.

    Attributes
    ----------
    page_id:
        Dash-free id of the converted page.
    metadata:
        Title and icon.
    body_html:
        Rendered block tree only.
    html:
        Stylesheet (when enabled), page header and body.
    markdown:
        Markdown rendering of the block tree, without front matter.
    warnings:
        Non-fatal issues from fetching and rendering.
    """

    page_id: str
    metadata: PageMetadata
    body_html: str
    html: str
    markdown: str
    warnings: list[ConversionWarning] = field(default_factory=list)


@dataclass(frozen=True)
class Export:
    """A persisted conversion result.  Never mutated after creation."""

    id: str
    user_id: str
    notion_url: str
    title: str
    html_content: str
    frontmatter: Frontmatter
    created_at: datetime
    markdown_content: str | None = None
    status: ExportStatus = ExportStatus.COMPLETED


@dataclass
class ExportResult:
    """Returned to the caller of :meth:`ExportOrchestrator.export`."""

    export_id: str
    title: str
    description: str
    slug: str
    html: str
    markdown: str | None
    created_at: datetime
    warnings: list[ConversionWarning] = field(default_factory=list)
