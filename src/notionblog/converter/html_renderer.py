"""Notion block tree to HTML renderer.

Converts a fetched :class:`~notionblog.models.Block` tree into an HTML
fragment styled by :data:`notionblog.converter.styles.STYLESHEET`.

Notion has no list container block: a list is a run of sibling
``bulleted_list_item`` / ``numbered_list_item`` blocks.  The renderer folds
each sibling sequence through an immutable :class:`ListRun`, emitting one
``<ul>`` or ``<ol>`` per contiguous run of same-kind items.

Usage::

    from notionblog.converter.html_renderer import BlockHtmlRenderer

    renderer = BlockHtmlRenderer()
    html = renderer.render_blocks(fetch_result.blocks)
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any

from notionblog.config import NotionBlogConfig
from notionblog.models import Block, BlockType, ConversionWarning, ListKind, ListRun
from notionblog.observability import get_logger, log_event, resolve_metrics
from notionblog.utils.slug import slugify

from .rich_text import escape_html, plain_text, render_rich_text

log = get_logger("notionblog.converter")

_LIST_KINDS: dict[BlockType, ListKind] = {
    BlockType.BULLETED_LIST_ITEM: ListKind.UNORDERED,
    BlockType.NUMBERED_LIST_ITEM: ListKind.ORDERED,
}

_YOUTUBE_ID_RE = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&]+)")

_DEFAULT_CALLOUT_ICON = "\U0001F4A1"  # light bulb
_DEFAULT_IMAGE_ALT = "Image from Notion"


def heading_slug(text: str) -> str:
    """Anchor id for a heading: ``"Hello, World!"`` -> ``"hello-world"``."""
    return slugify(text)


def attr(value: str) -> str:
    """Escape a value for use inside a double-quoted HTML attribute."""
    return escape_html(value).replace('"', "&quot;")


def _code_language(language: str | None) -> str:
    lang = (language or "").strip().lower()
    if not lang or lang == "plain text":
        return "plaintext"
    return lang.replace(" ", "-")


def _youtube_id(url: str) -> str | None:
    match = _YOUTUBE_ID_RE.search(url)
    return match.group(1) if match else None


def _as_blocks(blocks: Sequence[Block | dict[str, Any]]) -> list[Block]:
    return [b if isinstance(b, Block) else Block.from_api(b) for b in blocks]


class BlockHtmlRenderer:
    """Render Notion blocks to HTML.

    Non-fatal problems (unknown block types) are collected in
    :attr:`warnings`, which is reset on every :meth:`render_blocks` call.

    Parameters
    ----------
    config:
        Supplies the metrics hook.  Defaults to an empty configuration.
    """

    def __init__(self, config: NotionBlogConfig | None = None) -> None:
        self._config = config or NotionBlogConfig()
        self._metrics = resolve_metrics(self._config.metrics)
        self.warnings: list[ConversionWarning] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_blocks(self, blocks: Sequence[Block | dict[str, Any]]) -> str:
        """Render a sibling sequence of blocks to an HTML fragment.

        Parameters
        ----------
        blocks:
            :class:`Block` objects, or raw Notion block dicts with any
            children embedded under ``"children"``.

        Returns
        -------
        str
            The rendered HTML.  Empty input yields ``""``.
        """
        self.warnings = []
        return self._render_block_list(_as_blocks(blocks))

    def render_block(self, block: Block | dict[str, Any]) -> str:
        """Render a single block.

        A list item comes back wrapped in its own one-item list element.
        ``table_row`` and ``column`` blocks render to ``""`` on their own;
        only their parent handlers consume them.
        """
        return self._render_block_list(_as_blocks([block]))

    # ------------------------------------------------------------------
    # Internal: sibling iteration and dispatch
    # ------------------------------------------------------------------

    def _render_block_list(self, blocks: list[Block]) -> str:
        parts: list[str] = []
        run = ListRun()

        for block in blocks:
            kind = _LIST_KINDS.get(block.kind)
            if kind is not None:
                flushed, run = run.push(kind, self._render_list_item(block))
            else:
                flushed, run = run.flush()
                flushed += self._dispatch(block)
            parts.append(flushed)

        flushed, _ = run.flush()
        parts.append(flushed)
        return "".join(parts)

    def _render_children(self, block: Block) -> str:
        if not block.children:
            return ""
        return self._render_block_list(block.children)

    def _dispatch(self, block: Block) -> str:
        renderer = _BLOCK_RENDERERS.get(block.kind)
        if renderer is not None:
            return renderer(self, block)
        return self._render_unknown(block)

    # ------------------------------------------------------------------
    # Text blocks
    # ------------------------------------------------------------------

    def _render_list_item(self, block: Block) -> str:
        return f"<li>{render_rich_text(block.rich_text)}{self._render_children(block)}</li>"

    def _render_paragraph(self, block: Block) -> str:
        text = render_rich_text(block.rich_text)
        if not text.strip() and not block.children:
            return ""
        html = f"<p>{text}</p>\n"
        if block.children:
            html += f'<div class="indent">{self._render_children(block)}</div>\n'
        return html

    def _render_heading(self, block: Block, level: int) -> str:
        spans = block.rich_text
        text = render_rich_text(spans)
        anchor = heading_slug(plain_text(spans))
        return f'<h{level} id="{anchor}">{text}</h{level}>\n' + self._render_children(block)

    def _render_heading_1(self, block: Block) -> str:
        return self._render_heading(block, 1)

    def _render_heading_2(self, block: Block) -> str:
        return self._render_heading(block, 2)

    def _render_heading_3(self, block: Block) -> str:
        return self._render_heading(block, 3)

    def _render_to_do(self, block: Block) -> str:
        text = render_rich_text(block.rich_text)
        checked = " checked" if block.payload.get("checked") else ""
        html = (
            f'<div class="todo-item"><input type="checkbox"{checked} disabled />'
            f"<span>{text}</span></div>\n"
        )
        if block.children:
            html += f'<div class="indent">{self._render_children(block)}</div>\n'
        return html

    def _render_toggle(self, block: Block) -> str:
        text = render_rich_text(block.rich_text)
        html = f'<details class="toggle">\n<summary>{text}</summary>\n'
        if block.children:
            html += f'<div class="toggle-content">{self._render_children(block)}</div>\n'
        return html + "</details>\n"

    def _render_callout(self, block: Block) -> str:
        text = render_rich_text(block.rich_text)
        color = block.payload.get("color") or "default"
        return (
            f'<aside class="callout callout-{attr(color)}">\n'
            f'<span class="callout-icon">{self._callout_icon(block)}</span>\n'
            f'<div class="callout-content">\n{text}\n'
            f"{self._render_children(block)}"
            "</div>\n</aside>\n"
        )

    @staticmethod
    def _callout_icon(block: Block) -> str:
        icon = block.payload.get("icon") or {}
        icon_type = icon.get("type")
        if icon_type == "emoji" and icon.get("emoji"):
            return icon["emoji"]
        if icon_type == "external":
            url = (icon.get("external") or {}).get("url", "")
            if url:
                return (
                    f'<img src="{attr(url)}" alt="icon" '
                    'style="width:1.2em;height:1.2em;vertical-align:middle;" />'
                )
        return _DEFAULT_CALLOUT_ICON

    def _render_quote(self, block: Block) -> str:
        text = render_rich_text(block.rich_text)
        return f"<blockquote>{text}{self._render_children(block)}</blockquote>\n"

    def _render_code(self, block: Block) -> str:
        text = render_rich_text(block.rich_text)
        language = _code_language(block.payload.get("language"))
        html = f'<pre><code class="language-{attr(language)}">{text}</code></pre>\n'
        caption = render_rich_text(block.caption)
        if caption:
            html += f'<figcaption class="code-caption">{caption}</figcaption>\n'
        return html

    def _render_equation(self, block: Block) -> str:
        expression = block.payload.get("expression", "")
        return f'<div class="equation">{escape_html(expression)}</div>\n'

    # ------------------------------------------------------------------
    # Media and links
    # ------------------------------------------------------------------

    def _render_image(self, block: Block) -> str:
        url = block.media_url()
        caption = render_rich_text(block.caption)
        alt = plain_text(block.caption) or _DEFAULT_IMAGE_ALT
        html = (
            '<figure class="image-container">\n'
            f'<img src="{attr(url)}" alt="{attr(alt)}" loading="lazy" />\n'
        )
        if caption:
            html += f"<figcaption>{caption}</figcaption>\n"
        return html + "</figure>\n"

    def _render_video(self, block: Block) -> str:
        url = block.media_url()
        caption = render_rich_text(block.caption)
        figcaption = f"<figcaption>{caption}</figcaption>\n" if caption else ""

        if "youtube.com" in url or "youtu.be" in url:
            video_id = _youtube_id(url)
            if not video_id:
                return ""
            player = (
                f'<iframe src="https://www.youtube.com/embed/{attr(video_id)}" '
                'frameborder="0" allowfullscreen></iframe>\n'
            )
        else:
            player = f'<video controls src="{attr(url)}"></video>\n'
        return f'<figure class="video-container">\n{player}{figcaption}</figure>\n'

    def _render_audio(self, block: Block) -> str:
        url = block.media_url()
        caption = render_rich_text(block.caption)
        html = f'<figure class="audio-container">\n<audio controls src="{attr(url)}"></audio>\n'
        if caption:
            html += f"<figcaption>{caption}</figcaption>\n"
        return html + "</figure>\n"

    def _render_file(self, block: Block) -> str:
        url = block.media_url()
        name = block.payload.get("name") or ""
        if not name and url:
            name = url.rsplit("/", 1)[-1].split("?")[0]
        name = name or "File"
        caption = render_rich_text(block.caption)
        html = (
            '<div class="file-attachment">\n'
            f'<a href="{attr(url)}" target="_blank" rel="noopener noreferrer">'
            f"\U0001F4CE {escape_html(name)}</a>\n"
        )
        if caption:
            html += f'<p class="file-caption">{caption}</p>\n'
        return html + "</div>\n"

    def _render_bookmark(self, block: Block) -> str:
        url = block.payload.get("url", "")
        label = render_rich_text(block.caption) or escape_html(url)
        return (
            '<div class="embed-container">\n'
            f'<a href="{attr(url)}" target="_blank" rel="noopener noreferrer" '
            f'class="bookmark">{label}</a>\n'
            "</div>\n"
        )

    def _render_link_preview(self, block: Block) -> str:
        url = block.payload.get("url", "")
        return (
            f'<div class="link-preview"><a href="{attr(url)}" target="_blank" '
            f'rel="noopener noreferrer">{escape_html(url)}</a></div>\n'
        )

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _render_divider(self, block: Block) -> str:
        return "<hr />\n"

    def _render_table(self, block: Block) -> str:
        """Render a table and its ``table_row`` children.

        With ``has_column_header`` the first row becomes a ``<thead>`` of
        ``<th>`` cells and the remaining rows share one ``<tbody>``; a
        header-only table has no ``<tbody>``.  Without the flag every row is
        emitted directly inside ``<table>`` as ``<td>`` cells.
        """
        rows = [c for c in block.children if c.kind is BlockType.TABLE_ROW]
        parts = ['<div class="table-container">\n<table>\n']

        if block.payload.get("has_column_header") and rows:
            parts.append(f"<thead>\n{self._table_row(rows[0], 'th')}</thead>\n")
            body = rows[1:]
            if body:
                parts.append("<tbody>\n")
                parts.extend(self._table_row(row, "td") for row in body)
                parts.append("</tbody>\n")
        else:
            parts.extend(self._table_row(row, "td") for row in rows)

        parts.append("</table>\n</div>\n")
        return "".join(parts)

    @staticmethod
    def _table_row(row: Block, tag: str) -> str:
        cells = row.payload.get("cells") or []
        rendered = "".join(f"<{tag}>{render_rich_text(cell)}</{tag}>\n" for cell in cells)
        return f"<tr>\n{rendered}</tr>\n"

    def _render_column_list(self, block: Block) -> str:
        columns = [c for c in block.children if c.kind is BlockType.COLUMN]
        parts = [f'<div class="columns columns-{len(columns) or 1}">\n']
        for column in columns:
            parts.append(f'<div class="column">\n{self._render_children(column)}</div>\n')
        parts.append("</div>\n")
        return "".join(parts)

    def _render_nothing(self, block: Block) -> str:
        return ""

    def _render_synced_block(self, block: Block) -> str:
        if block.children:
            return self._render_children(block)
        source_id = (block.payload.get("synced_from") or {}).get("block_id")
        if source_id:
            return f"<!-- synced block reference: {escape_html(source_id)} -->\n"
        return ""

    def _render_child_page(self, block: Block) -> str:
        title = escape_html(block.payload.get("title") or "Untitled")
        return f'<div class="child-page"><a href="#">\U0001F4C4 {title}</a></div>\n'

    def _render_child_database(self, block: Block) -> str:
        title = escape_html(block.payload.get("title") or "Database")
        return f'<div class="child-database"><span>\U0001F4CA {title}</span></div>\n'

    def _render_table_of_contents(self, block: Block) -> str:
        return '<nav class="table-of-contents"><p><em>[Table of Contents]</em></p></nav>\n'

    def _render_breadcrumb(self, block: Block) -> str:
        return '<nav class="breadcrumb"><p><em>[Breadcrumb]</em></p></nav>\n'

    # ------------------------------------------------------------------
    # Unknown types
    # ------------------------------------------------------------------

    def _render_unknown(self, block: Block) -> str:
        """Log the unrecognised type and render only its children."""
        self._metrics.increment(
            "notionblog.unsupported_blocks_total",
            tags={"block_type": block.type or "unknown"},
        )
        log.info(
            "Unhandled block type",
            extra=log_event("render_block", block_id=block.id, block_type=block.type),
        )
        self.warnings.append(
            ConversionWarning(
                code="UNSUPPORTED_BLOCK",
                message=f"Unhandled block type: {block.type or 'unknown'}",
                context={"block_id": block.id, "block_type": block.type},
            )
        )
        return self._render_children(block)


# ------------------------------------------------------------------
# Block renderer dispatch table
# ------------------------------------------------------------------

_BlockRenderer = Callable[[BlockHtmlRenderer, Block], str]

_BLOCK_RENDERERS: dict[BlockType, _BlockRenderer] = {
    BlockType.PARAGRAPH: BlockHtmlRenderer._render_paragraph,
    BlockType.HEADING_1: BlockHtmlRenderer._render_heading_1,
    BlockType.HEADING_2: BlockHtmlRenderer._render_heading_2,
    BlockType.HEADING_3: BlockHtmlRenderer._render_heading_3,
    # list items are grouped in _render_block_list
    BlockType.TO_DO: BlockHtmlRenderer._render_to_do,
    BlockType.TOGGLE: BlockHtmlRenderer._render_toggle,
    BlockType.CALLOUT: BlockHtmlRenderer._render_callout,
    BlockType.QUOTE: BlockHtmlRenderer._render_quote,
    BlockType.CODE: BlockHtmlRenderer._render_code,
    BlockType.EQUATION: BlockHtmlRenderer._render_equation,
    BlockType.IMAGE: BlockHtmlRenderer._render_image,
    BlockType.VIDEO: BlockHtmlRenderer._render_video,
    BlockType.AUDIO: BlockHtmlRenderer._render_audio,
    BlockType.FILE: BlockHtmlRenderer._render_file,
    BlockType.PDF: BlockHtmlRenderer._render_file,
    BlockType.EMBED: BlockHtmlRenderer._render_bookmark,
    BlockType.BOOKMARK: BlockHtmlRenderer._render_bookmark,
    BlockType.LINK_PREVIEW: BlockHtmlRenderer._render_link_preview,
    BlockType.DIVIDER: BlockHtmlRenderer._render_divider,
    BlockType.TABLE: BlockHtmlRenderer._render_table,
    BlockType.TABLE_ROW: BlockHtmlRenderer._render_nothing,
    BlockType.COLUMN_LIST: BlockHtmlRenderer._render_column_list,
    BlockType.COLUMN: BlockHtmlRenderer._render_nothing,
    BlockType.SYNCED_BLOCK: BlockHtmlRenderer._render_synced_block,
    BlockType.CHILD_PAGE: BlockHtmlRenderer._render_child_page,
    BlockType.CHILD_DATABASE: BlockHtmlRenderer._render_child_database,
    BlockType.TABLE_OF_CONTENTS: BlockHtmlRenderer._render_table_of_contents,
    BlockType.BREADCRUMB: BlockHtmlRenderer._render_breadcrumb,
}
