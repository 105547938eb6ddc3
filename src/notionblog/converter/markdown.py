"""Notion block tree to Markdown renderer.

Renders the same :class:`~notionblog.models.Block` tree as
:mod:`notionblog.converter.html_renderer`, producing GitHub-flavoured
Markdown for ``.md`` downloads.  :func:`render_document` prefixes the body
with a YAML front matter block.

Usage::

    from notionblog.converter.markdown import MarkdownRenderer, render_document

    body = MarkdownRenderer().render_blocks(fetch_result.blocks)
    md = render_document(frontmatter, body)
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any

import yaml

from notionblog.config import NotionBlogConfig
from notionblog.models import Block, BlockType, ConversionWarning, Frontmatter, RichTextSpan
from notionblog.models import parse_rich_text
from notionblog.observability import get_logger, log_event

log = get_logger("notionblog.converter")

_ESCAPE_RE = re.compile(r"([\\`*_{}\[\]()#+\-.!|])")

# Layout wrappers whose children are rendered in place.
_PASSTHROUGH_TYPES: frozenset[BlockType] = frozenset({
    BlockType.COLUMN_LIST,
    BlockType.COLUMN,
    BlockType.SYNCED_BLOCK,
})

# Blocks with no Markdown equivalent.
_OMITTED_TYPES: frozenset[BlockType] = frozenset({
    BlockType.TABLE_OF_CONTENTS,
    BlockType.BREADCRUMB,
    BlockType.TABLE_ROW,
})

_MEDIA_LABELS: dict[BlockType, str] = {
    BlockType.VIDEO: "Video",
    BlockType.AUDIO: "Audio",
    BlockType.PDF: "PDF",
}


def markdown_escape(text: str, context: str = "inline") -> str:
    """Escape Markdown metacharacters.

    ``context`` is ``"inline"`` (escape everything), ``"code"`` (no
    escaping) or ``"url"`` (percent-encode parentheses only).
    """
    if context == "code":
        return text
    if context == "url":
        return text.replace("(", "%28").replace(")", "%29")
    return _ESCAPE_RE.sub(r"\\\1", text)


def _render_span(span: RichTextSpan) -> str:
    ann = span.annotations
    if span.equation:
        text = f"${span.text}$"
    elif ann.code:
        text = f"`{span.text}`"
    else:
        text = markdown_escape(span.text)
        if ann.bold:
            text = f"**{text}**"
        if ann.italic:
            text = f"_{text}_"
        if ann.strikethrough:
            text = f"~~{text}~~"
        if ann.underline:
            text = f"<u>{text}</u>"
    if span.href:
        text = f"[{text}]({markdown_escape(span.href, 'url')})"
    return text


def render_rich_text_markdown(spans: Sequence[RichTextSpan | dict[str, Any]] | None) -> str:
    """Render rich-text spans to inline Markdown.

    Annotation order matches the HTML renderer: code, bold, italic,
    strikethrough, underline, then link.  Colours have no Markdown form and
    are dropped.
    """
    if not spans:
        return ""
    return "".join(_render_span(span) for span in parse_rich_text(list(spans)))


def render_document(frontmatter: Frontmatter, body: str) -> str:
    """Prefix *body* with a ``---`` delimited YAML front matter block."""
    header = yaml.safe_dump(
        frontmatter.to_dict(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"---\n{header}---\n\n{body}"


def _quoted(markdown: str) -> str:
    lines = markdown.rstrip("\n").split("\n")
    return "\n".join(f"> {line}" if line.strip() else ">" for line in lines) + "\n"


class MarkdownRenderer:
    """Render Notion blocks to Markdown.

    Unsupported types become ``<!-- notion:<type> -->`` comments and are
    recorded in :attr:`warnings`.
    """

    def __init__(self, config: NotionBlogConfig | None = None) -> None:
        self._config = config or NotionBlogConfig()
        self.warnings: list[ConversionWarning] = []

    def render_blocks(self, blocks: Sequence[Block | dict[str, Any]]) -> str:
        """Render a sibling sequence of blocks to Markdown."""
        self.warnings = []
        items = [b if isinstance(b, Block) else Block.from_api(b) for b in blocks]
        return self._render_block_list(items, 0)

    # ------------------------------------------------------------------
    # Internal: sibling iteration and dispatch
    # ------------------------------------------------------------------

    def _render_block_list(self, blocks: list[Block], depth: int) -> str:
        parts: list[str] = []
        number = 0
        in_list = False

        for block in blocks:
            kind = block.kind
            is_list_line = block.is_list_item or kind in (BlockType.TO_DO, BlockType.TOGGLE)
            if in_list and not is_list_line and depth == 0:
                parts.append("\n")
            in_list = is_list_line

            if kind is BlockType.NUMBERED_LIST_ITEM:
                number += 1
                parts.append(self._render_list_line(block, depth, f"{number}."))
            else:
                number = 0
                parts.append(self._dispatch(block, depth))

        if in_list and depth == 0:
            parts.append("\n")
        return "".join(parts)

    def _render_children(self, block: Block, depth: int) -> str:
        if not block.children:
            return ""
        return self._render_block_list(block.children, depth)

    def _dispatch(self, block: Block, depth: int) -> str:
        kind = block.kind
        if kind in _OMITTED_TYPES:
            return ""
        if kind in _PASSTHROUGH_TYPES:
            return self._render_children(block, depth)
        if kind in _MEDIA_LABELS:
            return self._render_media(block, _MEDIA_LABELS[kind])
        renderer = _BLOCK_RENDERERS.get(kind)
        if renderer is not None:
            return renderer(self, block, depth)
        return self._render_unsupported(block)

    # ------------------------------------------------------------------
    # Block renderers
    # ------------------------------------------------------------------

    def _render_list_line(self, block: Block, depth: int, marker: str) -> str:
        text = render_rich_text_markdown(block.rich_text)
        return f"{'  ' * depth}{marker} {text}\n" + self._render_children(block, depth + 1)

    def _render_bulleted_list_item(self, block: Block, depth: int) -> str:
        return self._render_list_line(block, depth, "-")

    def _render_to_do(self, block: Block, depth: int) -> str:
        box = "[x]" if block.payload.get("checked") else "[ ]"
        return self._render_list_line(block, depth, f"- {box}")

    def _render_toggle(self, block: Block, depth: int) -> str:
        return self._render_list_line(block, depth, "-")

    def _render_heading(self, block: Block, level: int) -> str:
        text = render_rich_text_markdown(block.rich_text)
        return f"{'#' * level} {text}\n\n" + self._render_children(block, 0)

    def _render_heading_1(self, block: Block, depth: int) -> str:
        return self._render_heading(block, 1)

    def _render_heading_2(self, block: Block, depth: int) -> str:
        return self._render_heading(block, 2)

    def _render_heading_3(self, block: Block, depth: int) -> str:
        return self._render_heading(block, 3)

    def _render_paragraph(self, block: Block, depth: int) -> str:
        text = render_rich_text_markdown(block.rich_text)
        result = f"{'  ' * depth}{text}\n\n" if text.strip() else ""
        return result + self._render_children(block, depth + 1)

    def _render_quote(self, block: Block, depth: int) -> str:
        content = render_rich_text_markdown(block.rich_text) + "\n\n"
        content += self._render_children(block, 0)
        return _quoted(content) + "\n"

    def _render_callout(self, block: Block, depth: int) -> str:
        icon = block.payload.get("icon") or {}
        emoji = icon.get("emoji", "") if icon.get("type") == "emoji" else ""
        text = render_rich_text_markdown(block.rich_text)
        content = f"{emoji} {text}" if emoji else text
        content += "\n\n" + self._render_children(block, 0)
        return _quoted(content) + "\n"

    def _render_code(self, block: Block, depth: int) -> str:
        language = block.payload.get("language") or ""
        if language == "plain text":
            language = ""
        code = "".join(span.text for span in block.rich_text)
        return f"```{language}\n{code}\n```\n\n"

    def _render_equation(self, block: Block, depth: int) -> str:
        return f"$$\n{block.payload.get('expression', '')}\n$$\n\n"

    def _render_divider(self, block: Block, depth: int) -> str:
        return "---\n\n"

    def _render_image(self, block: Block, depth: int) -> str:
        alt = render_rich_text_markdown(block.caption)
        return f"![{alt}]({markdown_escape(block.media_url(), 'url')})\n\n"

    def _render_media(self, block: Block, label: str) -> str:
        return f"[{label}]({markdown_escape(block.media_url(), 'url')})\n\n"

    def _render_file(self, block: Block, depth: int) -> str:
        url = block.media_url()
        name = block.payload.get("name") or ""
        if not name:
            name = url.rsplit("/", 1)[-1].split("?")[0] if url else "File"
        return f"[{markdown_escape(name)}]({markdown_escape(url, 'url')})\n\n"

    def _render_link(self, block: Block, depth: int) -> str:
        url = block.payload.get("url", "")
        label = render_rich_text_markdown(block.caption) or markdown_escape(url)
        return f"[{label}]({markdown_escape(url, 'url')})\n\n"

    def _render_table(self, block: Block, depth: int) -> str:
        """Render a table as GFM; the separator always follows the first row."""
        rows = [c for c in block.children if c.kind is BlockType.TABLE_ROW]
        if not rows:
            return ""
        longest = max(len(r.payload.get("cells") or []) for r in rows)
        width = max(block.payload.get("table_width") or 0, longest)
        lines: list[str] = []
        for i, row in enumerate(rows):
            cells = [render_rich_text_markdown(c) for c in row.payload.get("cells") or []]
            cells += [""] * (width - len(cells))
            lines.append("| " + " | ".join(cells) + " |")
            if i == 0:
                lines.append("|" + "|".join(["---"] * width) + "|")
        return "\n".join(lines) + "\n\n"

    def _render_child_page(self, block: Block, depth: int) -> str:
        title = markdown_escape(block.payload.get("title") or "Untitled")
        return f"**Page: {title}**\n\n"

    def _render_child_database(self, block: Block, depth: int) -> str:
        title = markdown_escape(block.payload.get("title") or "Database")
        return f"**Database: {title}**\n\n"

    def _render_unsupported(self, block: Block) -> str:
        block_type = block.type or "unknown"
        self.warnings.append(
            ConversionWarning(
                code="UNSUPPORTED_BLOCK",
                message=f"Unhandled block type: {block_type}",
                context={"block_id": block.id, "block_type": block.type},
            )
        )
        log.debug(
            "Unhandled block type in Markdown export",
            extra=log_event("render_markdown", block_id=block.id, block_type=block_type),
        )
        return f"<!-- notion:{block_type} -->\n\n" + self._render_children(block, 0)


# ------------------------------------------------------------------
# Block renderer dispatch table
# ------------------------------------------------------------------

_BlockRenderer = Callable[[MarkdownRenderer, Block, int], str]

_BLOCK_RENDERERS: dict[BlockType, _BlockRenderer] = {
    BlockType.HEADING_1: MarkdownRenderer._render_heading_1,
    BlockType.HEADING_2: MarkdownRenderer._render_heading_2,
    BlockType.HEADING_3: MarkdownRenderer._render_heading_3,
    BlockType.PARAGRAPH: MarkdownRenderer._render_paragraph,
    BlockType.BULLETED_LIST_ITEM: MarkdownRenderer._render_bulleted_list_item,
    # numbered_list_item is numbered in _render_block_list
    BlockType.TO_DO: MarkdownRenderer._render_to_do,
    BlockType.TOGGLE: MarkdownRenderer._render_toggle,
    BlockType.QUOTE: MarkdownRenderer._render_quote,
    BlockType.CALLOUT: MarkdownRenderer._render_callout,
    BlockType.CODE: MarkdownRenderer._render_code,
    BlockType.EQUATION: MarkdownRenderer._render_equation,
    BlockType.DIVIDER: MarkdownRenderer._render_divider,
    BlockType.IMAGE: MarkdownRenderer._render_image,
    BlockType.FILE: MarkdownRenderer._render_file,
    BlockType.EMBED: MarkdownRenderer._render_link,
    BlockType.BOOKMARK: MarkdownRenderer._render_link,
    BlockType.LINK_PREVIEW: MarkdownRenderer._render_link,
    BlockType.TABLE: MarkdownRenderer._render_table,
    BlockType.CHILD_PAGE: MarkdownRenderer._render_child_page,
    BlockType.CHILD_DATABASE: MarkdownRenderer._render_child_database,
}
