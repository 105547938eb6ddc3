"""Notion block tree to HTML / Markdown conversion.

Public API:

- :class:`BlockHtmlRenderer`: blocks to styled HTML.
- :class:`MarkdownRenderer`: blocks to Markdown.
- :func:`render_rich_text`: rich-text spans to inline HTML.
- :func:`extract_metadata` / :func:`render_page_header`: page title and icon.
- :func:`render_document`: Markdown with YAML front matter.
- :func:`render_html_document` / :data:`STYLESHEET`: standalone HTML.
"""

from notionblog.converter.html_renderer import BlockHtmlRenderer, heading_slug
from notionblog.converter.markdown import (
    MarkdownRenderer,
    markdown_escape,
    render_document,
    render_rich_text_markdown,
)
from notionblog.converter.page_metadata import (
    UNTITLED,
    extract_icon,
    extract_metadata,
    extract_title,
    render_page_header,
)
from notionblog.converter.rich_text import COLOR_HEX, escape_html, plain_text, render_rich_text
from notionblog.converter.styles import STYLESHEET, render_html_document

__all__ = [
    "COLOR_HEX",
    "STYLESHEET",
    "UNTITLED",
    "BlockHtmlRenderer",
    "MarkdownRenderer",
    "escape_html",
    "extract_icon",
    "extract_metadata",
    "extract_title",
    "heading_slug",
    "markdown_escape",
    "plain_text",
    "render_document",
    "render_html_document",
    "render_page_header",
    "render_rich_text",
    "render_rich_text_markdown",
]
