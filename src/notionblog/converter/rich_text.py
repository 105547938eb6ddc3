"""Inline rendering: rich-text spans to HTML.

Each span is escaped once, then wrapped innermost-first in::

    code -> bold -> italic -> strikethrough -> underline -> color -> link

Colour annotations use a CSS custom property with a hex fallback so themed
pages can override the palette, e.g.
``<span style="color: var(--notion-red, #dc143c)">``.  Background colours
(``red_background``) produce a ``<mark>`` highlight instead.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from notionblog.models import RichTextSpan, parse_rich_text

COLOR_HEX: dict[str, str] = {
    "gray": "9b9b9b",
    "brown": "8b4513",
    "orange": "ff8c00",
    "yellow": "ffd700",
    "green": "228b22",
    "blue": "1e90ff",
    "purple": "9370db",
    "pink": "ff69b4",
    "red": "dc143c",
}

_FALLBACK_HEX = "000000"
_BACKGROUND_SUFFIX = "_background"


def escape_html(text: str) -> str:
    """Escape ``&``, ``<`` and ``>``.  Quotes are left alone."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def color_hex(name: str) -> str:
    """Hex value (no ``#``) for a palette colour, black when unknown."""
    return COLOR_HEX.get(name, _FALLBACK_HEX)


def _wrap_color(html: str, color: str) -> str:
    if not color or color == "default":
        return html
    name = color.replace(_BACKGROUND_SUFFIX, "")
    value = f"var(--notion-{name}, #{color_hex(name)})"
    if _BACKGROUND_SUFFIX in color:
        return f'<mark style="background-color: {value}">{html}</mark>'
    return f'<span style="color: {value}">{html}</span>'


def render_span(span: RichTextSpan) -> str:
    """Render one span to HTML."""
    ann = span.annotations
    html = escape_html(span.text)

    if ann.code:
        html = f"<code>{html}</code>"
    if ann.bold:
        html = f"<strong>{html}</strong>"
    if ann.italic:
        html = f"<em>{html}</em>"
    if ann.strikethrough:
        html = f"<del>{html}</del>"
    if ann.underline:
        html = f"<u>{html}</u>"
    html = _wrap_color(html, ann.color)

    if span.href:
        href = escape_html(span.href).replace('"', "&quot;")
        html = f'<a href="{href}" target="_blank" rel="noopener noreferrer">{html}</a>'
    return html


def render_rich_text(spans: Sequence[RichTextSpan | dict[str, Any]] | None) -> str:
    """Render a sequence of spans to an inline HTML fragment.

    Accepts parsed :class:`RichTextSpan` objects or raw Notion rich_text
    dicts.  Empty or ``None`` input yields ``""``.
    """
    if not spans:
        return ""
    return "".join(render_span(span) for span in parse_rich_text(list(spans)))


def plain_text(spans: Sequence[RichTextSpan | dict[str, Any]] | None) -> str:
    """Concatenate the raw, unescaped text of *spans*."""
    if not spans:
        return ""
    return "".join(span.text for span in parse_rich_text(list(spans)))
