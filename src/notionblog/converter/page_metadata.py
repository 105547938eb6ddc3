"""Page title and icon extraction.

A Notion page stores its title in whichever property has ``type ==
"title"`` (its name varies: ``"Name"``, ``"title"``, ``"Title"``, ...).
Sub-pages opened directly may have no title property at all.
"""

from __future__ import annotations

from typing import Any

from notionblog.models import PageMetadata

from .rich_text import escape_html, plain_text

UNTITLED = "Untitled"


def extract_title(page: dict[str, Any]) -> str:
    """Return the page title, or :data:`UNTITLED` when none is set."""
    properties = page.get("properties") or {}
    for prop in properties.values():
        if not isinstance(prop, dict) or prop.get("type") != "title":
            continue
        spans = prop.get("title") or []
        if spans:
            title = plain_text(spans)
            if title:
                return title
    return UNTITLED


def extract_icon(page: dict[str, Any]) -> str:
    """Return the emoji icon, or ``""`` for external/file icons or none."""
    icon = page.get("icon") or {}
    if icon.get("type") == "emoji":
        return icon.get("emoji") or ""
    return ""


def extract_metadata(page: dict[str, Any]) -> PageMetadata:
    return PageMetadata(title=extract_title(page), icon=extract_icon(page))


def render_page_header(metadata: PageMetadata) -> str:
    """Icon (if any) followed by the ``<h1>`` page title."""
    html = ""
    if metadata.icon:
        html += f'<div class="page-icon">{metadata.icon}</div>\n'
    return html + f"<h1>{escape_html(metadata.title)}</h1>\n"
