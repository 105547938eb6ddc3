"""Notion page id extraction from user-supplied URLs.

Accepted shapes:

* a bare 32-hex id -- ``0123456789abcdef0123456789abcdef``
* a dashed UUID -- ``01234567-89ab-cdef-0123-456789abcdef``
* a page URL with the id as its last path segment, optionally behind a
  workspace segment and a human-readable slug --
  ``https://www.notion.so/acme/My-Page-0123456789abcdef0123456789abcdef``
* the same on a public ``notion.site`` domain.

Every pattern is tried against both the raw input and the input with all
hyphens removed, so dashed ids inside URLs resolve too.
"""

from __future__ import annotations

import re

_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"([a-f0-9]{32})(?:\?|$)", re.IGNORECASE),
    re.compile(
        r"([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})",
        re.IGNORECASE,
    ),
    re.compile(r"notion\.so/(?:[^/]+/)?(?:[^-]+-)?([a-f0-9]{32})", re.IGNORECASE),
    re.compile(r"notion\.site/(?:[^/]+/)?(?:[^-]+-)?([a-f0-9]{32})", re.IGNORECASE),
    re.compile(r"^([a-f0-9]{32})$", re.IGNORECASE),
)


def extract_page_id(url: str) -> str | None:
    """Return the dash-free page id found in *url*, or ``None``.

    Parameters
    ----------
    url:
        A Notion page URL or id in any of the accepted shapes.

    Examples
    --------
    >>> extract_page_id("https://notion.so/Post-0123456789abcdef0123456789abcdef")
    '0123456789abcdef0123456789abcdef'
    >>> extract_page_id("https://example.com/nothing-here") is None
    True
    """
    if not url:
        return None
    candidate = url.strip()
    dashless = candidate.replace("-", "")

    for pattern in _PATTERNS:
        match = pattern.search(candidate) or pattern.search(dashless)
        if match:
            return match.group(1).replace("-", "")
    return None
