"""Slug generation shared by heading anchors and export slugs."""

from __future__ import annotations

import re

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase *text*, collapse every non ``[a-z0-9]`` run into ``-`` and
    trim hyphens from both ends.

    Deterministic; punctuation-only or empty input yields ``""``.

    Examples
    --------
    >>> slugify("Hello, World!")
    'hello-world'
    >>> slugify("!!!")
    ''
    """
    return _NON_ALNUM_RE.sub("-", text.lower()).strip("-")
