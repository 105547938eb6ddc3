"""Configuration for notionblog.

:class:`NotionBlogConfig` is a plain dataclass that captures every knob the
package exposes.  Instances are shared by :class:`NotionBlogClient`,
:class:`AsyncNotionBlogClient`, the renderers and the enrichment service.

Values can be given explicitly or read from the process environment with
:meth:`NotionBlogConfig.from_env`.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

MAX_FETCH_DEPTH = 10
"""Recursion ceiling for block tree fetching.  Subtrees deeper than this
are silently truncated."""

_LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")

_ENV_PREFIX = "NOTIONBLOG_"


@dataclass
class NotionBlogConfig:
    """Complete configuration for a notionblog client.

    Parameters
    ----------
    token:
        Notion integration secret.  Never logged.
    notion_version:
        Value of the ``Notion-Version`` header sent with every request.
    base_url:
        Notion API root URL.  Override for proxies or tests.
    timeout_seconds:
        HTTP timeout for Notion requests.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    max_fetch_depth:
        Deepest level the block tree fetcher descends to.  Children below
        this level are dropped without error.
    page_size:
        ``page_size`` query value used when listing block children.
    include_styles:
        Prepend the export stylesheet to rendered page HTML.
    enrichment_api_key:
        Bearer key for the SEO enrichment service.  When empty the
        enrichment call is skipped and heuristic metadata is used.
    enrichment_base_url:
        Root URL of the OpenAI-compatible chat completions gateway.
    enrichment_model:
        Model identifier sent with the enrichment request.
    enrichment_timeout_seconds:
        HTTP timeout for the enrichment request.
    metrics:
        Optional :class:`~notionblog.observability.MetricsHook` backend.
    debug_dump_payload:
        Write redacted request/response bodies to *stderr*.
    """

    # ── Notion ──────────────────────────────────────────────────────────
    token: str = ""

    notion_version: str = "2022-06-28"

    base_url: str = "https://api.notion.com/v1"

    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Fetching / rendering ────────────────────────────────────────────
    max_fetch_depth: int = MAX_FETCH_DEPTH

    page_size: int = 100

    include_styles: bool = True

    # ── Enrichment ──────────────────────────────────────────────────────
    enrichment_api_key: str = ""

    enrichment_base_url: str = "https://ai.gateway.lovable.dev/v1"

    enrichment_model: str = "google/gemini-2.5-flash"

    enrichment_timeout_seconds: float = 30.0

    # ── Observability ───────────────────────────────────────────────────
    metrics: Any | None = None

    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        for name in ("base_url", "enrichment_base_url"):
            parsed = urlparse(getattr(self, name))
            if parsed.scheme == "http" and parsed.hostname not in _LOCAL_HOSTS:
                raise ValueError(
                    f"{name} uses insecure HTTP for non-local host '{parsed.hostname}'. "
                    "Use HTTPS to protect credentials, or target localhost for testing."
                )

        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.enrichment_timeout_seconds <= 0:
            raise ValueError(
                f"enrichment_timeout_seconds must be > 0, got {self.enrichment_timeout_seconds}"
            )
        if self.max_fetch_depth < 0:
            raise ValueError(f"max_fetch_depth must be >= 0, got {self.max_fetch_depth}")
        if not 1 <= self.page_size <= 100:
            raise ValueError(f"page_size must be between 1 and 100, got {self.page_size}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> NotionBlogConfig:
        """Build a config from environment variables.

        ``NOTION_SECRET`` supplies the integration token; every other field
        is read from ``NOTIONBLOG_<FIELD_NAME>`` (upper-cased).  Explicit
        *overrides* win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        if env.get("NOTION_SECRET"):
            values["token"] = env["NOTION_SECRET"]

        for f in dataclasses.fields(cls):
            if f.name == "metrics":
                continue
            raw = env.get(f"{_ENV_PREFIX}{f.name.upper()}")
            if raw is None:
                continue
            values[f.name] = _coerce(raw, f.default)

        values.update(overrides)
        return cls(**values)

    def __repr__(self) -> str:
        """Mask secrets to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name in ("token", "enrichment_api_key"):
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"{f.name}='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"NotionBlogConfig({', '.join(parts)})"


def _coerce(raw: str, default: Any) -> Any:
    """Convert an environment string to the type of *default*."""
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw
