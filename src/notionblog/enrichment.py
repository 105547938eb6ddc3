"""SEO metadata enrichment.

:class:`SeoEnricher` asks an OpenAI-compatible chat completions endpoint for
a title, description and slug for a rendered page.  The rendered HTML is
only sent as context; anything the model returns besides the three
metadata fields is ignored, so exported HTML never depends on this call.

Every failure (no API key, non-2xx status, network error, unparseable
reply) degrades to :func:`fallback_metadata`.  Nothing is retried.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any

import httpx

from notionblog.config import NotionBlogConfig
from notionblog.errors import NotionBlogEnrichmentError
from notionblog.models import SeoMetadata
from notionblog.observability import get_logger, log_event, resolve_metrics
from notionblog.utils.slug import slugify

log = get_logger("notionblog.enrichment")

DESCRIPTION_MAX_CHARS = 160

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

SYSTEM_PROMPT = """You are an expert SEO content optimizer. Your task is to:
1. Read the provided HTML article
2. Generate SEO metadata only
3. Do NOT rewrite or return the HTML content
4. Return valid JSON only"""

USER_PROMPT_TEMPLATE = """Original title: {title}

HTML Content:
{html}

Generate ONLY the following as JSON:
{{
  "title": "SEO-optimized title max 60 chars",
  "description": "Compelling meta description max 160 chars",
  "slug": "url-friendly-slug"
}}"""


def fallback_metadata(title: str) -> SeoMetadata:
    """Heuristic metadata derived from the page title alone."""
    return SeoMetadata(
        title=title,
        description=title[:DESCRIPTION_MAX_CHARS],
        slug=slugify(title),
        source="fallback",
    )


def build_request_body(model: str, title: str, html: str) -> dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": USER_PROMPT_TEMPLATE.format(title=title, html=html)},
        ],
    }


def parse_completion(data: Any, title: str) -> SeoMetadata:
    """Extract metadata from a chat completion response body.

    The first ``{...}`` span of ``choices[0].message.content`` is parsed as
    JSON.  Missing or blank fields fall back individually.

    Raises
    ------
    NotionBlogEnrichmentError
        If the response has no message content or no parseable JSON object.
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise NotionBlogEnrichmentError(
            message="Completion response has no message content",
            context={"reason": "missing_content"},
            cause=exc,
        ) from exc

    if content is None:
        content = ""
    if not isinstance(content, str):
        raise NotionBlogEnrichmentError(
            message=f"Completion message content is {type(content).__name__}, not text",
            context={"reason": "missing_content"},
        )

    match = _JSON_OBJECT_RE.search(content)
    if match is None:
        raise NotionBlogEnrichmentError(
            message="Completion content contains no JSON object",
            context={"reason": "no_json"},
        )
    try:
        parsed = json.loads(match.group(0))
    except ValueError as exc:
        raise NotionBlogEnrichmentError(
            message=f"Completion JSON is invalid: {exc}",
            context={"reason": "invalid_json"},
            cause=exc,
        ) from exc
    if not isinstance(parsed, dict):
        raise NotionBlogEnrichmentError(
            message="Completion JSON is not an object",
            context={"reason": "invalid_json"},
        )

    fallback = fallback_metadata(title)

    def _field(key: str) -> str:
        value = parsed.get(key)
        return value.strip() if isinstance(value, str) else ""

    return SeoMetadata(
        title=_field("title") or fallback.title,
        description=_field("description") or fallback.description,
        slug=slugify(_field("slug")) or fallback.slug,
        source="enrichment",
    )


class SeoEnricher:
    """Client for the SEO enrichment service.

    Parameters
    ----------
    config:
        Supplies ``enrichment_api_key``, ``enrichment_base_url``,
        ``enrichment_model`` and ``enrichment_timeout_seconds``.
    client:
        Optional pre-built :class:`httpx.Client`, mainly for tests.
    """

    def __init__(self, config: NotionBlogConfig, client: httpx.Client | None = None) -> None:
        self._config = config
        self._metrics = resolve_metrics(config.metrics)
        self._client = client or httpx.Client(timeout=config.enrichment_timeout_seconds)

    @property
    def enabled(self) -> bool:
        return bool(self._config.enrichment_api_key)

    def enrich(self, title: str, html: str) -> SeoMetadata:
        """Return SEO metadata for a page, never raising.

        Parameters
        ----------
        title:
            The page title extracted from Notion.
        html:
            The rendered page HTML, sent as context only.
        """
        if not self.enabled:
            return fallback_metadata(title)

        try:
            return self._request(title, html)
        except NotionBlogEnrichmentError as exc:
            self._metrics.increment(
                "notionblog.enrichment_fallbacks_total",
                tags={"reason": str(exc.context.get("reason", "error"))},
            )
            log.warning(
                "Enrichment failed; using fallback metadata",
                extra=log_event("enrich", error=exc.message, **exc.context),
            )
            return fallback_metadata(title)

    def _request(self, title: str, html: str) -> SeoMetadata:
        url = f"{self._config.enrichment_base_url.rstrip('/')}/chat/completions"
        start = time.monotonic()
        try:
            response = self._client.post(
                url,
                headers={
                    "Authorization": f"Bearer {self._config.enrichment_api_key}",
                    "Content-Type": "application/json",
                },
                json=build_request_body(self._config.enrichment_model, title, html),
            )
        except httpx.HTTPError as exc:
            raise NotionBlogEnrichmentError(
                message=f"Enrichment request failed: {exc}",
                context={"reason": "network"},
                cause=exc,
            ) from exc
        finally:
            elapsed_ms = (time.monotonic() - start) * 1000
            self._metrics.timing("notionblog.enrichment_duration_ms", elapsed_ms)

        if not response.is_success:
            raise NotionBlogEnrichmentError(
                message=f"Enrichment service returned HTTP {response.status_code}",
                context={"reason": "http_status", "status_code": response.status_code},
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise NotionBlogEnrichmentError(
                message="Enrichment response is not JSON",
                context={"reason": "invalid_json"},
                cause=exc,
            ) from exc
        return parse_completion(data, title)

    def close(self) -> None:
        self._client.close()
