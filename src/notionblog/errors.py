"""Error hierarchy for notionblog.

Every error raised by the package inherits from :class:`NotionBlogError`.
Each carries a machine-readable ``code`` (from :class:`ErrorCode`), a
human-readable ``message``, an optional structured ``context`` dict, and an
optional ``cause`` (chained exception).

Only failures that abort a whole export are raised.  Failures local to a
single subtree or block (a child listing that errors, an unknown block
type) are reported as :class:`~notionblog.models.ConversionWarning` entries
instead.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the package can raise."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_URL = "INVALID_URL"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    PAGE_ACCESS = "PAGE_ACCESS"
    ENRICHMENT_ERROR = "ENRICHMENT_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class NotionBlogError(Exception):
    """Base exception for all notionblog errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A description of what went wrong.  Orchestrator-level errors use
        messages fit to show to an end user.
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code.value if isinstance(code, ErrorCode) else code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


class _CodedError(NotionBlogError):
    """Subclasses bind a fixed :attr:`default_code`."""

    default_code: str = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=self.default_code,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# API / transport errors
# ---------------------------------------------------------------------------

class NotionBlogValidationError(_CodedError):
    """The request was malformed (Notion 400, or a blank caller input).

    Context keys: ``status_code``, ``notion_code``, ``field``.
    """

    default_code = ErrorCode.VALIDATION_ERROR


class NotionBlogAuthError(_CodedError):
    """Credentials were rejected: a 401 from Notion, or an access token the
    identity provider does not recognise.
    """

    default_code = ErrorCode.AUTH_ERROR


class NotionBlogPermissionError(_CodedError):
    """Notion returned 403; the integration lacks access to the resource.

    Context keys: ``status_code``, ``operation``.
    """

    default_code = ErrorCode.PERMISSION_ERROR


class NotionBlogNotFoundError(_CodedError):
    """A resource does not exist (Notion 404, or an unknown export id).

    Context keys: ``path`` or ``export_id``.
    """

    default_code = ErrorCode.NOT_FOUND


class NotionBlogRateLimitError(_CodedError):
    """Notion returned 429.  Requests are never retried.

    Context keys: ``retry_after_seconds``.
    """

    default_code = ErrorCode.RATE_LIMITED


class NotionBlogNetworkError(_CodedError):
    """A transport-level failure occurred (timeout, DNS, connection reset).

    Context keys: ``url``.
    """

    default_code = ErrorCode.NETWORK_ERROR


# ---------------------------------------------------------------------------
# Export workflow errors
# ---------------------------------------------------------------------------

class NotionBlogInvalidUrlError(_CodedError):
    """The supplied Notion URL does not contain a recognisable page id.

    Context keys: ``url``.
    """

    default_code = ErrorCode.INVALID_URL


class NotionBlogQuotaExceededError(_CodedError):
    """The caller has used every export their plan allows this month.

    Context keys: ``plan``, ``used``, ``limit``.
    """

    default_code = ErrorCode.QUOTA_EXCEEDED


class NotionBlogPageAccessError(_CodedError):
    """The root page could not be fetched, usually because it is not shared
    with the integration.

    Context keys: ``page_id``.
    """

    default_code = ErrorCode.PAGE_ACCESS


class NotionBlogEnrichmentError(_CodedError):
    """The enrichment service failed or returned unusable content.

    Never escapes :class:`~notionblog.enrichment.SeoEnricher`; it is
    caught there and replaced by heuristic metadata.

    Context keys: ``status_code``, ``reason``.
    """

    default_code = ErrorCode.ENRICHMENT_ERROR


class NotionBlogStorageError(_CodedError):
    """The export store could not persist or load an export.

    Context keys: ``export_id``, ``user_id``.
    """

    default_code = ErrorCode.STORAGE_ERROR

