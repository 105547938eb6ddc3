"""Secret redaction for debug dumps.

:func:`redact` returns a deep copy of a request/response dump in which

* values under sensitive keys (``authorization``, ``token``, ``api_key``,
  ...) are masked to their last four characters,
* any ``Bearer <secret>`` text is replaced with ``Bearer <redacted>``,
* every occurrence of the explicitly supplied secrets is scrubbed.

Rendered page HTML can be large, so string values longer than
``max_string`` are truncated with a length marker.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset({
    "authorization",
    "token",
    "secret",
    "password",
    "api_key",
    "api-key",
    "cookie",
})

_BEARER_RE = re.compile(r"(Bearer\s+)\S+")


def _mask(value: str) -> str:
    return f"<redacted:...{value[-4:]}>" if len(value) >= 8 else "<redacted>"


def _scrub(value: str, secrets: tuple[str, ...], max_string: int) -> str:
    for secret in secrets:
        if secret and secret in value:
            value = value.replace(secret, "<redacted>")
    value = _BEARER_RE.sub(r"\1<redacted>", value)
    if len(value) > max_string:
        value = f"{value[:max_string]}...<truncated:{len(value)}_chars>"
    return value


def _walk(value: Any, secrets: tuple[str, ...], max_string: int) -> Any:
    if isinstance(value, dict):
        out: dict = {}
        for key, item in value.items():
            lowered = key.lower() if isinstance(key, str) else ""
            if any(marker in lowered for marker in _SENSITIVE_KEYS):
                out[key] = _mask(item) if isinstance(item, str) else "<redacted>"
            else:
                out[key] = _walk(item, secrets, max_string)
        return out
    if isinstance(value, list):
        return [_walk(item, secrets, max_string) for item in value]
    if isinstance(value, str):
        return _scrub(value, secrets, max_string)
    return value


def redact(
    payload: dict,
    secrets: Iterable[str | None] = (),
    max_string: int = 2000,
) -> dict:
    """Return a redacted deep copy of *payload*; the input is never mutated.

    Examples
    --------
    >>> redact({"Authorization": "Bearer secret_abcd1234"})
    {'Authorization': '<redacted:...1234>'}
    """
    active = tuple(s for s in secrets if s)
    return _walk(copy.deepcopy(payload), active, max_string)
