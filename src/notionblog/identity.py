"""Caller identity resolution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from notionblog.quota import Plan


@dataclass(frozen=True)
class Account:
    """An authenticated caller and the plan their quota is checked against."""

    user_id: str
    plan: Plan = Plan.FREE


@runtime_checkable
class IdentityProvider(Protocol):
    """Resolves an access token to an :class:`Account`."""

    def authenticate(self, access_token: str) -> Account | None:
        """Return the account for *access_token*, or ``None`` if unknown."""
        ...


class StaticIdentityProvider:
    """Resolves tokens from a fixed mapping.

    A leading ``"Bearer "`` prefix on the token is ignored, so raw
    ``Authorization`` header values can be passed straight through.
    """

    def __init__(self, accounts: Mapping[str, Account]) -> None:
        self._accounts = dict(accounts)

    def authenticate(self, access_token: str) -> Account | None:
        token = (access_token or "").strip()
        if token.startswith("Bearer "):
            token = token[len("Bearer "):].strip()
        if not token:
            return None
        return self._accounts.get(token)
