"""Plan-based monthly export quotas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from notionblog.errors import NotionBlogQuotaExceededError


class Plan(str, Enum):
    """Subscription plan of an account."""

    FREE = "free"
    BASIC = "basic"
    PRO = "pro"

    @classmethod
    def parse(cls, name: str | Plan | None) -> Plan:
        """Resolve a plan name; unknown or missing names mean :attr:`FREE`."""
        if isinstance(name, Plan):
            return name
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            return cls.FREE


DEFAULT_LIMITS: dict[Plan, int | None] = {
    Plan.FREE: 5,
    Plan.BASIC: 20,
    Plan.PRO: None,
}


def start_of_month(now: datetime | None = None) -> datetime:
    """First instant of the UTC calendar month containing *now*."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class QuotaPolicy:
    """Monthly export limits per plan.  ``None`` means unlimited."""

    limits: dict[Plan, int | None] = field(default_factory=lambda: dict(DEFAULT_LIMITS))

    def limit_for(self, plan: Plan | str) -> int | None:
        return self.limits.get(Plan.parse(plan), self.limits.get(Plan.FREE))

    def check(self, plan: Plan | str, used: int) -> None:
        """Raise when *used* exports already reach the plan's limit.

        Raises
        ------
        NotionBlogQuotaExceededError
        """
        resolved = Plan.parse(plan)
        limit = self.limit_for(resolved)
        if limit is not None and used >= limit:
            raise NotionBlogQuotaExceededError(
                message="Export limit reached. Please upgrade your plan.",
                context={"plan": resolved.value, "used": used, "limit": limit},
            )
