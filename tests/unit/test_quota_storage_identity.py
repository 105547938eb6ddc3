"""Tests for plan quotas, the in-memory export store and static identity."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from notionblog.errors import NotionBlogQuotaExceededError
from notionblog.identity import Account, IdentityProvider, StaticIdentityProvider
from notionblog.models import ExportStatus, Frontmatter
from notionblog.quota import DEFAULT_LIMITS, Plan, QuotaPolicy, start_of_month
from notionblog.storage import ExportStore, InMemoryExportStore

FM = Frontmatter(title="t", description="d", slug="s", date="2026-01-01T00:00:00.000Z")


# ---------------------------------------------------------------------------
# Quota
# ---------------------------------------------------------------------------

class TestPlan:
    @pytest.mark.parametrize(
        "name, plan",
        [("free", Plan.FREE), ("BASIC", Plan.BASIC), (" pro ", Plan.PRO),
         ("enterprise", Plan.FREE), (None, Plan.FREE), ("", Plan.FREE), (Plan.PRO, Plan.PRO)],
    )
    def test_parse(self, name, plan):
        assert Plan.parse(name) is plan


class TestQuotaPolicy:
    def test_default_limits(self):
        assert DEFAULT_LIMITS == {Plan.FREE: 5, Plan.BASIC: 20, Plan.PRO: None}

    @pytest.mark.parametrize("plan, used", [(Plan.FREE, 4), (Plan.BASIC, 19), (Plan.PRO, 10_000)])
    def test_under_limit(self, plan, used):
        QuotaPolicy().check(plan, used)

    @pytest.mark.parametrize("plan, used", [(Plan.FREE, 5), (Plan.FREE, 9), (Plan.BASIC, 20)])
    def test_at_or_over_limit(self, plan, used):
        with pytest.raises(NotionBlogQuotaExceededError) as exc_info:
            QuotaPolicy().check(plan, used)
        assert exc_info.value.code == "QUOTA_EXCEEDED"
        assert exc_info.value.context["used"] == used

    def test_unknown_plan_uses_free_limit(self):
        assert QuotaPolicy().limit_for("gold") == 5

    def test_custom_limits(self):
        policy = QuotaPolicy({Plan.FREE: 1, Plan.BASIC: None, Plan.PRO: None})
        with pytest.raises(NotionBlogQuotaExceededError):
            policy.check("free", 1)
        policy.check("basic", 500)


class TestStartOfMonth:
    def test_truncates(self):
        now = datetime(2026, 7, 19, 15, 30, 12, 5, tzinfo=timezone.utc)
        assert start_of_month(now) == datetime(2026, 7, 1, tzinfo=timezone.utc)

    def test_naive_treated_as_utc(self):
        assert start_of_month(datetime(2026, 2, 28, 23, 59)) == datetime(
            2026, 2, 1, tzinfo=timezone.utc
        )

    def test_other_offset_converted(self):
        plus_two = timezone(timedelta(hours=2))
        now = datetime(2026, 8, 1, 1, 0, tzinfo=plus_two)
        assert start_of_month(now) == datetime(2026, 7, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class TestInMemoryExportStore:
    def test_satisfies_protocol(self):
        assert isinstance(InMemoryExportStore(), ExportStore)

    def test_create_and_get(self):
        store = InMemoryExportStore()
        export = store.create("u1", "url", "Title", "<p></p>", FM, markdown_content="md")
        assert store.get(export.id) == export
        assert export.status is ExportStatus.COMPLETED
        assert export.created_at.tzinfo is not None
        assert export.markdown_content == "md"

    def test_exports_are_frozen(self):
        export = InMemoryExportStore().create("u1", "url", "T", "", FM)
        with pytest.raises(AttributeError):
            export.title = "changed"

    def test_ids_unique(self):
        store = InMemoryExportStore()
        ids = {store.create("u1", "url", "T", "", FM).id for _ in range(20)}
        assert len(ids) == 20

    def test_get_missing(self):
        assert InMemoryExportStore().get("nope") is None

    def test_list_for_user(self):
        store = InMemoryExportStore()
        for _ in range(3):
            store.create("u1", "url", "T", "", FM)
        store.create("u2", "url", "T", "", FM)
        listed = store.list_for_user("u1", limit=2)
        assert len(listed) == 2
        assert all(e.user_id == "u1" for e in listed)
        assert listed[0].created_at >= listed[1].created_at

    def test_delete(self):
        store = InMemoryExportStore()
        export = store.create("u1", "url", "T", "", FM)
        assert store.delete(export.id) is True
        assert store.delete(export.id) is False
        assert len(store) == 0

    def test_count_since(self):
        store = InMemoryExportStore()
        store.create("u1", "url", "T", "", FM)
        store.create("u2", "url", "T", "", FM)
        past = datetime(2000, 1, 1, tzinfo=timezone.utc)
        future = datetime.now(timezone.utc) + timedelta(days=1)
        assert store.count_since("u1", past) == 1
        assert store.count_since("u1", future) == 0

    def test_concurrent_creates(self):
        store = InMemoryExportStore()

        def worker():
            for _ in range(50):
                store.create("u1", "url", "T", "", FM)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store) == 200


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

class TestStaticIdentityProvider:
    @pytest.fixture
    def provider(self):
        return StaticIdentityProvider({"tok": Account("u1", Plan.BASIC)})

    def test_satisfies_protocol(self, provider):
        assert isinstance(provider, IdentityProvider)

    @pytest.mark.parametrize("token", ["tok", "Bearer tok", "  tok  "])
    def test_known_token(self, provider, token):
        assert provider.authenticate(token) == Account("u1", Plan.BASIC)

    @pytest.mark.parametrize("token", ["", "Bearer ", "other", None])
    def test_unknown_token(self, provider, token):
        assert provider.authenticate(token) is None

    def test_default_plan_is_free(self):
        assert Account("u").plan is Plan.FREE
