"""Tests for propcare.storage.memory.InMemoryStore"""

import pytest

from propcare.models import ServiceItem
from propcare.storage import InMemoryStore
from propcare.storage.base import MaintenanceStore, ensure_conversation


def test_satisfies_protocol():
    assert isinstance(InMemoryStore(), MaintenanceStore)


# =========================================================================
# Directory lookups
# =========================================================================


class TestDirectory:

    @pytest.mark.asyncio
    async def test_tenant_with_property_and_landlord(self, store):
        tenant = await store.find_tenant_by_phone("+447700900123")
        assert tenant.id == "t1"
        assert tenant.property.address == "1 High Street"
        assert tenant.property.landlord.id == "ll1"

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, store):
        assert await store.find_tenant_by_phone("+447000000000") is None

    @pytest.mark.asyncio
    async def test_landlord_segment_required(self, store):
        assert (await store.find_landlord_by_phone("+447700900001")).id == "ll1"
        assert await store.find_landlord_by_phone("+447700900555") is None

    @pytest.mark.asyncio
    async def test_list_properties(self, store):
        props = await store.list_properties("ll1")
        assert {p.id for p in props} == {"p1", "p2"}

    @pytest.mark.asyncio
    async def test_search_services_skips_inactive(self, store):
        store.add_service(ServiceItem(
            id="svc3", sku_code="OLD", name="Old tap service", description="", price_pence=1, is_active=False,
        ))
        matches = await store.search_services(["tap"])
        assert [s.id for s in matches] == ["svc1", "svc2"]

    @pytest.mark.asyncio
    async def test_search_services_limit(self, store):
        matches = await store.search_services(["tap"], limit=1)
        assert [s.id for s in matches] == ["svc1"]

    @pytest.mark.asyncio
    async def test_search_services_no_terms(self, store):
        assert await store.search_services([""]) == []


# =========================================================================
# Landlord settings
# =========================================================================


class TestLandlordSettings:

    @pytest.mark.asyncio
    async def test_update_creates_row(self, store):
        settings = await store.update_landlord_settings("ll1", {"monthly_budget_pence": 50000})
        assert settings.monthly_budget_pence == 50000
        assert settings.auto_approve_under_pence == 15000
        assert (await store.get_landlord_settings("ll1")).monthly_budget_pence == 50000

    @pytest.mark.asyncio
    async def test_unknown_fields_ignored(self, store):
        settings = await store.update_landlord_settings("ll1", {"landlord_lead_id": "ll2", "bogus": 1})
        assert settings.landlord_lead_id == "ll1"

    @pytest.mark.asyncio
    async def test_increment_month_spend(self, store):
        assert await store.increment_month_spend("ll1", 1200) == 1200
        assert await store.increment_month_spend("ll1", 300) == 1500


# =========================================================================
# Issues and conversations
# =========================================================================


class TestIssues:

    @pytest.mark.asyncio
    async def test_create_requires_conversation(self, store):
        with pytest.raises(ValueError):
            await store.create_issue("t1", "p1", "ll1", "missing")

    @pytest.mark.asyncio
    async def test_create_and_update(self, store):
        await store.create_conversation("c1", "+447700900123")
        issue = await store.create_issue("t1", "p1", "ll1", "c1")
        assert issue.status == "new"

        updated = await store.update_issue(issue.id, {"status": "reported", "id": "hijack"})

        assert updated.id == issue.id
        assert updated.status == "reported"
        assert (await store.get_issue(issue.id)).status == "reported"

    @pytest.mark.asyncio
    async def test_update_missing_issue(self, store):
        assert await store.update_issue("nope", {"status": "reported"}) is None

    @pytest.mark.asyncio
    async def test_latest_issue_scoped_to_conversation(self, store):
        await store.create_conversation("c1", "+447700900123")
        await store.create_conversation("c2", "+447700900123")
        first = await store.create_issue("t1", "p1", "ll1", "c1")
        await store.create_issue("t1", "p1", "ll1", "c2")

        latest = await store.get_latest_issue("t1", "c1")

        assert latest.id == first.id
        assert await store.get_latest_issue("t9", "c1") is None

    @pytest.mark.asyncio
    async def test_list_issues_filters(self, store):
        await store.create_conversation("c1", "+447700900123")
        a = await store.create_issue("t1", "p1", "ll1", "c1")
        b = await store.create_issue("t1", "p2", "ll1", "c1")
        await store.update_issue(b.id, {"status": "completed"})

        assert [i.id for i in await store.list_issues(property_id="p1")] == [a.id]
        assert [i.id for i in await store.list_issues(statuses=["completed"])] == [b.id]
        assert len(await store.list_issues(landlord_lead_id="ll1")) == 2


class TestConversations:

    @pytest.mark.asyncio
    async def test_add_message_requires_conversation(self, store):
        with pytest.raises(ValueError):
            await store.add_message("missing", "inbound", "hi")

    @pytest.mark.asyncio
    async def test_recent_messages_in_order(self, store):
        await store.create_conversation("c1", "+447700900123")
        for i in range(5):
            await store.add_message("c1", "inbound", f"m{i}")

        recent = await store.get_recent_messages("c1", limit=3)

        assert [m.content for m in recent] == ["m2", "m3", "m4"]

    @pytest.mark.asyncio
    async def test_ensure_conversation_is_idempotent(self, store):
        first = await ensure_conversation(store, "c1", "+447700900123", "hello")
        second = await ensure_conversation(store, "c1", "+447700900123", "again")
        assert second is first
        assert second.last_message_preview == "hello"

    @pytest.mark.asyncio
    async def test_update_conversation(self, store):
        await store.create_conversation("c1", "+447700900123")
        updated = await store.update_conversation("c1", {"last_message_preview": "Thanks"})
        assert updated.last_message_preview == "Thanks"
        assert await store.update_conversation("missing", {"status": "closed"}) is None
