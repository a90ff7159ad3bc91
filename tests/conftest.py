"""Shared fixtures: a seeded in-memory store and per-turn worker contexts."""

import pytest
import pytest_asyncio

from propcare.constants import SenderType
from propcare.models import Lead, Property, ServiceItem, Tenant, WorkerContext
from propcare.notifications import LogNotifier
from propcare.storage import InMemoryStore

TENANT_PHONE = "+447700900123"
LANDLORD_PHONE = "+447700900001"


@pytest.fixture
def store():
    s = InMemoryStore()
    s.add_lead(Lead(id="ll1", customer_name="Sam Landlord", phone=LANDLORD_PHONE, segment="LANDLORD"))
    s.add_lead(Lead(id="cust1", customer_name="Pat Customer", phone="+447700900555", segment="HOMEOWNER"))
    s.add_property(Property(id="p1", landlord_lead_id="ll1", address="1 High Street", postcode="SW1A 1AA"))
    s.add_property(Property(id="p2", landlord_lead_id="ll1", address="2 Mill Lane", postcode="M1 1AA", nickname="Mill"))
    s.add_tenant(Tenant(id="t1", name="Alex Tenant", phone=TENANT_PHONE, property_id="p1"))
    s.add_service(ServiceItem(
        id="svc1",
        sku_code="PLB-TAP",
        name="Tap washer replacement",
        description="Replace worn washer on a dripping tap",
        price_pence=9000,
        keywords=["tap", "washer", "dripping"],
        category="plumbing",
    ))
    s.add_service(ServiceItem(
        id="svc2",
        sku_code="PLB-TAP-NEW",
        name="Tap replacement",
        description="Supply and fit a new kitchen tap",
        price_pence=15000,
        keywords=["tap", "kitchen"],
        category="plumbing",
    ))
    return s


@pytest.fixture
def notifier():
    return LogNotifier()


@pytest_asyncio.fixture
async def tenant_context(store, notifier):
    tenant = await store.find_tenant_by_phone(TENANT_PHONE)
    await store.create_conversation("tenant_t1", TENANT_PHONE)
    issue = await store.create_issue("t1", "p1", "ll1", "tenant_t1")
    return WorkerContext(
        conversation_id="tenant_t1",
        sender_id="t1",
        sender_type=SenderType.TENANT,
        tenant=tenant,
        property=tenant.property,
        landlord=tenant.property.landlord,
        current_issue=issue,
        store=store,
        notifier=notifier,
    )


@pytest.fixture
def landlord_context(store, notifier):
    return WorkerContext(
        conversation_id="landlord_ll1",
        sender_id="ll1",
        sender_type=SenderType.LANDLORD,
        landlord=store.leads["ll1"],
        store=store,
        notifier=notifier,
    )
