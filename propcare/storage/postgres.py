"""
PostgresStore - MaintenanceStore over an asyncpg pool.

Usage:
    db = Database(dsn)
    await db.initialize()
    await ensure_schema(db)
    store = PostgresStore(db)
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

from ..constants import LANDLORD_SEGMENTS, IssueStatus
from ..db.database import Database
from ..db.repositories import (
    ConversationRepository, IssueRepository, LandlordSettingsRepository,
    LeadRepository, MessageRepository, PropertyRepository, ServiceRepository,
    TenantRepository,
)
from ..models import (
    Conversation, Issue, LandlordSettings, Lead, Message, Property,
    ServiceItem, Tenant, utcnow,
)
from .base import (
    CONVERSATION_UPDATABLE_FIELDS, ISSUE_UPDATABLE_FIELDS,
    SETTINGS_UPDATABLE_FIELDS, filter_updates,
)

logger = logging.getLogger(__name__)


class PostgresStore:
    """MaintenanceStore backed by Postgres tables (see propcare.db.initialize)."""

    def __init__(self, db: Database):
        self.db = db
        self.leads = LeadRepository(db)
        self.properties = PropertyRepository(db)
        self.tenants = TenantRepository(db)
        self.settings = LandlordSettingsRepository(db)
        self.issues = IssueRepository(db)
        self.conversations = ConversationRepository(db)
        self.messages = MessageRepository(db)
        self.services = ServiceRepository(db)

    # -- Directory --

    async def find_tenant_by_phone(self, phone: str) -> Optional[Tenant]:
        row = await self.tenants.find_by_phone(phone)
        if row is None:
            return None
        tenant = Tenant.from_row(row)

        prop_row = await self.properties.get(tenant.property_id)
        if prop_row is not None:
            prop = Property.from_row(prop_row)
            lead_row = await self.leads.get(prop.landlord_lead_id)
            prop.landlord = Lead.from_row(lead_row) if lead_row else None
            tenant.property = prop
        return tenant

    async def find_landlord_by_phone(self, phone: str) -> Optional[Lead]:
        row = await self.leads.find_by_phone(phone, LANDLORD_SEGMENTS)
        return Lead.from_row(row) if row else None

    async def list_properties(self, landlord_lead_id: str) -> List[Property]:
        rows = await self.properties.for_landlord(landlord_lead_id)
        return [Property.from_row(r) for r in rows]

    async def search_services(self, keywords: List[str], limit: int = 5) -> List[ServiceItem]:
        if not keywords:
            return []
        rows = await self.services.search(list(keywords), limit)
        return [ServiceItem.from_row(r) for r in rows]

    # -- Landlord settings --

    async def get_landlord_settings(self, landlord_lead_id: str) -> Optional[LandlordSettings]:
        row = await self.settings.get(landlord_lead_id)
        return LandlordSettings.from_row(row) if row else None

    async def update_landlord_settings(
        self, landlord_lead_id: str, updates: Dict[str, Any]
    ) -> LandlordSettings:
        await self.settings.ensure(landlord_lead_id)
        values = filter_updates(updates, SETTINGS_UPDATABLE_FIELDS, "landlord_settings")
        values.pop("updated_at", None)
        row = await self.settings.update(landlord_lead_id, values)
        return LandlordSettings.from_row(row)

    async def increment_month_spend(self, landlord_lead_id: str, amount_pence: int) -> int:
        await self.settings.ensure(landlord_lead_id)
        return await self.settings.add_spend(landlord_lead_id, amount_pence)

    # -- Issues --

    async def get_issue(self, issue_id: str) -> Optional[Issue]:
        row = await self.issues.get(issue_id)
        return Issue.from_row(row) if row else None

    async def get_latest_issue(self, tenant_id: str, conversation_id: str) -> Optional[Issue]:
        row = await self.issues.latest_for(tenant_id, conversation_id)
        return Issue.from_row(row) if row else None

    async def create_issue(
        self,
        tenant_id: str,
        property_id: str,
        landlord_lead_id: str,
        conversation_id: str,
    ) -> Issue:
        row = await self.issues.create({
            "id": uuid.uuid4().hex,
            "tenant_id": tenant_id,
            "property_id": property_id,
            "landlord_lead_id": landlord_lead_id,
            "conversation_id": conversation_id,
            "status": IssueStatus.NEW.value,
        })
        return Issue.from_row(row)

    async def update_issue(self, issue_id: str, updates: Dict[str, Any]) -> Optional[Issue]:
        values = filter_updates(updates, ISSUE_UPDATABLE_FIELDS, "issue")
        values.pop("updated_at", None)
        row = await self.issues.update(issue_id, values)
        return Issue.from_row(row) if row else None

    async def list_issues(
        self,
        landlord_lead_id: Optional[str] = None,
        property_id: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Issue]:
        rows = await self.issues.search(landlord_lead_id, property_id, statuses)
        return [Issue.from_row(r) for r in rows]

    # -- Conversations --

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        row = await self.conversations.get(conversation_id)
        return Conversation.from_row(row) if row else None

    async def create_conversation(
        self,
        conversation_id: str,
        phone_number: str,
        last_message_preview: Optional[str] = None,
    ) -> Conversation:
        row = await self.conversations.create({
            "id": conversation_id,
            "phone_number": phone_number,
            "status": "active",
            "last_message_at": utcnow(),
            "last_message_preview": last_message_preview,
        })
        return Conversation.from_row(row)

    async def update_conversation(
        self, conversation_id: str, updates: Dict[str, Any]
    ) -> Optional[Conversation]:
        values = filter_updates(updates, CONVERSATION_UPDATABLE_FIELDS, "conversation")
        values.pop("updated_at", None)
        row = await self.conversations.update(conversation_id, values)
        return Conversation.from_row(row) if row else None

    async def get_recent_messages(self, conversation_id: str, limit: int = 20) -> List[Message]:
        rows = await self.messages.recent(conversation_id, limit)
        return [Message.from_row(r) for r in rows]

    async def add_message(
        self,
        conversation_id: str,
        direction: str,
        content: Optional[str],
        type: str = "text",
        media_url: Optional[str] = None,
        status: str = "sent",
    ) -> Message:
        row = await self.messages.add({
            "id": uuid.uuid4().hex,
            "conversation_id": conversation_id,
            "direction": direction,
            "content": content,
            "type": type,
            "media_url": media_url,
            "status": status,
        })
        return Message.from_row(row)
