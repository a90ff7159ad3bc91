"""
InMemoryStore - dict-backed MaintenanceStore.

Used by the test suite and by the server when no database DSN is
configured. Directory records are seeded with the ``add_*`` helpers.

Usage:
    store = InMemoryStore()
    landlord = store.add_lead(Lead(id="ll1", customer_name="Sam", phone="+447700900001", segment="LANDLORD"))
    store.add_property(Property(id="p1", landlord_lead_id="ll1", address="1 High St", postcode="SW1A 1AA"))
    store.add_tenant(Tenant(id="t1", name="Alex", phone="+447700900123", property_id="p1"))
"""

import logging
import uuid
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from ..constants import LANDLORD_SEGMENTS, IssueStatus
from ..models import (
    Conversation, Issue, LandlordSettings, Lead, Message, Property,
    ServiceItem, Tenant, utcnow,
)
from .base import (
    CONVERSATION_UPDATABLE_FIELDS, ISSUE_UPDATABLE_FIELDS,
    SETTINGS_UPDATABLE_FIELDS, filter_updates,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class InMemoryStore:
    """MaintenanceStore backed by plain dicts and lists."""

    def __init__(self):
        self.leads: Dict[str, Lead] = {}
        self.properties: Dict[str, Property] = {}
        self.tenants: Dict[str, Tenant] = {}
        self.services: Dict[str, ServiceItem] = {}
        self.settings: Dict[str, LandlordSettings] = {}
        self.issues: Dict[str, Issue] = {}
        self.conversations: Dict[str, Conversation] = {}
        self.messages: Dict[str, List[Message]] = {}

    # -- Seeding --

    def add_lead(self, lead: Lead) -> Lead:
        self.leads[lead.id] = lead
        return lead

    def add_property(self, prop: Property) -> Property:
        self.properties[prop.id] = prop
        return prop

    def add_tenant(self, tenant: Tenant) -> Tenant:
        self.tenants[tenant.id] = tenant
        return tenant

    def add_service(self, service: ServiceItem) -> ServiceItem:
        self.services[service.id] = service
        return service

    def set_landlord_settings(self, settings: LandlordSettings) -> LandlordSettings:
        self.settings[settings.landlord_lead_id] = settings
        return settings

    def add_issue(self, issue: Issue) -> Issue:
        self.issues[issue.id] = issue
        return issue

    # -- Directory --

    async def find_tenant_by_phone(self, phone: str) -> Optional[Tenant]:
        for tenant in self.tenants.values():
            if tenant.phone != phone:
                continue
            prop = self.properties.get(tenant.property_id)
            if prop is not None:
                prop = replace(prop, landlord=self.leads.get(prop.landlord_lead_id))
            return replace(tenant, property=prop)
        return None

    async def find_landlord_by_phone(self, phone: str) -> Optional[Lead]:
        for lead in self.leads.values():
            if lead.phone == phone and (lead.segment or "") in LANDLORD_SEGMENTS:
                return lead
        return None

    async def list_properties(self, landlord_lead_id: str) -> List[Property]:
        return [p for p in self.properties.values() if p.landlord_lead_id == landlord_lead_id]

    async def search_services(self, keywords: List[str], limit: int = 5) -> List[ServiceItem]:
        terms = [k.lower() for k in keywords if k]
        if not terms:
            return []
        matches = []
        for service in self.services.values():
            if not service.is_active:
                continue
            name = service.name.lower()
            description = (service.description or "").lower()
            tags = [k.lower() for k in service.keywords or []]
            if any(t in name or t in description or t in tags for t in terms):
                matches.append(service)
            if len(matches) >= limit:
                break
        return matches

    # -- Landlord settings --

    async def get_landlord_settings(self, landlord_lead_id: str) -> Optional[LandlordSettings]:
        return self.settings.get(landlord_lead_id)

    async def update_landlord_settings(
        self, landlord_lead_id: str, updates: Dict[str, Any]
    ) -> LandlordSettings:
        current = self.settings.get(landlord_lead_id)
        if current is None:
            now = utcnow()
            current = LandlordSettings(
                landlord_lead_id=landlord_lead_id, id=_new_id(), created_at=now, updated_at=now
            )
        values = filter_updates(updates, SETTINGS_UPDATABLE_FIELDS, "landlord_settings")
        values["updated_at"] = utcnow()
        updated = replace(current, **values)
        self.settings[landlord_lead_id] = updated
        return updated

    async def increment_month_spend(self, landlord_lead_id: str, amount_pence: int) -> int:
        current = self.settings.get(landlord_lead_id)
        total = (current.current_month_spend_pence if current else 0) + amount_pence
        await self.update_landlord_settings(landlord_lead_id, {"current_month_spend_pence": total})
        return total

    # -- Issues --

    async def get_issue(self, issue_id: str) -> Optional[Issue]:
        return self.issues.get(issue_id)

    async def get_latest_issue(self, tenant_id: str, conversation_id: str) -> Optional[Issue]:
        latest = None
        for issue in self.issues.values():
            if issue.tenant_id != tenant_id or issue.conversation_id != conversation_id:
                continue
            if latest is None or issue.created_at >= latest.created_at:
                latest = issue
        return latest

    async def create_issue(
        self,
        tenant_id: str,
        property_id: str,
        landlord_lead_id: str,
        conversation_id: str,
    ) -> Issue:
        if conversation_id not in self.conversations:
            raise ValueError(f"Conversation {conversation_id} does not exist")
        issue = Issue(
            id=_new_id(),
            tenant_id=tenant_id,
            property_id=property_id,
            landlord_lead_id=landlord_lead_id,
            conversation_id=conversation_id,
            status=IssueStatus.NEW.value,
        )
        self.issues[issue.id] = issue
        return issue

    async def update_issue(self, issue_id: str, updates: Dict[str, Any]) -> Optional[Issue]:
        issue = self.issues.get(issue_id)
        if issue is None:
            return None
        values = filter_updates(updates, ISSUE_UPDATABLE_FIELDS, "issue")
        values["updated_at"] = utcnow()
        updated = replace(issue, **values)
        self.issues[issue_id] = updated
        return updated

    async def list_issues(
        self,
        landlord_lead_id: Optional[str] = None,
        property_id: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Issue]:
        wanted = set(statuses) if statuses is not None else None
        result = [
            i for i in self.issues.values()
            if (landlord_lead_id is None or i.landlord_lead_id == landlord_lead_id)
            and (property_id is None or i.property_id == property_id)
            and (wanted is None or i.status in wanted)
        ]
        return sorted(result, key=lambda i: i.created_at, reverse=True)

    # -- Conversations --

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self.conversations.get(conversation_id)

    async def create_conversation(
        self,
        conversation_id: str,
        phone_number: str,
        last_message_preview: Optional[str] = None,
    ) -> Conversation:
        now = utcnow()
        conversation = Conversation(
            id=conversation_id,
            phone_number=phone_number,
            last_message_at=now,
            last_message_preview=last_message_preview,
            created_at=now,
            updated_at=now,
        )
        self.conversations[conversation_id] = conversation
        self.messages.setdefault(conversation_id, [])
        return conversation

    async def update_conversation(
        self, conversation_id: str, updates: Dict[str, Any]
    ) -> Optional[Conversation]:
        conversation = self.conversations.get(conversation_id)
        if conversation is None:
            return None
        values = filter_updates(updates, CONVERSATION_UPDATABLE_FIELDS, "conversation")
        values["updated_at"] = utcnow()
        updated = replace(conversation, **values)
        self.conversations[conversation_id] = updated
        return updated

    async def get_recent_messages(self, conversation_id: str, limit: int = 20) -> List[Message]:
        return list(self.messages.get(conversation_id, [])[-limit:])

    async def add_message(
        self,
        conversation_id: str,
        direction: str,
        content: Optional[str],
        type: str = "text",
        media_url: Optional[str] = None,
        status: str = "sent",
    ) -> Message:
        if conversation_id not in self.conversations:
            raise ValueError(f"Conversation {conversation_id} does not exist")
        message = Message(
            id=_new_id(),
            conversation_id=conversation_id,
            direction=direction,
            content=content,
            type=type,
            media_url=media_url,
            status=status,
        )
        self.messages.setdefault(conversation_id, []).append(message)
        return message
