"""
PropCare Storage - Persistence contract

MaintenanceStore is the narrow read/write surface the orchestrator and tool
handlers need. Two implementations ship with PropCare:

- PostgresStore: asyncpg pool + one repository per table
- InMemoryStore: dict-backed, for tests and local runs without a database

Every write touches ``updated_at``.
"""

import logging
from dataclasses import fields
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from ..models import (
    Conversation, Issue, LandlordSettings, Lead, Message, Property,
    ServiceItem, Tenant,
)

logger = logging.getLogger(__name__)

# Issue columns that may be written through update_issue()
ISSUE_UPDATABLE_FIELDS = frozenset(
    f.name for f in fields(Issue)
    if f.name not in {"id", "tenant_id", "property_id", "landlord_lead_id", "conversation_id", "created_at"}
)

SETTINGS_UPDATABLE_FIELDS = frozenset(
    f.name for f in fields(LandlordSettings)
    if f.name not in {"id", "landlord_lead_id", "created_at"}
)

CONVERSATION_UPDATABLE_FIELDS = frozenset({"status", "last_message_at", "last_message_preview", "updated_at"})


def filter_updates(updates: Dict[str, Any], allowed: Iterable[str], record: str) -> Dict[str, Any]:
    """Drop keys that are not writable columns of ``record``."""
    allowed = set(allowed)
    unknown = [k for k in updates if k not in allowed]
    if unknown:
        logger.warning(f"Ignoring unknown {record} fields: {', '.join(sorted(unknown))}")
    return {k: v for k, v in updates.items() if k in allowed}


@runtime_checkable
class MaintenanceStore(Protocol):
    """Read/write contract for tenants, landlords, issues and conversations."""

    # -- Directory (read-only) --

    async def find_tenant_by_phone(self, phone: str) -> Optional[Tenant]:
        """Tenant with ``property`` and ``property.landlord`` populated"""
        ...

    async def find_landlord_by_phone(self, phone: str) -> Optional[Lead]:
        """Lead whose segment marks a landlord (LANDLORD or PROP_MGR)"""
        ...

    async def list_properties(self, landlord_lead_id: str) -> List[Property]:
        ...

    async def search_services(self, keywords: List[str], limit: int = 5) -> List[ServiceItem]:
        """Active catalog items whose name, description or keywords match any keyword"""
        ...

    # -- Landlord settings --

    async def get_landlord_settings(self, landlord_lead_id: str) -> Optional[LandlordSettings]:
        ...

    async def update_landlord_settings(
        self, landlord_lead_id: str, updates: Dict[str, Any]
    ) -> LandlordSettings:
        """Apply updates, creating a default settings row first if none exists"""
        ...

    async def increment_month_spend(self, landlord_lead_id: str, amount_pence: int) -> int:
        """Add to the running monthly spend and return the new total"""
        ...

    # -- Issues --

    async def get_issue(self, issue_id: str) -> Optional[Issue]:
        ...

    async def get_latest_issue(self, tenant_id: str, conversation_id: str) -> Optional[Issue]:
        """Most recently created issue for a tenant in a conversation"""
        ...

    async def create_issue(
        self,
        tenant_id: str,
        property_id: str,
        landlord_lead_id: str,
        conversation_id: str,
    ) -> Issue:
        """Create an issue in state ``new``"""
        ...

    async def update_issue(self, issue_id: str, updates: Dict[str, Any]) -> Optional[Issue]:
        ...

    async def list_issues(
        self,
        landlord_lead_id: Optional[str] = None,
        property_id: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Issue]:
        """Issues matching every given filter, newest first"""
        ...

    # -- Conversations --

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        ...

    async def create_conversation(
        self,
        conversation_id: str,
        phone_number: str,
        last_message_preview: Optional[str] = None,
    ) -> Conversation:
        ...

    async def update_conversation(
        self, conversation_id: str, updates: Dict[str, Any]
    ) -> Optional[Conversation]:
        ...

    async def get_recent_messages(self, conversation_id: str, limit: int = 20) -> List[Message]:
        """Last ``limit`` messages, oldest first"""
        ...

    async def add_message(
        self,
        conversation_id: str,
        direction: str,
        content: Optional[str],
        type: str = "text",
        media_url: Optional[str] = None,
        status: str = "sent",
    ) -> Message:
        ...


async def ensure_conversation(
    store: MaintenanceStore,
    conversation_id: str,
    phone_number: str,
    last_message_preview: Optional[str] = None,
) -> Conversation:
    """Return the conversation row, creating it first if it does not exist."""
    conversation = await store.get_conversation(conversation_id)
    if conversation is not None:
        return conversation
    logger.info(f"Creating conversation {conversation_id}")
    return await store.create_conversation(conversation_id, phone_number, last_message_preview)
