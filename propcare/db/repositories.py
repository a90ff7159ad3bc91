"""
Table repositories used by PostgresStore.

One class per table; each returns plain dict rows and leaves conversion to
model dataclasses to the store.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .repository import Repository

logger = logging.getLogger(__name__)


class LeadRepository(Repository):
    TABLE_NAME = "leads"

    async def find_by_phone(self, phone: str, segments: Iterable[str]) -> Optional[Dict[str, Any]]:
        return await self._fetch_one(
            "phone = $1 AND segment = ANY($2::text[])",
            (phone, list(segments)),
        )

    async def get(self, lead_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(lead_id)


class PropertyRepository(Repository):
    TABLE_NAME = "properties"

    async def get(self, property_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(property_id)

    async def for_landlord(self, landlord_lead_id: str) -> List[Dict[str, Any]]:
        return await self._fetch_many(
            "landlord_lead_id = $1", (landlord_lead_id,), order_by="created_at ASC"
        )


class TenantRepository(Repository):
    TABLE_NAME = "tenants"

    async def find_by_phone(self, phone: str) -> Optional[Dict[str, Any]]:
        return await self._fetch_one("phone = $1", (phone,))


class LandlordSettingsRepository(Repository):
    TABLE_NAME = "landlord_settings"
    ID_COLUMN = "landlord_lead_id"

    async def get(self, landlord_lead_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(landlord_lead_id)

    async def ensure(self, landlord_lead_id: str) -> Dict[str, Any]:
        """Return the settings row, inserting one with column defaults if missing."""
        row = await self._db.fetchrow(
            "INSERT INTO landlord_settings (landlord_lead_id) VALUES ($1) "
            "ON CONFLICT (landlord_lead_id) DO UPDATE SET landlord_lead_id = EXCLUDED.landlord_lead_id "
            "RETURNING *",
            landlord_lead_id,
        )
        return dict(row)

    async def update(self, landlord_lead_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update(landlord_lead_id, data)

    async def add_spend(self, landlord_lead_id: str, amount_pence: int) -> int:
        return await self._db.fetchval(
            "UPDATE landlord_settings "
            "SET current_month_spend_pence = current_month_spend_pence + $2, updated_at = NOW() "
            "WHERE landlord_lead_id = $1 "
            "RETURNING current_month_spend_pence",
            landlord_lead_id,
            amount_pence,
        )


class IssueRepository(Repository):
    TABLE_NAME = "tenant_issues"

    async def get(self, issue_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(issue_id)

    async def latest_for(self, tenant_id: str, conversation_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetch_one(
            "tenant_id = $1 AND conversation_id = $2",
            (tenant_id, conversation_id),
            order_by="created_at DESC",
        )

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert(data)

    async def update(self, issue_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update(issue_id, data)

    async def search(
        self,
        landlord_lead_id: Optional[str] = None,
        property_id: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Dict[str, Any]]:
        clauses = []
        args: List[Any] = []
        if landlord_lead_id is not None:
            args.append(landlord_lead_id)
            clauses.append(f"landlord_lead_id = ${len(args)}")
        if property_id is not None:
            args.append(property_id)
            clauses.append(f"property_id = ${len(args)}")
        if statuses is not None:
            args.append(list(statuses))
            clauses.append(f"status = ANY(${len(args)}::text[])")
        return await self._fetch_many(
            " AND ".join(clauses), tuple(args), order_by="created_at DESC"
        )


class ConversationRepository(Repository):
    TABLE_NAME = "conversations"

    async def get(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(conversation_id)

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert(data)

    async def update(self, conversation_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update(conversation_id, data)


class MessageRepository(Repository):
    TABLE_NAME = "messages"
    TOUCH_UPDATED_AT = False  # append-only

    async def recent(self, conversation_id: str, limit: int) -> List[Dict[str, Any]]:
        """Last ``limit`` messages, oldest first."""
        rows = await self._fetch_many(
            "conversation_id = $1", (conversation_id,), order_by="created_at DESC", limit=limit
        )
        rows.reverse()
        return rows

    async def add(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._insert(data)


class ServiceRepository(Repository):
    TABLE_NAME = "productized_services"

    async def search(self, keywords: List[str], limit: int) -> List[Dict[str, Any]]:
        """Active services whose name, description or keyword list matches any keyword."""
        rows = await self._db.fetch(
            "SELECT * FROM productized_services s "
            "WHERE s.is_active AND EXISTS ("
            "  SELECT 1 FROM unnest($1::text[]) AS kw "
            "  WHERE s.name ILIKE '%' || kw || '%' "
            "     OR s.description ILIKE '%' || kw || '%' "
            "     OR kw = ANY(s.keywords)"
            ") "
            "LIMIT $2",
            keywords,
            limit,
        )
        return [dict(r) for r in rows]
