"""
PropCare Repository - Base class for table-level data access.

Each table gets a subclass that sets TABLE_NAME (and ID_COLUMN when the
key is not ``id``) and adds its own query methods on top of the generic
helpers below. Schema lives in ``propcare.db.initialize``.

Usage:
    class IssueRepository(Repository):
        TABLE_NAME = "tenant_issues"

        async def for_property(self, property_id: str) -> list[dict]:
            return await self._fetch_many("property_id = $1", (property_id,))
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class Repository:
    """
    Base class for domain data access.

    Subclasses define TABLE_NAME and domain methods. Updates made through
    _update() always set ``updated_at`` when TOUCH_UPDATED_AT is true.
    """

    TABLE_NAME: str = ""
    ID_COLUMN: str = "id"
    TOUCH_UPDATED_AT: bool = True

    def __init__(self, db: "Database"):
        self._db = db

    @property
    def db(self) -> "Database":
        return self._db

    # -- Generic helpers (subclasses can use or ignore) --

    async def _get(self, id_value: Any) -> Optional[Dict[str, Any]]:
        """Fetch one row by primary key."""
        row = await self._db.fetchrow(
            f"SELECT * FROM {self.TABLE_NAME} WHERE {self.ID_COLUMN} = $1",
            id_value,
        )
        return dict(row) if row else None

    async def _insert(
        self,
        data: Dict[str, Any],
        returning: str = "*",
    ) -> Optional[Dict[str, Any]]:
        """Insert a row and return it."""
        columns = list(data.keys())
        placeholders = [f"${i+1}" for i in range(len(columns))]
        values = list(data.values())

        query = (
            f"INSERT INTO {self.TABLE_NAME} ({', '.join(columns)}) "
            f"VALUES ({', '.join(placeholders)}) "
            f"RETURNING {returning}"
        )
        row = await self._db.fetchrow(query, *values)
        return dict(row) if row else None

    async def _update(
        self,
        id_value: Any,
        data: Dict[str, Any],
        returning: str = "*",
    ) -> Optional[Dict[str, Any]]:
        """Update a row by primary key and return it (None if missing)."""
        data = dict(data)
        if self.TOUCH_UPDATED_AT:
            data["updated_at"] = datetime.now(timezone.utc)

        set_clauses = []
        values = []
        for i, (col, val) in enumerate(data.items(), 1):
            set_clauses.append(f"{col} = ${i}")
            values.append(val)

        values.append(id_value)
        where_idx = len(values)

        query = (
            f"UPDATE {self.TABLE_NAME} "
            f"SET {', '.join(set_clauses)} "
            f"WHERE {self.ID_COLUMN} = ${where_idx} "
            f"RETURNING {returning}"
        )
        row = await self._db.fetchrow(query, *values)
        return dict(row) if row else None

    async def _fetch_one(self, where: str, args: tuple = (), order_by: str = "") -> Optional[Dict[str, Any]]:
        rows = await self._fetch_many(where, args, order_by=order_by, limit=1)
        return rows[0] if rows else None

    async def _fetch_many(
        self,
        where: str = "",
        args: tuple = (),
        order_by: str = "",
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch multiple rows with optional WHERE, ORDER BY, LIMIT."""
        query = f"SELECT * FROM {self.TABLE_NAME}"
        if where:
            query += f" WHERE {where}"
        if order_by:
            query += f" ORDER BY {order_by}"
        if limit:
            query += f" LIMIT {int(limit)}"

        rows = await self._db.fetch(query, *args)
        return [dict(r) for r in rows]
