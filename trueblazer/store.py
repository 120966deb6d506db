"""Row stores consumed by the context-assembly handlers.

The hosted database is an external collaborator: handlers only read rows by
table name and equality filters, insert rows, and update rows. Two
implementations are provided, a process-local store used by default and in
tests, and a Supabase-backed store used when credentials are configured.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import UTC, datetime
from typing import Any, DefaultDict, Dict, List, Mapping, Optional

from supabase import Client, create_client

from .config import StoreSettings
from .errors import StoreError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class RowStore:
    """Minimal row-store contract used by the handlers."""

    def select(
        self,
        table: str,
        filters: Mapping[str, Any],
        *,
        columns: str = "*",
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        raise NotImplementedError

    def select_one(
        self,
        table: str,
        filters: Mapping[str, Any],
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Optional[Row]:
        """Return the first matching row or ``None``."""

        rows = self.select(table, filters, order_by=order_by, descending=descending, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        raise NotImplementedError

    def update(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> List[Row]:
        raise NotImplementedError

    def resolve_user(self, token: str) -> Optional[str]:
        """Map a bearer token onto a verified user id."""

        raise NotImplementedError


def _now() -> str:
    return datetime.now(UTC).isoformat()


class InMemoryRowStore(RowStore):
    """Keep rows per table in process memory."""

    def __init__(self) -> None:
        self._tables: DefaultDict[str, List[Row]] = defaultdict(list)
        self._sessions: Dict[str, str] = {}

    def register_session(self, token: str, user_id: str) -> None:
        self._sessions[token] = user_id

    def resolve_user(self, token: str) -> Optional[str]:
        return self._sessions.get(token)

    def select(
        self,
        table: str,
        filters: Mapping[str, Any],
        *,
        columns: str = "*",
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        rows = [
            dict(row)
            for row in self._tables.get(table, [])
            if all(row.get(key) == value for key, value in filters.items())
        ]
        if order_by:
            rows.sort(key=lambda row: (row.get(order_by) is not None, row.get(order_by) or ""), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        if columns != "*":
            wanted = [column.strip() for column in columns.split(",")]
            rows = [{column: row.get(column) for column in wanted} for row in rows]
        return rows

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        stored = {"id": str(uuid.uuid4()), "created_at": _now(), **row}
        self._tables[table].append(stored)
        return dict(stored)

    def update(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> List[Row]:
        updated = []
        for row in self._tables.get(table, []):
            if all(row.get(key) == value for key, value in filters.items()):
                row.update(values)
                updated.append(dict(row))
        return updated


class SupabaseRowStore(RowStore):
    """Row store backed by a Supabase project using the service role key."""

    def __init__(self, client: Client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "SupabaseRowStore":
        try:
            client = create_client(settings.supabase_url, settings.supabase_service_role_key)
        except Exception as exc:
            raise StoreError(f"Failed to initialize Supabase client: {exc}") from exc
        return cls(client)

    def select(
        self,
        table: str,
        filters: Mapping[str, Any],
        *,
        columns: str = "*",
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        query = self._client.table(table).select(columns)
        for key, value in filters.items():
            query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(limit)
        try:
            return list(query.execute().data or [])
        except Exception as exc:
            logger.error("Supabase select failed", extra={"extra_data": {"table": table}})
            raise StoreError(f"Failed to read from {table}") from exc

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        try:
            data = self._client.table(table).insert(dict(row)).execute().data
        except Exception as exc:
            logger.error("Supabase insert failed", extra={"extra_data": {"table": table}})
            raise StoreError(f"Failed to write to {table}") from exc
        if not data:
            raise StoreError(f"Insert into {table} returned no row")
        return data[0]

    def update(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> List[Row]:
        query = self._client.table(table).update(dict(values))
        for key, value in filters.items():
            query = query.eq(key, value)
        try:
            return list(query.execute().data or [])
        except Exception as exc:
            logger.error("Supabase update failed", extra={"extra_data": {"table": table}})
            raise StoreError(f"Failed to update {table}") from exc

    def resolve_user(self, token: str) -> Optional[str]:
        try:
            response = self._client.auth.get_user(token)
        except Exception:
            logger.info("Token verification failed")
            return None
        user = getattr(response, "user", None)
        return getattr(user, "id", None)


def build_store(settings: StoreSettings) -> RowStore:
    """Return a Supabase store when configured, otherwise a process-local one."""

    if settings.is_configured:
        return SupabaseRowStore.from_settings(settings)
    logger.warning("Supabase not configured; using in-memory row store")
    return InMemoryRowStore()
