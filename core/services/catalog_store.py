# =============================================================================
# core/services/catalog_store.py - Catalog Rows in Supabase
# =============================================================================
# CatalogStore implementation backed by Supabase (PostgREST).
# Tables touched:
# - businesses
# - menu_items / dealerships / retail_items
# - menu_item_photos / retail_item_photos
# =============================================================================

import asyncio
import logging
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)


class CatalogStoreService:
    """
    Service for catalog row operations.

    Every query runs the synchronous Supabase client in a worker thread and
    wraps failures in SupabaseClientError with the table and ids involved.
    """

    def __init__(self, client_factory=SupabaseClient.get_client):
        self._client_factory = client_factory

    async def _execute(self, query, action: str, code: str, details: dict[str, Any]):
        try:
            return await asyncio.to_thread(query.execute)
        except Exception as e:
            logger.error(f"Failed to {action}: {e}")
            raise SupabaseClientError(
                message=f"Failed to {action}: {e}",
                code=code,
                details=details,
            )

    # -------------------------------------------------------------------------
    # Businesses
    # -------------------------------------------------------------------------

    async def fetch_business(self, business_id: str) -> dict[str, Any] | None:
        """
        Fetch a business row by ID.

        Returns:
            Business dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = self._client_factory()
        query = (
            client.table("businesses")
            .select("*")
            .eq("id", business_id)
            .single()
        )

        try:
            response = await asyncio.to_thread(query.execute)
            return response.data

        except Exception as e:
            if SupabaseClient.is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch business: {e}",
                code="FETCH_BUSINESS_FAILED",
                suggestion="Check that the business_id exists",
                details={"business_id": business_id},
            )

    async def update_business(self, business_id: str, data: dict[str, Any]) -> None:
        client = self._client_factory()
        query = client.table("businesses").update(data).eq("id", business_id)
        await self._execute(
            query,
            "update business",
            "UPDATE_BUSINESS_FAILED",
            {"business_id": business_id, "columns": sorted(data)},
        )
        logger.info(f"Updated business {business_id}: {sorted(data)}")

    async def list_businesses(self) -> list[dict[str, Any]]:
        client = self._client_factory()
        query = client.table("businesses").select("id, owner_id, category")
        response = await self._execute(query, "list businesses", "LIST_BUSINESSES_FAILED", {})
        return response.data or []

    # -------------------------------------------------------------------------
    # Catalog Items
    # -------------------------------------------------------------------------

    async def select_items(self, table: str, business_id: str) -> list[dict[str, Any]]:
        """
        Fetch all item rows of a business, newest first.

        Raises:
            SupabaseClientError: If query fails
        """
        client = self._client_factory()
        query = (
            client.table(table)
            .select("*")
            .eq("business_id", business_id)
            .order("created_at", desc=True)
        )
        response = await self._execute(
            query,
            f"fetch {table}",
            "FETCH_ITEMS_FAILED",
            {"table": table, "business_id": business_id},
        )
        items = response.data or []
        logger.debug(f"Fetched {len(items)} rows from {table} for business {business_id}")
        return items

    async def insert_item(self, table: str, row: dict[str, Any]) -> None:
        """
        Insert an item row.

        Uses upsert on the primary key so that repeating a submission whose
        insert already went through converges instead of failing.
        """
        client = self._client_factory()
        query = client.table(table).upsert(row, on_conflict="id")
        await self._execute(
            query,
            f"insert into {table}",
            "INSERT_ITEM_FAILED",
            {"table": table, "item_id": row.get("id")},
        )

    async def update_item(self, table: str, item_id: str, row: dict[str, Any]) -> None:
        client = self._client_factory()
        query = client.table(table).update(row).eq("id", item_id)
        await self._execute(
            query,
            f"update {table}",
            "UPDATE_ITEM_FAILED",
            {"table": table, "item_id": item_id},
        )

    async def delete_items(self, table: str, item_ids: list[str]) -> None:
        if not item_ids:
            return
        client = self._client_factory()
        query = client.table(table).delete().in_("id", list(item_ids))
        await self._execute(
            query,
            f"delete from {table}",
            "DELETE_ITEMS_FAILED",
            {"table": table, "item_ids": list(item_ids)},
        )
        logger.info(f"Deleted {len(item_ids)} row(s) from {table}")

    # -------------------------------------------------------------------------
    # Photo Order Rows
    # -------------------------------------------------------------------------

    async def select_photo_rows(
        self, table: str, fk_column: str, item_ids: list[str]
    ) -> list[dict[str, Any]]:
        if not item_ids:
            return []
        client = self._client_factory()
        query = (
            client.table(table)
            .select(f"{fk_column}, storage_path, sort_order")
            .in_(fk_column, list(item_ids))
            .order("sort_order", desc=False)
        )
        response = await self._execute(
            query,
            f"fetch {table}",
            "FETCH_PHOTOS_FAILED",
            {"table": table, "item_ids": list(item_ids)},
        )
        return response.data or []

    async def delete_photo_rows(self, table: str, fk_column: str, item_ids: list[str]) -> None:
        if not item_ids:
            return
        client = self._client_factory()
        query = client.table(table).delete().in_(fk_column, list(item_ids))
        await self._execute(
            query,
            f"delete from {table}",
            "DELETE_PHOTOS_FAILED",
            {"table": table, "item_ids": list(item_ids)},
        )

    async def insert_photo_rows(self, table: str, rows: list[dict[str, Any]]) -> None:
        if not rows:
            return
        client = self._client_factory()
        query = client.table(table).insert(rows)
        await self._execute(
            query,
            f"insert into {table}",
            "INSERT_PHOTOS_FAILED",
            {"table": table, "rows": len(rows)},
        )
