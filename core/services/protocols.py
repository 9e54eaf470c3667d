# =============================================================================
# core/services/protocols.py - Adapter Interfaces
# =============================================================================
# The catalog services talk to the relational store and the object storage
# service only through these two protocols. Production code uses the
# Supabase implementations (catalog_store.py, storage_service.py); tests use
# in-memory fakes.
#
# Every method is async and may raise SupabaseClientError.
# =============================================================================

from typing import Any, Protocol


class CatalogStore(Protocol):
    """Relational operations the catalog pipeline needs."""

    async def fetch_business(self, business_id: str) -> dict[str, Any] | None:
        """Fetch one businesses row, or None if it doesn't exist."""
        ...

    async def update_business(self, business_id: str, data: dict[str, Any]) -> None:
        """Update columns of one businesses row."""
        ...

    async def list_businesses(self) -> list[dict[str, Any]]:
        """List id/owner_id/category of every business."""
        ...

    async def select_items(self, table: str, business_id: str) -> list[dict[str, Any]]:
        """All item rows of a business, newest first."""
        ...

    async def insert_item(self, table: str, row: dict[str, Any]) -> None:
        """Insert an item row (upsert by id so a repeated insert converges)."""
        ...

    async def update_item(self, table: str, item_id: str, row: dict[str, Any]) -> None:
        """Update an item row by id."""
        ...

    async def delete_items(self, table: str, item_ids: list[str]) -> None:
        """Delete item rows by id. Missing ids are not an error."""
        ...

    async def select_photo_rows(
        self, table: str, fk_column: str, item_ids: list[str]
    ) -> list[dict[str, Any]]:
        """Photo order rows of the given items, ordered by sort_order."""
        ...

    async def delete_photo_rows(self, table: str, fk_column: str, item_ids: list[str]) -> None:
        """Delete every photo order row of the given items."""
        ...

    async def insert_photo_rows(self, table: str, rows: list[dict[str, Any]]) -> None:
        """Insert photo order rows."""
        ...


class ObjectStorage(Protocol):
    """Object storage operations the media pipeline needs."""

    async def upload(
        self, bucket: str, path: str, data: bytes, content_type: str | None = None
    ) -> str:
        """Upload bytes to a new path (never overwrites). Returns the stored path."""
        ...

    async def delete(self, bucket: str, paths: list[str]) -> None:
        """Delete objects by path."""
        ...

    async def public_url(self, bucket: str, path: str) -> str:
        """Public URL of an object."""
        ...

    async def list(self, bucket: str, prefix: str) -> list[dict[str, Any]]:
        """
        Recursively list objects under a prefix.

        Returns dicts with "path" and "created_at" (ISO string or None).
        """
        ...
