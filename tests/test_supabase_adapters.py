# =============================================================================
# tests/test_supabase_adapters.py - Supabase Adapter Tests
# =============================================================================
# The Supabase client is replaced with MagicMock; these tests check the
# queries built and how failures are wrapped.
#
# Run with: pytest tests/test_supabase_adapters.py -v
# =============================================================================

import asyncio
from unittest.mock import MagicMock

import pytest

from core.services.catalog_store import CatalogStoreService
from core.services.storage_service import StorageService
from lib.supabase_client import SupabaseClient, SupabaseClientError

CHAIN_METHODS = ["select", "eq", "in_", "order", "single", "insert", "upsert", "update", "delete", "limit"]


def make_client(data=None, error=None):
    """Client whose query builder methods all chain to one query mock."""
    query = MagicMock()
    for name in CHAIN_METHODS:
        getattr(query, name).return_value = query
    if error:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data)
    client = MagicMock()
    client.table.return_value = query
    return client, query


class TestCatalogStoreService:

    def test_fetch_business(self):
        client, query = make_client(data={"id": "b1"})
        store = CatalogStoreService(client_factory=lambda: client)

        assert asyncio.run(store.fetch_business("b1")) == {"id": "b1"}
        client.table.assert_called_with("businesses")
        query.eq.assert_called_with("id", "b1")
        query.single.assert_called_once()

    def test_fetch_missing_business_returns_none(self):
        client, _ = make_client(error=Exception("{'code': 'PGRST116', 'message': 'no rows'}"))
        store = CatalogStoreService(client_factory=lambda: client)

        assert asyncio.run(store.fetch_business("b1")) is None

    def test_fetch_business_error_is_wrapped(self):
        client, _ = make_client(error=Exception("connection refused"))
        store = CatalogStoreService(client_factory=lambda: client)

        with pytest.raises(SupabaseClientError) as exc_info:
            asyncio.run(store.fetch_business("b1"))
        assert exc_info.value.code == "FETCH_BUSINESS_FAILED"

    def test_select_items_newest_first(self):
        client, query = make_client(data=[{"id": "m1"}])
        store = CatalogStoreService(client_factory=lambda: client)

        rows = asyncio.run(store.select_items("menu_items", "b1"))

        assert rows == [{"id": "m1"}]
        query.eq.assert_called_with("business_id", "b1")
        query.order.assert_called_with("created_at", desc=True)

    def test_insert_item_upserts_by_id(self):
        client, query = make_client(data=[])
        store = CatalogStoreService(client_factory=lambda: client)

        asyncio.run(store.insert_item("menu_items", {"id": "m1", "name": "Soup"}))

        query.upsert.assert_called_once_with({"id": "m1", "name": "Soup"}, on_conflict="id")

    def test_delete_photo_rows_by_fk(self):
        client, query = make_client(data=[])
        store = CatalogStoreService(client_factory=lambda: client)

        asyncio.run(store.delete_photo_rows("menu_item_photos", "menu_item_id", ["m1", "m2"]))

        client.table.assert_called_with("menu_item_photos")
        query.delete.assert_called_once()
        query.in_.assert_called_with("menu_item_id", ["m1", "m2"])

    def test_empty_operations_skip_the_client(self):
        client, _ = make_client(data=[])
        store = CatalogStoreService(client_factory=lambda: client)

        asyncio.run(store.delete_items("menu_items", []))
        asyncio.run(store.insert_photo_rows("menu_item_photos", []))
        assert asyncio.run(store.select_photo_rows("menu_item_photos", "menu_item_id", [])) == []

        client.table.assert_not_called()

    def test_write_error_is_wrapped_with_details(self):
        client, _ = make_client(error=Exception("violates foreign key"))
        store = CatalogStoreService(client_factory=lambda: client)

        with pytest.raises(SupabaseClientError) as exc_info:
            asyncio.run(store.update_item("menu_items", "m1", {"name": "x"}))
        assert exc_info.value.code == "UPDATE_ITEM_FAILED"
        assert exc_info.value.details == {"table": "menu_items", "item_id": "m1"}


class TestStorageService:

    def _service(self):
        client = MagicMock()
        bucket = client.storage.from_.return_value
        return StorageService(client_factory=lambda: client), client, bucket

    def test_upload_never_overwrites(self):
        service, client, bucket = self._service()

        path = asyncio.run(service.upload("restaurant-menu", "u/f/i/a.jpg", b"data", "image/jpeg"))

        assert path == "u/f/i/a.jpg"
        client.storage.from_.assert_called_with("restaurant-menu")
        bucket.upload.assert_called_once_with(
            path="u/f/i/a.jpg",
            file=b"data",
            file_options={"content-type": "image/jpeg", "cache-control": "3600", "upsert": "false"},
        )

    def test_upload_error_is_wrapped(self):
        service, _, bucket = self._service()
        bucket.upload.side_effect = Exception("Duplicate")

        with pytest.raises(SupabaseClientError) as exc_info:
            asyncio.run(service.upload("b", "p", b"d"))
        assert exc_info.value.code == "STORAGE_UPLOAD_FAILED"

    def test_delete(self):
        service, _, bucket = self._service()
        asyncio.run(service.delete("b", ["p1", "p2"]))
        bucket.remove.assert_called_once_with(["p1", "p2"])

    def test_list_descends_into_folders(self):
        service, _, bucket = self._service()
        listings = {
            "u/gallery": [{"name": "b1", "id": None}],
            "u/gallery/b1": [
                {"name": "1-0-a.jpg", "id": "obj1", "created_at": "2024-01-01T00:00:00Z"},
                {"name": "1-1-b.jpg", "id": "obj2", "created_at": "2024-01-02T00:00:00Z"},
            ],
        }
        bucket.list.side_effect = lambda folder: listings.get(folder, [])

        files = asyncio.run(service.list("business-uploads", "u/gallery/"))

        assert files == [
            {"path": "u/gallery/b1/1-0-a.jpg", "created_at": "2024-01-01T00:00:00Z"},
            {"path": "u/gallery/b1/1-1-b.jpg", "created_at": "2024-01-02T00:00:00Z"},
        ]


class TestSupabaseClient:

    def test_no_rows_detection(self):
        assert SupabaseClient.is_no_rows_error(Exception("PGRST116: JSON object requested, 0 rows"))
        assert not SupabaseClient.is_no_rows_error(Exception("timeout"))

    def test_error_str_includes_code_and_suggestion(self):
        error = SupabaseClientError("Failed", code="X", suggestion="Retry")
        assert str(error) == "[X] Failed Suggestion: Retry"
