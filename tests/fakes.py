# =============================================================================
# tests/fakes.py - In-Memory Adapters
# =============================================================================
# Stand-ins for the Supabase-backed CatalogStore and ObjectStorage, with
# call logs and failure injection so tests can assert exactly which writes
# happened.
# =============================================================================

from datetime import datetime, timezone
from typing import Any

from lib.storage_paths import to_display_url
from lib.supabase_client import SupabaseClientError

WRITE_METHODS = {
    "update_business",
    "insert_item",
    "update_item",
    "delete_items",
    "delete_photo_rows",
    "insert_photo_rows",
}


class InMemoryCatalogStore:
    """CatalogStore backed by dicts of rows."""

    def __init__(self):
        self.businesses: dict[str, dict[str, Any]] = {}
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple] = []
        self._failures: dict[tuple[str, str | None], Exception] = {}
        self._clock = 0

    # -- test helpers ---------------------------------------------------------

    def fail(self, method: str, table: str | None = None, message: str = "boom") -> None:
        """Make `method` (optionally only for `table`) raise SupabaseClientError."""
        self._failures[(method, table)] = SupabaseClientError(message=message, code="TEST_FAILURE")

    def clear_failures(self) -> None:
        self._failures.clear()

    def add_business(self, row: dict[str, Any]) -> None:
        self.businesses[str(row["id"])] = dict(row)

    def add_row(self, table: str, row: dict[str, Any]) -> None:
        row = dict(row)
        row.setdefault("created_at", self._next_timestamp())
        self.tables.setdefault(table, []).append(row)

    def rows(self, table: str) -> list[dict[str, Any]]:
        return list(self.tables.get(table, []))

    @property
    def write_calls(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in WRITE_METHODS]

    def _next_timestamp(self) -> str:
        self._clock += 1
        return f"2024-01-01T00:00:{self._clock:02d}+00:00"

    def _record(self, method: str, table: str | None, *args) -> None:
        self.calls.append((method, table, *args))
        for key in ((method, table), (method, None)):
            if key in self._failures:
                raise self._failures[key]

    # -- CatalogStore ---------------------------------------------------------

    async def fetch_business(self, business_id):
        self._record("fetch_business", "businesses", business_id)
        row = self.businesses.get(business_id)
        return dict(row) if row else None

    async def update_business(self, business_id, data):
        self._record("update_business", "businesses", business_id, dict(data))
        self.businesses[business_id].update(data)

    async def list_businesses(self):
        self._record("list_businesses", "businesses")
        return [
            {"id": row["id"], "owner_id": row.get("owner_id"), "category": row.get("category")}
            for row in self.businesses.values()
        ]

    async def select_items(self, table, business_id):
        self._record("select_items", table, business_id)
        rows = [dict(row) for row in self.tables.get(table, []) if row.get("business_id") == business_id]
        return sorted(rows, key=lambda row: row.get("created_at") or "", reverse=True)

    async def insert_item(self, table, row):
        self._record("insert_item", table, row["id"])
        rows = self.tables.setdefault(table, [])
        for existing in rows:
            if existing["id"] == row["id"]:
                existing.update(row)
                return
        rows.append(dict(row))

    async def update_item(self, table, item_id, row):
        self._record("update_item", table, item_id)
        for existing in self.tables.get(table, []):
            if existing["id"] == item_id:
                existing.update(row)

    async def delete_items(self, table, item_ids):
        self._record("delete_items", table, tuple(item_ids))
        self.tables[table] = [row for row in self.tables.get(table, []) if row["id"] not in set(item_ids)]

    async def select_photo_rows(self, table, fk_column, item_ids):
        self._record("select_photo_rows", table, tuple(item_ids))
        rows = [dict(row) for row in self.tables.get(table, []) if row[fk_column] in set(item_ids)]
        return sorted(rows, key=lambda row: row["sort_order"])

    async def delete_photo_rows(self, table, fk_column, item_ids):
        self._record("delete_photo_rows", table, tuple(item_ids))
        self.tables[table] = [row for row in self.tables.get(table, []) if row[fk_column] not in set(item_ids)]

    async def insert_photo_rows(self, table, rows):
        self._record("insert_photo_rows", table, len(rows))
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)


class InMemoryObjectStorage:
    """ObjectStorage backed by a dict of (bucket, path) -> object."""

    def __init__(self):
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}
        self.uploads: list[tuple[str, str]] = []
        self.deletes: list[tuple[str, tuple[str, ...]]] = []
        self.fail_uploads_for: set[str] = set()
        self.fail_deletes = False

    def add_object(self, bucket: str, path: str, created_at: datetime | None = None, data: bytes = b"x") -> None:
        self.objects[(bucket, path)] = {
            "data": data,
            "content_type": "image/jpeg",
            "created_at": (created_at or datetime.now(timezone.utc)).isoformat(),
        }

    def paths(self, bucket: str) -> list[str]:
        return sorted(path for b, path in self.objects if b == bucket)

    async def upload(self, bucket, path, data, content_type=None):
        self.uploads.append((bucket, path))
        if any(marker in path for marker in self.fail_uploads_for):
            raise SupabaseClientError(message=f"upload rejected: {path}", code="STORAGE_UPLOAD_FAILED")
        if (bucket, path) in self.objects:
            raise SupabaseClientError(message=f"The resource already exists: {path}", code="STORAGE_UPLOAD_FAILED")
        self.add_object(bucket, path, data=data)
        self.objects[(bucket, path)]["content_type"] = content_type
        return path

    async def delete(self, bucket, paths):
        self.deletes.append((bucket, tuple(paths)))
        if self.fail_deletes:
            raise SupabaseClientError(message="delete rejected", code="STORAGE_DELETE_FAILED")
        for path in paths:
            self.objects.pop((bucket, path), None)

    async def public_url(self, bucket, path):
        return to_display_url(bucket, path)

    async def list(self, bucket, prefix):
        prefix = prefix.strip("/") + "/"
        return [
            {"path": path, "created_at": obj["created_at"]}
            for (b, path), obj in sorted(self.objects.items())
            if b == bucket and path.startswith(prefix)
        ]
