# =============================================================================
# core/services/catalog_loader.py - Persisted Catalog Snapshots
# =============================================================================
# Reads what is persisted for one business and catalog kind and rebuilds the
# staged item tree an edit session starts from:
# - item rows, newest first
# - images from the photo order table (sort_order ascending), falling back to
#   the denormalized image column for items without photo rows
# - a version fingerprint used to detect concurrent edits
# =============================================================================

import hashlib
import json
import logging
from typing import Any

from app.exceptions import BusinessNotFoundError
from core.models.business import Business
from core.models.catalog import (
    ITEM_MODELS,
    CatalogKind,
    CatalogSnapshot,
    KindSpec,
    MediaAttachment,
    PhotoOrderRow,
    kind_spec,
)
from core.services.protocols import CatalogStore
from lib.storage_paths import to_bare_path

logger = logging.getLogger(__name__)


def compute_version(item_rows: list[dict[str, Any]], photo_rows: list[PhotoOrderRow]) -> str:
    """
    Fingerprint persisted rows, independent of the order they were fetched in.

    Returns:
        Hex SHA-256 digest
    """
    payload = {
        "items": sorted(
            (json.dumps(row, sort_keys=True, default=str) for row in item_rows)
        ),
        "photos": sorted(
            (row.item_id, row.sort_order, row.storage_path) for row in photo_rows
        ),
    }
    return hashlib.sha256(json.dumps(payload, default=str).encode("utf-8")).hexdigest()


def _fallback_references(spec: KindSpec, row: dict[str, Any]) -> list[str]:
    """Images stored on the item row itself (legacy rows without photo rows)."""
    if spec.image_list_column:
        refs = row.get(spec.image_list_column) or []
        if isinstance(refs, str):
            refs = [refs]
        return [ref for ref in refs if isinstance(ref, str) and ref]
    if spec.primary_image_column and row.get(spec.primary_image_column):
        return [row[spec.primary_image_column]]
    return []


class CatalogLoader:
    """Builds CatalogSnapshots from the relational store."""

    def __init__(self, store: CatalogStore):
        self._store = store

    async def load_business(self, business_id: str) -> Business:
        """
        Fetch a business.

        Raises:
            BusinessNotFoundError: If the business doesn't exist
        """
        row = await self._store.fetch_business(business_id)
        if not row:
            raise BusinessNotFoundError(business_id)
        return Business.from_row(row)

    async def load(self, business_id: str, kind: CatalogKind | None) -> CatalogSnapshot:
        """
        Load the persisted catalog of one kind.

        Args:
            business_id: Business UUID
            kind: Catalog kind; None yields an empty snapshot

        Returns:
            CatalogSnapshot with items, photo rows and version

        Raises:
            SupabaseClientError: If a query fails
        """
        if kind is None:
            return CatalogSnapshot(business_id=business_id, kind=None, version=compute_version([], []))

        spec = kind_spec(kind)
        item_rows = await self._store.select_items(spec.table, business_id)
        item_ids = [str(row["id"]) for row in item_rows]

        photo_rows: list[PhotoOrderRow] = []
        if spec.has_photo_table and item_ids:
            raw = await self._store.select_photo_rows(spec.photo_table, spec.photo_fk, item_ids)
            photo_rows = [PhotoOrderRow.from_db(row, spec.photo_fk) for row in raw]

        photos_by_item: dict[str, list[PhotoOrderRow]] = {}
        for photo in photo_rows:
            photos_by_item.setdefault(photo.item_id, []).append(photo)

        model = ITEM_MODELS[spec.kind]
        items = []
        for row in item_rows:
            item_id = str(row["id"])
            photos = sorted(photos_by_item.get(item_id, []), key=lambda p: p.sort_order)
            refs = [p.storage_path for p in photos] or _fallback_references(spec, row)
            images = [
                MediaAttachment.stored(to_bare_path(spec.bucket, ref, aliases=spec.bucket_aliases))
                for ref in refs
            ]
            items.append(model.from_row({**row, "id": item_id}, images))

        version = compute_version(item_rows, photo_rows)
        logger.debug(f"Loaded {len(items)} {spec.label} for business {business_id} (version {version[:12]})")

        return CatalogSnapshot(
            business_id=business_id,
            kind=spec.kind,
            items=items,
            photo_rows=photo_rows,
            version=version,
        )
