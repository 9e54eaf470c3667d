# =============================================================================
# core/services/category_cascade.py - Category-Change Cascade
# =============================================================================
# When a business switches category, the catalog kinds it no longer uses are
# hard-deleted so a business never holds more than one kind.
#
# Per abandoned kind:
#   load -> delete photo order rows -> delete item rows -> delete media
#
# Photo rows go first: if the item delete then fails, a retry still finds the
# item ids to clean up. Media deletion is best-effort.
# =============================================================================

import logging

from app.exceptions import CascadeFailureError
from core.models.catalog import KIND_SPECS, CatalogKind, kind_spec
from core.models.submission import CascadeReport
from core.services.catalog_loader import CatalogLoader
from core.services.catalog_reconciler import remove_orphaned_media
from core.services.protocols import CatalogStore, ObjectStorage
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)


class CategoryCascade:
    """
    Purges every catalog kind except the one kept.

    Example:
        cascade = CategoryCascade(store, storage)
        report = await cascade.purge(business_id, keep=CatalogKind.RETAIL)
        # menu_items and dealerships rows of the business are gone
    """

    def __init__(self, store: CatalogStore, storage: ObjectStorage, loader: CatalogLoader | None = None):
        self._store = store
        self._storage = storage
        self._loader = loader or CatalogLoader(store)

    async def purge(self, business_id: str, keep: CatalogKind | None) -> CascadeReport:
        """
        Delete all catalog data of `business_id` except kind `keep`.

        Args:
            business_id: Business UUID
            keep: Kind that stays (None clears every kind)

        Returns:
            CascadeReport with the deleted item ids per kind

        Raises:
            CascadeFailureError: If a relational step failed
        """
        report = CascadeReport()
        for kind in KIND_SPECS:
            if kind is keep:
                continue
            try:
                purged, removed, failed = await self.purge_kind(business_id, kind)
            except CascadeFailureError as e:
                e.details["purged"] = report.purged_kinds
                raise
            if purged:
                report.purged[kind.value] = purged
            report.removed_media.extend(removed)
            report.failed_media_removals.extend(failed)

        if report.purged:
            logger.info(f"Cleared {report.purged_kinds} catalog(s) of business {business_id}")
        return report

    async def purge_kind(
        self, business_id: str, kind: CatalogKind
    ) -> tuple[list[str], list[str], list[str]]:
        """
        Delete one kind's catalog of a business.

        Returns:
            (deleted item ids, removed media paths, media paths that failed)

        Raises:
            CascadeFailureError: With the stage that failed
        """
        spec = kind_spec(kind)

        try:
            snapshot = await self._loader.load(business_id, kind)
        except SupabaseClientError as e:
            raise CascadeFailureError(kind.value, "load", e.message)

        item_ids = sorted(snapshot.item_ids)
        if not item_ids:
            return [], [], []

        if spec.has_photo_table:
            try:
                await self._store.delete_photo_rows(spec.photo_table, spec.photo_fk, item_ids)
            except SupabaseClientError as e:
                raise CascadeFailureError(kind.value, "photo rows", e.message)

        try:
            await self._store.delete_items(spec.table, item_ids)
        except SupabaseClientError as e:
            raise CascadeFailureError(kind.value, "items", e.message)

        logger.info(f"Deleted {len(item_ids)} {spec.label} of business {business_id}")

        paths = [path for item in snapshot.items for path in item.stored_paths]
        removed, failed = await remove_orphaned_media(
            self._storage, spec.bucket, paths, spec.bucket_aliases
        )
        return item_ids, removed, failed
