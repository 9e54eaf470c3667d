# =============================================================================
# core/services/orphan_sweeper.py - Orphaned Media Sweep
# =============================================================================
# Uploads that never got referenced (a submission aborted after some uploads
# succeeded, a crashed worker, a lost delete) stay in storage. The sweep lists
# the folders a business owns and deletes objects no row references.
#
# Folders swept:
#   {owner}/{kind folder}/{item_id}/   for every persisted item of the active kind
#   {owner}/gallery/{business_id}/     for the gallery
#
# Objects younger than ORPHAN_SWEEP_GRACE_HOURS are skipped so an upload
# whose submission is still in flight is never touched.
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from pydantic import BaseModel, Field

from app.config import settings
from core.models.business import Business
from core.services.catalog_loader import CatalogLoader
from core.services.media_uploader import MediaTarget
from core.services.protocols import CatalogStore, ObjectStorage
from lib.storage_paths import to_bare_path

logger = logging.getLogger(__name__)


class SweepReport(BaseModel):
    """Outcome of sweeping one business."""

    business_id: str
    scanned: int = 0
    orphaned: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    dry_run: bool = False


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrphanSweeper:
    """
    Deletes unreferenced objects under a business's storage folders.

    Example:
        sweeper = OrphanSweeper(CatalogStoreService(), StorageService())
        report = await sweeper.sweep(business_id, owner_id, dry_run=True)
        print(report.orphaned)
    """

    def __init__(
        self,
        store: CatalogStore,
        storage: ObjectStorage,
        grace_hours: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = store
        self._storage = storage
        self._loader = CatalogLoader(store)
        self._grace = timedelta(hours=settings.ORPHAN_SWEEP_GRACE_HOURS if grace_hours is None else grace_hours)
        self._clock = clock

    async def sweep(self, business_id: str, owner_id: str | None = None, dry_run: bool = False) -> SweepReport:
        """
        Sweep one business.

        Args:
            business_id: Business UUID
            owner_id: Storage owner; defaults to the business's owner_id
            dry_run: Only report what would be deleted

        Returns:
            SweepReport

        Raises:
            BusinessNotFoundError: If the business doesn't exist
            SupabaseClientError: If listing or reading rows fails
        """
        business = await self._loader.load_business(business_id)
        owner_id = owner_id or business.owner_id
        report = SweepReport(business_id=business_id, dry_run=dry_run)
        if not owner_id:
            logger.warning(f"Business {business_id} has no owner; nothing to sweep")
            return report

        for target, referenced in await self._targets(business):
            orphaned = await self._find_orphans(target, owner_id, referenced, report)
            if not orphaned:
                continue
            report.orphaned.extend(orphaned)
            if dry_run:
                continue
            try:
                await self._storage.delete(target.bucket, orphaned)
                report.removed.extend(orphaned)
            except Exception as e:
                logger.warning(f"Sweep could not delete {len(orphaned)} object(s) from {target.bucket}: {e}")
                report.failed.extend(orphaned)

        logger.info(
            f"Swept business {business_id}: scanned {report.scanned}, "
            f"orphaned {len(report.orphaned)}, removed {len(report.removed)}"
        )
        return report

    async def _targets(self, business: Business) -> list[tuple[MediaTarget, set[str]]]:
        """Folders to sweep, each with the paths rows still reference."""
        gallery = MediaTarget.for_gallery(business.id)
        targets = [(gallery, {gallery.bare_path(ref) for ref in business.gallery})]

        kind = business.active_kind
        if kind is None:
            return targets

        snapshot = await self._loader.load(business.id, kind)
        for item in snapshot.items:
            target = MediaTarget.for_item(item.spec, item.id)
            targets.append((target, set(item.stored_paths)))
        return targets

    async def _find_orphans(
        self, target: MediaTarget, owner_id: str, referenced: set[str], report: SweepReport
    ) -> list[str]:
        cutoff = self._clock() - self._grace
        objects = await self._storage.list(target.bucket, target.prefix(owner_id))
        report.scanned += len(objects)

        orphaned = []
        for obj in objects:
            path = to_bare_path(target.bucket, obj["path"], aliases=target.aliases)
            if path in referenced:
                continue
            created_at = _parse_timestamp(obj.get("created_at"))
            if created_at is None or created_at > cutoff:
                continue
            orphaned.append(path)
        return sorted(orphaned)
