# =============================================================================
# core/services/gallery_service.py - Business Gallery
# =============================================================================
# The gallery is an ordered list of images on the business row itself
# (businesses.images). It uses the same upload orchestrator as catalog items,
# with bucket "business-uploads" and folder "gallery".
# =============================================================================

import logging

from app.exceptions import PersistenceFailureError
from core.models.business import Business
from core.models.catalog import MediaAttachment
from core.models.submission import GalleryReport
from core.services.catalog_reconciler import remove_orphaned_media
from core.services.media_uploader import GALLERY_BUCKET, MediaTarget, MediaUploader
from core.services.plan_limits import can_add_gallery_images, ensure_allowed
from core.services.protocols import CatalogStore, ObjectStorage
from lib.storage_paths import to_bare_path
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)


class GalleryService:
    """Reconciles a staged gallery against businesses.images."""

    def __init__(self, store: CatalogStore, storage: ObjectStorage, uploader: MediaUploader | None = None):
        self._store = store
        self._storage = storage
        self._uploader = uploader or MediaUploader(storage)

    async def reconcile(
        self, business: Business, owner_id: str, staged_images: list[MediaAttachment]
    ) -> GalleryReport:
        """
        Persist the staged gallery in its staged order.

        Args:
            business: Business as currently persisted
            owner_id: Storage owner
            staged_images: Ordered gallery images

        Returns:
            GalleryReport with the stored paths

        Raises:
            LimitExceededError: More images than max_gallery_images
            UploadFailureError: An upload failed (the row is untouched)
            PersistenceFailureError: The business update failed
        """
        self.check(business, staged_images)
        paths = await self.upload(business, owner_id, staged_images)
        return await self.save(business, paths)

    def check(self, business: Business, staged_images: list[MediaAttachment]) -> None:
        """
        Gate the staged gallery without touching storage or rows.

        Raises:
            LimitExceededError: More images than max_gallery_images
            UploadFailureError: A pending image is too large or of a disallowed type
        """
        pending = sum(1 for image in staged_images if image.is_new)
        ensure_allowed(can_add_gallery_images(len(staged_images) - pending, pending, business.limits))
        self._uploader.validate(staged_images, item_id=business.id)

    async def upload(self, business: Business, owner_id: str, staged_images: list[MediaAttachment]) -> list[str]:
        """Upload pending gallery images; returns the ordered bare paths."""
        target = MediaTarget.for_gallery(business.id)
        stored = await self._uploader.materialize(staged_images, target, owner_id)
        return [image.storage_path for image in stored]

    async def save(self, business: Business, paths: list[str]) -> GalleryReport:
        """Write businesses.images, then drop objects the old gallery no longer needs."""
        try:
            await self._store.update_business(business.id, {"images": paths})
        except SupabaseClientError as e:
            raise PersistenceFailureError("update", "businesses", e.message)

        previous = {to_bare_path(GALLERY_BUCKET, ref) for ref in business.gallery}
        orphaned = sorted(previous - set(paths))
        removed, failed = await remove_orphaned_media(self._storage, GALLERY_BUCKET, orphaned)

        logger.info(f"Saved {len(paths)} gallery image(s) for business {business.id}")
        return GalleryReport(paths=paths, removed_media=removed, failed_media_removals=failed)
