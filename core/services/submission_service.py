# =============================================================================
# core/services/submission_service.py - Catalog Submission Orchestration
# =============================================================================
# One call per "save" in the business editor:
#
#   load business, resolve category and kind
#     -> validate  staged items, limits, gallery, version  (no side effects)
#     -> upload    every pending image                    (no rows written)
#     -> write     cascade, category, gallery, items
#     -> SubmissionResult
#
# Catalog failures become a structured SubmissionResult; everything else
# (bugs, configuration) propagates.
# =============================================================================

import logging

from app.exceptions import (
    CatalogError,
    InvalidCatalogError,
    PersistenceFailureError,
    UploadFailureError,
)
from core.models.business import Business
from core.models.catalog import kind_for_category
from core.models.submission import (
    CatalogSubmission,
    SubmissionError,
    SubmissionResult,
)
from core.services.catalog_loader import CatalogLoader
from core.services.catalog_reconciler import CatalogReconciler
from core.services.category_cascade import CategoryCascade
from core.services.gallery_service import GalleryService
from core.services.media_uploader import MediaUploader
from core.services.protocols import CatalogStore, ObjectStorage
from lib.categories import get_main_category, normalize_legacy_category
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)


class SubmissionService:
    """
    Entry point for saving an edited catalog.

    Example:
        service = SubmissionService(CatalogStoreService(), StorageService())
        result = await service.submit(submission, owner_id=user.id)
        if not result.success:
            show_error(result.error.message)
    """

    def __init__(self, store: CatalogStore, storage: ObjectStorage):
        self._store = store
        self._loader = CatalogLoader(store)
        uploader = MediaUploader(storage)
        self._reconciler = CatalogReconciler(store, storage, uploader=uploader, loader=self._loader)
        self._cascade = CategoryCascade(store, storage, loader=self._loader)
        self._gallery = GalleryService(store, storage, uploader=uploader)

    async def submit(self, submission: CatalogSubmission, owner_id: str) -> SubmissionResult:
        """
        Apply a staged catalog.

        Args:
            submission: Staged state from the editor
            owner_id: Storage owner (the authenticated user)

        Returns:
            SubmissionResult; success=False with `error` set when a catalog
            step failed. Steps completed before the failure stay applied.
        """
        try:
            return await self._submit(submission, owner_id)
        except CatalogError as e:
            logger.warning(f"Submission for business {submission.business_id} failed: [{e.code}] {e.message}")
            return SubmissionResult(
                success=False,
                business_id=submission.business_id,
                error=SubmissionError(
                    code=e.code,
                    message=e.message,
                    item_id=e.item_id,
                    image_id=e.image_id,
                    suggestion=e.suggestion,
                    details=e.details,
                ),
            )


    async def _submit(self, submission: CatalogSubmission, owner_id: str) -> SubmissionResult:
        business_id = submission.business_id
        business = await self._loader.load_business(business_id)
        result = SubmissionResult(success=True, business_id=business_id)

        category, subcategory = self._resolve_category(submission, business)
        kind = business.active_kind if category is None else kind_for_category(category)
        kind_switched = category is not None and kind != business.active_kind

        # Everything that can reject the submission runs before the first write;
        # the cascade in particular cannot be undone.
        if kind is None and any(not item.is_removed for item in submission.items):
            raise InvalidCatalogError(
                "This business category has no catalog; remove the staged items or change the category",
                details={"category": submission.category or business.category},
            )
        if submission.gallery is not None:
            self._gallery.check(business, submission.gallery)

        plan = None
        if kind is not None:
            # A cascade never touches the kind it switches to, so this
            # snapshot is still current when the plan is applied.
            plan = await self._reconciler.prepare(
                business_id=business_id,
                kind=kind,
                staged_items=submission.items,
                limits=business.limits,
                expected_version=None if kind_switched else submission.expected_version,
            )

        # Uploads write no rows
        if plan is not None:
            await self._reconciler.upload(plan, owner_id)
        gallery_paths = None
        if submission.gallery is not None:
            try:
                gallery_paths = await self._gallery.upload(business, owner_id, submission.gallery)
            except UploadFailureError as e:
                if plan is not None:
                    e.details["uploaded_paths"] = e.details.get("uploaded_paths", []) + plan.uploaded_paths
                raise

        if kind_switched:
            cascade = await self._cascade.purge(business_id, keep=kind)
            result.purged_kinds = cascade.purged_kinds
            result.removed_media.extend(cascade.removed_media)
            logger.info(
                f"Business {business_id} switched from {business.active_kind} to {kind} catalog"
            )

        if category is not None and (category, subcategory) != (business.category, business.subcategory):
            await self._update_category(business_id, category, subcategory)

        if gallery_paths is not None:
            gallery = await self._gallery.save(business, gallery_paths)
            result.gallery = gallery.paths
            result.removed_media.extend(gallery.removed_media)

        if plan is None:
            return result

        report = await self._reconciler.apply(plan)

        result.kind = kind
        result.inserted = report.inserted
        result.updated = report.updated
        result.deleted = report.deleted
        result.removed_media.extend(report.removed_media)

        try:
            result.version = (await self._loader.load(business_id, kind)).version
        except SupabaseClientError as e:
            logger.warning(f"Could not read back catalog version for {business_id}: {e}")

        return result

    @staticmethod
    def _resolve_category(
        submission: CatalogSubmission, business: Business
    ) -> tuple[str | None, str | None]:
        """
        Normalized (category, subcategory) to persist, or (None, None) when
        the submission leaves the category alone.

        Raises:
            InvalidCatalogError: Unknown category value
        """
        if submission.category is None:
            return None, None

        category, subcategory = normalize_legacy_category(submission.category)
        if not category:
            raise InvalidCatalogError(
                f"Unknown business category: {submission.category}",
                details={"category": submission.category},
            )
        if submission.subcategory is not None:
            subcategory = submission.subcategory
        elif not subcategory and category == get_main_category(business.category):
            subcategory = business.subcategory
        return category, subcategory

    async def _update_category(self, business_id: str, category: str, subcategory: str) -> None:
        try:
            await self._store.update_business(
                business_id, {"category": category, "subcategory": subcategory}
            )
        except SupabaseClientError as e:
            raise PersistenceFailureError("update", "businesses", e.message)
