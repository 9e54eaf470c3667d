# =============================================================================
# core/services/catalog_reconciler.py - Catalog Reconciler
# =============================================================================
# Applies a staged catalog of one kind to the database and storage.
#
# One reconcile pass, in three phases:
#   prepare  1. validate the staged items (ids, kind, plan limits, image rules)
#            2. load the persisted snapshot; reject if the caller's version is stale
#            3. partition into delete / insert / update
#   upload   4. upload every pending image (all uploads settle before any write)
#   apply    5. delete removed items (photo rows first, then item rows)
#            6. insert/update each surviving item and REPLACE its photo order rows
#            7. delete storage objects no longer referenced (best-effort)
#
# prepare has no side effects and upload writes no rows, so callers can
# validate and upload a whole submission before its first write. Steps 4 and
# 6 run concurrently across items. Nothing is rolled back: a failure in step
# 5 or 6 leaves earlier writes in place, but every step is safe to repeat, so
# submitting again converges.
# =============================================================================

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from app.exceptions import (
    ConflictError,
    InvalidCatalogError,
    PersistenceFailureError,
    UploadFailureError,
)
from core.models.business import PlanLimits
from core.models.catalog import (
    CatalogItemBase,
    CatalogKind,
    CatalogSnapshot,
    KindSpec,
    kind_spec,
    photo_rows_for,
)
from core.models.submission import ReconcileReport
from core.services.catalog_loader import CatalogLoader
from core.services.media_uploader import MediaTarget, MediaUploader
from core.services.plan_limits import check_catalog_limits
from core.services.protocols import CatalogStore, ObjectStorage
from lib.storage_paths import belongs_to_bucket, to_bare_path
from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)


def _first_error(results: list) -> BaseException | None:
    for result in results:
        if isinstance(result, BaseException):
            return result
    return None


async def remove_orphaned_media(
    storage: ObjectStorage, spec_bucket: str, paths: Sequence[str], aliases: Sequence[str] = ()
) -> tuple[list[str], list[str]]:
    """
    Delete storage objects that no row references anymore.

    Absolute URLs that don't point into the bucket are skipped (they are not
    ours to delete). Failures are logged and returned, never raised.

    Returns:
        (removed paths, paths that failed to delete)
    """
    targets = sorted({
        to_bare_path(spec_bucket, path, aliases=aliases)
        for path in paths
        if belongs_to_bucket(spec_bucket, path, aliases=aliases)
    })
    if not targets:
        return [], []

    try:
        await storage.delete(spec_bucket, targets)
        logger.info(f"Removed {len(targets)} orphaned object(s) from {spec_bucket}")
        return targets, []
    except Exception as e:
        logger.warning(f"Could not remove orphaned objects from {spec_bucket}: {e}")
        return [], targets


@dataclass
class ReconcilePlan:
    """Validated, partitioned staged catalog; produced by prepare()."""

    spec: KindSpec
    business_id: str
    snapshot: CatalogSnapshot
    live: list[CatalogItemBase]
    to_insert: list[CatalogItemBase]
    to_update: list[CatalogItemBase]
    to_delete: list[str]
    # Set by upload(): live items rewritten with stored references
    materialized: list[CatalogItemBase] | None = None
    uploaded_paths: list[str] = field(default_factory=list)


class CatalogReconciler:
    """
    Reconciles a staged catalog of one kind against persisted state.

    reconcile() runs prepare -> upload -> apply. Callers that must finish
    other checks before writing (SubmissionService) run the phases
    themselves.

    Example:
        reconciler = CatalogReconciler(store, storage)
        report = await reconciler.reconcile(
            business_id=business.id,
            owner_id=user.id,
            kind=CatalogKind.MENU,
            staged_items=submission.items,
            limits=business.limits,
            expected_version=submission.expected_version,
        )
    """

    def __init__(
        self,
        store: CatalogStore,
        storage: ObjectStorage,
        uploader: MediaUploader | None = None,
        loader: CatalogLoader | None = None,
    ):
        self._store = store
        self._storage = storage
        self._uploader = uploader or MediaUploader(storage)
        self._loader = loader or CatalogLoader(store)

    async def reconcile(
        self,
        business_id: str,
        owner_id: str,
        kind: CatalogKind,
        staged_items: Sequence[CatalogItemBase],
        limits: PlanLimits,
        expected_version: str | None = None,
    ) -> ReconcileReport:
        """
        Run one reconcile pass.

        Args:
            business_id: Business whose catalog is saved
            owner_id: Storage owner (first segment of upload paths)
            kind: Active catalog kind
            staged_items: Staged items, including ones flagged is_removed
            limits: The business's plan limits
            expected_version: Snapshot version the edit session started from

        Returns:
            ReconcileReport with ids per operation and the persisted items

        Raises:
            InvalidCatalogError: Duplicate ids or items of another kind
            LimitExceededError: The staged catalog exceeds the plan
            ConflictError: expected_version no longer matches
            UploadFailureError: An image upload failed (no rows written)
            PersistenceFailureError: A row write failed
        """
        plan = await self.prepare(business_id, kind, staged_items, limits, expected_version)
        await self.upload(plan, owner_id)
        return await self.apply(plan)

    async def prepare(
        self,
        business_id: str,
        kind: CatalogKind,
        staged_items: Sequence[CatalogItemBase],
        limits: PlanLimits,
        expected_version: str | None = None,
    ) -> ReconcilePlan:
        """
        Validate the staged items and diff them against the snapshot.

        Reads only; nothing is uploaded or written.

        Raises:
            InvalidCatalogError: Duplicate ids or items of another kind
            LimitExceededError: The staged catalog exceeds the plan
            UploadFailureError: A pending image is too large or of a
                disallowed type
            ConflictError: expected_version no longer matches
            PersistenceFailureError: The snapshot could not be read
        """
        spec = kind_spec(kind)
        live = self._live_items(spec, staged_items)
        check_catalog_limits(spec.kind, live, limits)
        for item in live:
            self._uploader.validate(item.images, item_id=item.id)

        try:
            snapshot = await self._loader.load(business_id, spec.kind)
        except SupabaseClientError as e:
            raise PersistenceFailureError("read", spec.table, e.message)

        if expected_version is not None and expected_version != snapshot.version:
            raise ConflictError(spec.kind.value, expected_version, snapshot.version)

        persisted_ids = snapshot.item_ids
        live_ids = {item.id for item in live}
        to_delete = sorted(persisted_ids - live_ids)
        to_insert = [item for item in live if item.id not in persisted_ids]
        to_update = [item for item in live if item.id in persisted_ids]

        for item in to_insert:
            if not item.is_new:
                logger.warning(f"{spec.table} row {item.id} is gone; inserting it again")
        for item in to_update:
            if item.is_new:
                logger.info(f"{spec.table} row {item.id} already exists; updating instead of inserting")

        logger.info(
            f"Reconciling {spec.label} for business {business_id}: "
            f"{len(to_insert)} insert, {len(to_update)} update, {len(to_delete)} delete"
        )

        return ReconcilePlan(
            spec=spec,
            business_id=business_id,
            snapshot=snapshot,
            live=live,
            to_insert=to_insert,
            to_update=to_update,
            to_delete=to_delete,
        )

    async def upload(self, plan: ReconcilePlan, owner_id: str) -> ReconcilePlan:
        """
        Upload every pending image of the plan. Writes no rows.

        Raises:
            UploadFailureError: An upload failed; details["uploaded_paths"]
                lists what did upload
        """
        plan.materialized = await self._upload_all(plan.spec, plan.live, owner_id)
        plan.uploaded_paths = list(dict.fromkeys(
            stored.storage_path
            for item, uploaded in zip(plan.live, plan.materialized)
            for original, stored in zip(item.images, uploaded.images)
            if original.is_new
        ))
        return plan

    async def apply(self, plan: ReconcilePlan) -> ReconcileReport:
        """
        Write an uploaded plan: deletes, item rows, photo rows, then orphan
        cleanup.

        Raises:
            PersistenceFailureError: A row write failed
        """
        if plan.materialized is None:
            raise RuntimeError("apply() needs a plan that went through upload()")

        spec = plan.spec
        await self._delete_items(spec, plan.to_delete)

        inserted_ids = {item.id for item in plan.to_insert}
        results = await asyncio.gather(
            *(
                self._write_item(spec, plan.business_id, item, item.id in inserted_ids)
                for item in plan.materialized
            ),
            return_exceptions=True,
        )
        error = _first_error(results)
        if error:
            raise error

        orphaned = self._orphaned_paths(plan.snapshot, plan.materialized, plan.to_delete)
        removed, failed = await remove_orphaned_media(
            self._storage, spec.bucket, orphaned, spec.bucket_aliases
        )

        return ReconcileReport(
            kind=spec.kind,
            inserted=[item.id for item in plan.to_insert],
            updated=[item.id for item in plan.to_update],
            deleted=plan.to_delete,
            removed_media=removed,
            failed_media_removals=failed,
            items=plan.materialized,
        )

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    @staticmethod
    def _live_items(spec: KindSpec, staged_items: Sequence[CatalogItemBase]) -> list[CatalogItemBase]:
        """Staged items minus removed ones, validated for kind and unique ids."""
        live: list[CatalogItemBase] = []
        seen: set[str] = set()
        for item in staged_items:
            if item.kind != spec.kind.value:
                raise InvalidCatalogError(
                    f"A {item.kind} item cannot be saved in a {spec.kind.value} catalog",
                    item_id=item.id,
                )
            if item.is_removed:
                continue
            if item.id in seen:
                raise InvalidCatalogError(f"Duplicate catalog item id: {item.id}", item_id=item.id)
            seen.add(item.id)
            live.append(item)
        return live

    async def _upload_all(
        self, spec: KindSpec, items: list[CatalogItemBase], owner_id: str
    ) -> list[CatalogItemBase]:
        """
        Upload pending images of every item and return the items rewritten
        with stored references. Waits for all uploads before reporting the
        first failure.
        """
        results = await asyncio.gather(
            *(
                self._uploader.materialize(item.images, MediaTarget.for_item(spec, item.id), owner_id)
                for item in items
            ),
            return_exceptions=True,
        )

        error = _first_error(results)
        if error:
            if isinstance(error, UploadFailureError):
                uploaded = [
                    img.storage_path
                    for item, images in zip(items, results)
                    if not isinstance(images, BaseException)
                    for img, original in zip(images, item.images)
                    if original.is_new
                ]
                error.details["uploaded_paths"] = error.details.get("uploaded_paths", []) + uploaded
            raise error

        return [
            item.model_copy(update={"images": images, "is_new": False})
            for item, images in zip(items, results)
        ]

    async def _delete_items(self, spec: KindSpec, item_ids: list[str]) -> None:
        """Delete photo rows, then item rows, of items no longer staged."""
        if not item_ids:
            return

        if spec.has_photo_table:
            try:
                await self._store.delete_photo_rows(spec.photo_table, spec.photo_fk, item_ids)
            except SupabaseClientError as e:
                raise PersistenceFailureError("delete", spec.photo_table, e.message)

        try:
            await self._store.delete_items(spec.table, item_ids)
        except SupabaseClientError as e:
            raise PersistenceFailureError("delete", spec.table, e.message)

    async def _write_item(
        self, spec: KindSpec, business_id: str, item: CatalogItemBase, is_insert: bool
    ) -> None:
        """Write one item's row, then replace its photo order rows."""
        paths = item.stored_paths
        row = item.to_row(business_id, paths)

        try:
            if is_insert:
                row["id"] = item.id
                row["created_at"] = datetime.now(timezone.utc).isoformat()
                await self._store.insert_item(spec.table, row)
            else:
                await self._store.update_item(spec.table, item.id, row)
        except SupabaseClientError as e:
            operation = "insert into" if is_insert else "update"
            raise PersistenceFailureError(operation, spec.table, e.message, item_id=item.id)

        if not spec.has_photo_table:
            return

        # Replace, never merge: stale rows for removed images must not survive
        try:
            await self._store.delete_photo_rows(spec.photo_table, spec.photo_fk, [item.id])
            rows = [photo.to_db(spec.photo_fk) for photo in photo_rows_for(item.id, paths)]
            if rows:
                await self._store.insert_photo_rows(spec.photo_table, rows)
        except SupabaseClientError as e:
            raise PersistenceFailureError("save photos in", spec.photo_table, e.message, item_id=item.id)

    @staticmethod
    def _orphaned_paths(
        snapshot: CatalogSnapshot,
        items: list[CatalogItemBase],
        deleted_ids: list[str],
    ) -> list[str]:
        """Paths the previous snapshot referenced that nothing references now."""
        still_referenced = {path for item in items for path in item.stored_paths}
        touched = set(deleted_ids) | {item.id for item in items}

        orphaned: list[str] = []
        for item_id, paths in snapshot.paths_by_item().items():
            if item_id in touched:
                orphaned.extend(path for path in paths if path not in still_referenced)
        return orphaned
