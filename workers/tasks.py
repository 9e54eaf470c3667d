# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background maintenance of catalog media.
#
# Tasks:
# - sweep_business_media: Delete unreferenced images of one business
# - sweep_all_media: Run the sweep for every business (scheduled daily)
# =============================================================================

import asyncio
import logging
from typing import Any

from celery import current_task, shared_task

logger = logging.getLogger(__name__)


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Processing..."):
    """
    Update task progress for polling.

    Args:
        current: Current step number
        total: Total steps
        message: Status message
    """
    if current_task and total:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100),
                "message": message,
            }
        )


def _build_sweeper(store=None):
    from core.services.catalog_store import CatalogStoreService
    from core.services.orphan_sweeper import OrphanSweeper
    from core.services.storage_service import StorageService

    return OrphanSweeper(store or CatalogStoreService(), StorageService())


# =============================================================================
# Sweep Tasks
# =============================================================================

@shared_task(bind=True, name="workers.tasks.sweep_business_media")
def sweep_business_media(self, business_id: str, dry_run: bool = False) -> dict[str, Any]:
    """
    Delete storage objects no row of this business references anymore.

    Args:
        business_id: Business UUID
        dry_run: Only report what would be deleted

    Returns:
        Dict with success flag and the SweepReport fields
    """
    logger.info(f"Sweeping media for business {business_id} (dry_run={dry_run})")

    try:
        report = asyncio.run(_build_sweeper().sweep(business_id, dry_run=dry_run))
        return {"success": True, **report.model_dump()}

    except Exception as e:
        logger.exception(f"Media sweep failed for business {business_id}: {e}")
        return {"success": False, "business_id": business_id, "error": str(e)}


@shared_task(bind=True, name="workers.tasks.sweep_all_media")
def sweep_all_media(self, dry_run: bool = False) -> dict[str, Any]:
    """
    Sweep every business.

    One business failing doesn't stop the others; failures are counted and
    listed in the result.

    Returns:
        Dict with totals and the ids of businesses whose sweep failed
    """
    return asyncio.run(_sweep_all(dry_run))


async def _sweep_all(dry_run: bool) -> dict[str, Any]:
    from core.services.catalog_store import CatalogStoreService

    store = CatalogStoreService()
    sweeper = _build_sweeper(store)

    try:
        businesses = await store.list_businesses()
    except Exception as e:
        logger.exception(f"Could not list businesses for the media sweep: {e}")
        return {"success": False, "error": str(e)}

    totals = {"businesses": len(businesses), "scanned": 0, "removed": 0, "failed": []}
    for index, business in enumerate(businesses, start=1):
        update_progress(index, len(businesses), f"Sweeping business {index} of {len(businesses)}")
        business_id = str(business["id"])
        try:
            report = await sweeper.sweep(business_id, owner_id=business.get("owner_id"), dry_run=dry_run)
        except Exception as e:
            logger.warning(f"Media sweep failed for business {business_id}: {e}")
            totals["failed"].append(business_id)
            continue
        totals["scanned"] += report.scanned
        totals["removed"] += len(report.removed)

    logger.info(
        f"Media sweep finished: {totals['businesses']} businesses, "
        f"{totals['removed']} object(s) removed, {len(totals['failed'])} failed"
    )
    return {"success": True, **totals}
