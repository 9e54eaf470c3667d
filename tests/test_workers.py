# =============================================================================
# tests/test_workers.py - Media Sweep Task Tests
# =============================================================================
# Run with: pytest tests/test_workers.py -v
# =============================================================================

import asyncio
from datetime import datetime, timezone

import pytest

import core.services.catalog_store as catalog_store
from core.services.orphan_sweeper import OrphanSweeper
from tests.conftest import BUSINESS_ID, OWNER_ID
from workers import tasks

OTHER_ID = "2a3b4c5d-6e7f-4a8b-9c0d-1e2f3a4b5c6d"
OLD = datetime(2024, 1, 1, tzinfo=timezone.utc)
GALLERY_FOLDER = f"{OWNER_ID}/gallery/{BUSINESS_ID}"


@pytest.fixture
def wired(monkeypatch, seeded_store, storage):
    """Point the tasks at the in-memory adapters."""
    storage.add_object("business-uploads", f"{GALLERY_FOLDER}/stale.jpg", created_at=OLD)
    monkeypatch.setattr(tasks, "_build_sweeper", lambda store=None: OrphanSweeper(seeded_store, storage))
    monkeypatch.setattr(catalog_store, "CatalogStoreService", lambda: seeded_store)
    return seeded_store


class TestSweepBusinessMedia:

    def test_returns_report_fields(self, wired, storage):
        result = tasks.sweep_business_media.run(BUSINESS_ID)

        assert result["success"] is True
        assert result["removed"] == [f"{GALLERY_FOLDER}/stale.jpg"]
        assert storage.paths("business-uploads") == []

    def test_dry_run_keeps_objects(self, wired, storage):
        result = tasks.sweep_business_media.run(BUSINESS_ID, dry_run=True)

        assert result["orphaned"] == [f"{GALLERY_FOLDER}/stale.jpg"]
        assert storage.paths("business-uploads") == [f"{GALLERY_FOLDER}/stale.jpg"]

    def test_unknown_business_reports_failure(self, wired):
        result = tasks.sweep_business_media.run(OTHER_ID)

        assert result["success"] is False
        assert result["business_id"] == OTHER_ID


class TestSweepAllMedia:

    def test_sweeps_every_business(self, wired, storage):
        result = asyncio.run(tasks._sweep_all(dry_run=False))

        assert result["success"] is True
        assert result["businesses"] == 1
        assert result["removed"] == 1
        assert result["failed"] == []

    def test_one_failure_does_not_stop_the_rest(self, wired, storage, business_row):
        # Listed but unreadable on the per-business fetch
        wired.add_business({**business_row, "id": OTHER_ID})
        original = wired.fetch_business

        async def flaky_fetch(business_id):
            if business_id == OTHER_ID:
                raise RuntimeError("row locked")
            return await original(business_id)

        wired.fetch_business = flaky_fetch

        result = asyncio.run(tasks._sweep_all(dry_run=False))

        assert result["businesses"] == 2
        assert result["failed"] == [OTHER_ID]
        assert result["removed"] == 1

    def test_listing_failure_is_reported(self, wired):
        wired.fail("list_businesses")

        result = asyncio.run(tasks._sweep_all(dry_run=False))

        assert result["success"] is False


class TestCeleryConfig:

    def test_daily_sweep_is_scheduled(self):
        from workers.config import CeleryConfig

        entry = CeleryConfig.beat_schedule["sweep-orphaned-media-daily"]
        assert entry["task"] == "workers.tasks.sweep_all_media"

    def test_no_retry_policy_for_tasks_that_report_failures(self):
        # Sweep tasks return failures in their result instead of retrying
        from workers.config import CeleryConfig

        assert not hasattr(CeleryConfig, "task_annotations")
