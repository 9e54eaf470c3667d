# =============================================================================
# tests/test_gallery_service.py - Business Gallery Tests
# =============================================================================
# Run with: pytest tests/test_gallery_service.py -v
# =============================================================================

import asyncio

import pytest

from app.exceptions import LimitExceededError, UploadFailureError
from core.models.business import Business
from core.models.catalog import MediaAttachment
from core.services.gallery_service import GalleryService
from core.services.media_uploader import MediaUploader
from tests.conftest import BUSINESS_ID, OWNER_ID, STORAGE_PREFIX

NOW_MS = 1718000000000


@pytest.fixture
def gallery(seeded_store, storage):
    return GalleryService(seeded_store, storage, uploader=MediaUploader(storage, clock=lambda: NOW_MS))


def _business(store, **changes):
    row = {**store.businesses[BUSINESS_ID], **changes}
    store.add_business(row)
    return Business.from_row(row)


class TestGalleryReconcile:

    def test_uploads_and_saves_in_order(self, gallery, seeded_store, storage):
        business = _business(seeded_store, images=["g/old.jpg"])
        storage.add_object("business-uploads", "g/old.jpg")

        report = asyncio.run(gallery.reconcile(business, OWNER_ID, [
            MediaAttachment.pending(b"1", "new.jpg"),
            MediaAttachment.stored("g/old.jpg"),
        ]))

        new_path = f"{OWNER_ID}/gallery/{BUSINESS_ID}/{NOW_MS}-0-new.jpg"
        assert report.paths == [new_path, "g/old.jpg"]
        assert seeded_store.businesses[BUSINESS_ID]["images"] == [new_path, "g/old.jpg"]
        assert report.removed_media == []

    def test_removed_images_are_deleted(self, gallery, seeded_store, storage):
        legacy_url = f"{STORAGE_PREFIX}business-uploads/g/b.jpg"
        business = _business(seeded_store, images=["g/a.jpg", legacy_url])
        storage.add_object("business-uploads", "g/a.jpg")
        storage.add_object("business-uploads", "g/b.jpg")

        report = asyncio.run(gallery.reconcile(business, OWNER_ID, [MediaAttachment.stored("g/a.jpg")]))

        assert report.removed_media == ["g/b.jpg"]
        assert storage.paths("business-uploads") == ["g/a.jpg"]

    def test_limit_is_checked_before_upload(self, gallery, seeded_store, storage):
        business = _business(seeded_store, max_gallery_images=1)

        with pytest.raises(LimitExceededError):
            asyncio.run(gallery.reconcile(business, OWNER_ID, [
                MediaAttachment.pending(b"1", "a.jpg"),
                MediaAttachment.pending(b"2", "b.jpg"),
            ]))

        assert storage.uploads == []
        assert seeded_store.write_calls == []

    def test_upload_failure_leaves_row_untouched(self, gallery, seeded_store, storage):
        business = _business(seeded_store, images=["g/a.jpg"])
        storage.fail_uploads_for = {"a.jpg"}

        with pytest.raises(UploadFailureError):
            asyncio.run(gallery.reconcile(business, OWNER_ID, [MediaAttachment.pending(b"1", "a.jpg")]))

        assert seeded_store.businesses[BUSINESS_ID]["images"] == ["g/a.jpg"]


class TestGalleryCheck:

    def test_check_rejects_disallowed_type_without_uploading(self, gallery, seeded_store, storage):
        business = _business(seeded_store)

        with pytest.raises(UploadFailureError):
            gallery.check(business, [MediaAttachment.pending(b"1", "menu.pdf", "application/pdf")])

        assert storage.uploads == []
        assert seeded_store.write_calls == []

    def test_upload_then_save(self, gallery, seeded_store, storage):
        business = _business(seeded_store)
        staged = [MediaAttachment.pending(b"1", "front.jpg")]

        gallery.check(business, staged)
        paths = asyncio.run(gallery.upload(business, OWNER_ID, staged))
        assert seeded_store.write_calls == []

        report = asyncio.run(gallery.save(business, paths))

        assert paths == [f"{OWNER_ID}/gallery/{BUSINESS_ID}/{NOW_MS}-0-front.jpg"]
        assert report.paths == paths
        assert seeded_store.businesses[BUSINESS_ID]["images"] == paths
