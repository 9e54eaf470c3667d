# =============================================================================
# core/services/media_uploader.py - Media Upload Orchestrator
# =============================================================================
# Turns an item's staged image list into a list of stored references:
# - pending images are uploaded once each, concurrently
# - already stored images keep their position untouched
# - the output has exactly the input order
#
# Upload paths:  {owner}/{folder}/{entity_id}/{timestamp_ms}-{sequence}-{name}
# The timestamp is taken once per batch and `sequence` is the list position,
# so two images of one batch never collide even within the same millisecond.
# =============================================================================

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable

from app.config import settings
from app.exceptions import UploadFailureError
from core.models.catalog import KindSpec, MediaAttachment
from core.services.protocols import ObjectStorage
from lib.storage_paths import to_bare_path

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")

GALLERY_BUCKET = "business-uploads"
GALLERY_FOLDER = "gallery"


@dataclass(frozen=True)
class MediaTarget:
    """Where the images of one entity (catalog item or gallery) are stored."""

    bucket: str
    folder: str
    entity_id: str
    aliases: tuple[str, ...] = ()

    @classmethod
    def for_item(cls, spec: KindSpec, item_id: str) -> "MediaTarget":
        return cls(bucket=spec.bucket, folder=spec.folder, entity_id=item_id, aliases=spec.bucket_aliases)

    @classmethod
    def for_gallery(cls, business_id: str) -> "MediaTarget":
        return cls(bucket=GALLERY_BUCKET, folder=GALLERY_FOLDER, entity_id=business_id)

    def prefix(self, owner_id: str) -> str:
        return f"{owner_id}/{self.folder}/{self.entity_id}"

    def bare_path(self, reference: str | None) -> str:
        return to_bare_path(self.bucket, reference, aliases=self.aliases)


def safe_filename(filename: str | None) -> str:
    """
    Make an uploaded filename safe to embed in a storage path.

    Example: "my photo/1.JPG" -> "my_photo_1.JPG"
    """
    name = _UNSAFE_NAME_CHARS.sub("_", (filename or "").strip())
    return name.strip("_") or "image"


def build_upload_path(owner_id: str, target: MediaTarget, timestamp_ms: int, sequence: int, filename: str | None) -> str:
    return f"{target.prefix(owner_id)}/{timestamp_ms}-{sequence}-{safe_filename(filename)}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class MediaUploader:
    """
    Uploads pending images for one entity at a time.

    Example:
        uploader = MediaUploader(storage)
        stored = await uploader.materialize(item.images, target, owner_id)
        paths = [img.storage_path for img in stored]
    """

    def __init__(self, storage: ObjectStorage, clock: Callable[[], int] = _now_ms):
        self._storage = storage
        self._clock = clock

    def validate(self, images: list[MediaAttachment], item_id: str | None = None) -> None:
        """
        Reject pending images the upload settings don't allow.

        Raises:
            UploadFailureError: For an oversized image or disallowed type
        """
        allowed_types = settings.allowed_image_types_list
        for image in images:
            if not image.is_new:
                continue
            if len(image.content) > settings.max_image_size_bytes:
                raise UploadFailureError(
                    f"file is larger than {settings.MAX_IMAGE_SIZE_MB}MB",
                    item_id=item_id,
                    image_id=image.local_id,
                    filename=image.filename,
                )
            if image.content_type and image.content_type.lower() not in allowed_types:
                raise UploadFailureError(
                    f"content type {image.content_type} is not allowed",
                    item_id=item_id,
                    image_id=image.local_id,
                    filename=image.filename,
                )

    async def materialize(
        self,
        images: list[MediaAttachment],
        target: MediaTarget,
        owner_id: str,
    ) -> list[MediaAttachment]:
        """
        Upload every pending image and return the list as stored references.

        Args:
            images: Ordered images of one entity
            target: Bucket/folder/entity the images belong to
            owner_id: Storage owner (first path segment)

        Returns:
            Same length and order as `images`; every entry has a storage_path
            and no pending bytes.

        Raises:
            UploadFailureError: If any upload failed. Raised only after every
                dispatched upload has finished; successful uploads of the
                batch are listed in details["uploaded_paths"].
        """
        self.validate(images, item_id=target.entity_id)

        # One upload per local_id, at the position it first appears
        pending: dict[str, tuple[int, MediaAttachment]] = {}
        for position, image in enumerate(images):
            if image.is_new and image.local_id not in pending:
                pending[image.local_id] = (position, image)

        if not pending:
            return [image.as_stored(target.bare_path(image.storage_path)) for image in images]

        timestamp_ms = self._clock()
        local_ids = list(pending)
        paths = [
            build_upload_path(owner_id, target, timestamp_ms, position, image.filename)
            for position, image in pending.values()
        ]

        results = await asyncio.gather(
            *(
                self._storage.upload(target.bucket, path, image.content, image.content_type)
                for path, (_, image) in zip(paths, pending.values())
            ),
            return_exceptions=True,
        )

        uploaded: dict[str, str] = {}
        failure: tuple[str, BaseException] | None = None
        for local_id, path, result in zip(local_ids, paths, results):
            if isinstance(result, BaseException):
                failure = failure or (local_id, result)
            else:
                uploaded[local_id] = result or path

        if failure:
            local_id, error = failure
            image = pending[local_id][1]
            logger.error(f"Upload failed for {target.entity_id} image {local_id}: {error}")
            raise UploadFailureError(
                str(error),
                item_id=target.entity_id,
                image_id=local_id,
                filename=image.filename,
                uploaded_paths=list(uploaded.values()),
            )

        logger.info(f"Uploaded {len(uploaded)} image(s) for {target.entity_id}")
        return [
            image.as_stored(uploaded[image.local_id]) if image.is_new
            else image.as_stored(target.bare_path(image.storage_path))
            for image in images
        ]
