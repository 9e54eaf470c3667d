# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# ObjectStorage implementation backed by Supabase Storage.
# The Supabase client is synchronous, so each call runs in a worker thread
# to let uploads for different images proceed concurrently.
# =============================================================================

import asyncio
import logging
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

# Browser cache lifetime for catalog images (seconds)
CACHE_CONTROL = "3600"


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles uploading, deleting and listing catalog images.
    """

    def __init__(self, client_factory=SupabaseClient.get_client):
        self._client_factory = client_factory

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str | None = None,
    ) -> str:
        """
        Upload raw bytes to storage.

        Uploads never overwrite: a path that already exists is an error,
        which protects against two images racing for the same name.

        Args:
            bucket: Storage bucket
            path: Object path inside the bucket
            data: File bytes
            content_type: MIME type

        Returns:
            Storage path where the file was uploaded

        Raises:
            SupabaseClientError: If upload fails
        """
        client = self._client_factory()
        file_options = {
            "content-type": content_type or "application/octet-stream",
            "cache-control": CACHE_CONTROL,
            "upsert": "false",
        }

        try:
            await asyncio.to_thread(
                client.storage.from_(bucket).upload,
                path=path,
                file=data,
                file_options=file_options,
            )
            logger.info(f"Uploaded file to storage: {bucket}/{path}")
            return path

        except Exception as e:
            logger.error(f"Storage upload failed for {bucket}/{path}: {e}")
            raise SupabaseClientError(
                message=f"Failed to upload {path}: {e}",
                code="STORAGE_UPLOAD_FAILED",
                suggestion="Try again later or contact support if the issue persists",
                details={"bucket": bucket, "path": path},
            )

    async def delete(self, bucket: str, paths: list[str]) -> None:
        """
        Delete files from storage.

        Raises:
            SupabaseClientError: If the delete request fails
        """
        if not paths:
            return
        client = self._client_factory()

        try:
            await asyncio.to_thread(client.storage.from_(bucket).remove, list(paths))
            logger.info(f"Deleted {len(paths)} file(s) from storage bucket {bucket}")

        except Exception as e:
            logger.error(f"Failed to delete files from {bucket}: {e}")
            raise SupabaseClientError(
                message=f"Failed to delete files: {e}",
                code="STORAGE_DELETE_FAILED",
                details={"bucket": bucket, "paths": list(paths)},
            )

    async def public_url(self, bucket: str, path: str) -> str:
        """Get a public URL for a storage file."""
        client = self._client_factory()

        try:
            return await asyncio.to_thread(client.storage.from_(bucket).get_public_url, path)
        except Exception as e:
            logger.error(f"Failed to get public URL: {e}")
            raise SupabaseClientError(
                message=f"Failed to get public URL: {e}",
                code="STORAGE_URL_FAILED",
                details={"bucket": bucket, "path": path},
            )

    async def list(self, bucket: str, prefix: str) -> list[dict[str, Any]]:
        """
        Recursively list files under a prefix.

        Supabase returns one directory level per call; entries without an
        id are folders and are descended into.

        Returns:
            List of {"path": ..., "created_at": ...} dicts
        """
        client = self._client_factory()
        files: list[dict[str, Any]] = []
        pending = [prefix.strip("/")]

        try:
            while pending:
                folder = pending.pop()
                entries = await asyncio.to_thread(client.storage.from_(bucket).list, folder)
                for entry in entries or []:
                    name = entry.get("name")
                    if not name:
                        continue
                    path = f"{folder}/{name}" if folder else name
                    if entry.get("id") is None:
                        pending.append(path)
                    else:
                        files.append({"path": path, "created_at": entry.get("created_at")})

            return files

        except Exception as e:
            logger.error(f"Failed to list files under {bucket}/{prefix}: {e}")
            raise SupabaseClientError(
                message=f"Failed to list files: {e}",
                code="STORAGE_LIST_FAILED",
                details={"bucket": bucket, "prefix": prefix},
            )
