# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .catalog_store import CatalogStoreService
from .storage_service import StorageService
from .catalog_loader import CatalogLoader, compute_version
from .media_uploader import MediaTarget, MediaUploader
from .catalog_reconciler import CatalogReconciler
from .category_cascade import CategoryCascade
from .gallery_service import GalleryService
from .submission_service import SubmissionService
from .orphan_sweeper import OrphanSweeper, SweepReport

__all__ = [
    "CatalogStoreService",
    "StorageService",
    "CatalogLoader",
    "compute_version",
    "MediaTarget",
    "MediaUploader",
    "CatalogReconciler",
    "CategoryCascade",
    "GalleryService",
    "SubmissionService",
    "OrphanSweeper",
    "SweepReport",
]
