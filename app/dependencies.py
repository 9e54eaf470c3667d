# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for the catalog services.
# Tests replace these with in-memory fakes via app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from core.services.catalog_store import CatalogStoreService
from core.services.protocols import CatalogStore, ObjectStorage
from core.services.storage_service import StorageService


def get_catalog_store() -> CatalogStore:
    """Relational adapter backed by the shared Supabase client."""
    return CatalogStoreService()


def get_object_storage() -> ObjectStorage:
    """Storage adapter backed by the shared Supabase client."""
    return StorageService()


# Type aliases for dependency injection
CatalogStoreDep = Annotated[CatalogStore, Depends(get_catalog_store)]
ObjectStorageDep = Annotated[ObjectStorage, Depends(get_object_storage)]
