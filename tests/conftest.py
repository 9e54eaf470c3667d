# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides in-memory adapters and a seeded business
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from tests.fakes import InMemoryCatalogStore, InMemoryObjectStorage

BUSINESS_ID = "0b6f3c9a-6d1e-4c55-9a57-2f1e4b7c8d90"
OWNER_ID = "7d2e5a10-4b3c-4f8e-9d61-0a1b2c3d4e5f"

STORAGE_PREFIX = "https://test-project.supabase.co/storage/v1/object/public/"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store():
    """Empty in-memory CatalogStore."""
    return InMemoryCatalogStore()


@pytest.fixture
def storage():
    """Empty in-memory ObjectStorage."""
    return InMemoryObjectStorage()


@pytest.fixture
def business_row():
    """A Food business with room for 10 menu items."""
    return {
        "id": BUSINESS_ID,
        "owner_id": OWNER_ID,
        "category": "Food",
        "subcategory": "Bakery",
        "images": [],
        "max_menu_items": 10,
        "max_retail_items": 10,
        "max_car_listings": 10,
        "max_gallery_images": 5,
    }


@pytest.fixture
def seeded_store(store, business_row):
    """CatalogStore holding the sample business."""
    store.add_business(business_row)
    return store
