# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for the catalog pipeline:
# - catalog.py: catalog kinds, images, items, photo order rows, snapshots
# - business.py: business row subset and plan limits
# - submission.py: submission request, step reports and results
#
# These models define the "contract" between the editor UI and the API.
# =============================================================================

# -----------------------------------------------------------------------------
# Catalog Models - staged items and their images
# -----------------------------------------------------------------------------
from .catalog import (
    CatalogItem,
    CatalogItemBase,
    CatalogKind,
    CatalogSnapshot,
    ITEM_MODELS,
    KIND_SPECS,
    KindSpec,
    MediaAttachment,
    MenuItem,
    PhotoOrderRow,
    RetailItem,
    VehicleListing,
    kind_for_category,
    kind_spec,
    photo_rows_for,
)

# -----------------------------------------------------------------------------
# Business Models - category and plan limits
# -----------------------------------------------------------------------------
from .business import Business, PlanLimits

# -----------------------------------------------------------------------------
# Submission Models - one reconcile pass
# -----------------------------------------------------------------------------
from .submission import (
    CascadeReport,
    CatalogSubmission,
    GalleryReport,
    ReconcileReport,
    SubmissionError,
    SubmissionResult,
)

__all__ = [
    # Catalog
    "CatalogItem",
    "CatalogItemBase",
    "CatalogKind",
    "CatalogSnapshot",
    "ITEM_MODELS",
    "KIND_SPECS",
    "KindSpec",
    "MediaAttachment",
    "MenuItem",
    "PhotoOrderRow",
    "RetailItem",
    "VehicleListing",
    "kind_for_category",
    "kind_spec",
    "photo_rows_for",
    # Business
    "Business",
    "PlanLimits",
    # Submission
    "CascadeReport",
    "CatalogSubmission",
    "GalleryReport",
    "ReconcileReport",
    "SubmissionError",
    "SubmissionResult",
]
