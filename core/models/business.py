# =============================================================================
# core/models/business.py - Business and Plan Limit Schemas
# =============================================================================
# A business row carries its category (which decides the active catalog
# kind), its gallery, and the plan limits written by the billing component.
# This package only reads those limits.
# =============================================================================

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.config import settings
from core.models.catalog import CatalogKind, kind_for_category


class PlanLimits(BaseModel):
    """
    Read-only quantity limits of a business's plan.

    Example:
        {
            "max_menu_items": 25,
            "max_retail_items": 0,
            "max_car_listings": 0,
            "max_gallery_images": 10,
            "max_images_per_item": 8
        }
    """

    max_menu_items: int = Field(default=0, ge=0)
    max_retail_items: int = Field(default=0, ge=0)
    max_car_listings: int = Field(default=0, ge=0)
    max_gallery_images: int = Field(default_factory=lambda: settings.DEFAULT_MAX_GALLERY_IMAGES, ge=0)
    max_images_per_item: int = Field(default_factory=lambda: settings.DEFAULT_MAX_IMAGES_PER_ITEM, ge=1)

    def max_for_kind(self, kind: CatalogKind) -> int:
        """Maximum number of items of a catalog kind."""
        return {
            CatalogKind.MENU: self.max_menu_items,
            CatalogKind.VEHICLE: self.max_car_listings,
            CatalogKind.RETAIL: self.max_retail_items,
        }[CatalogKind(kind)]

    def max_images_for_kind(self, kind: CatalogKind) -> int:
        """
        Maximum images on one item of a kind.

        Retail items share the gallery allowance (at least one image);
        menu items and car listings use the fixed per-item cap.
        """
        if CatalogKind(kind) is CatalogKind.RETAIL:
            return max(1, self.max_gallery_images)
        return self.max_images_per_item

    @classmethod
    def from_business_row(cls, row: dict[str, Any]) -> PlanLimits:
        """Read limits off a businesses row, ignoring missing/NULL columns."""
        data = {
            key: row[key]
            for key in ("max_menu_items", "max_retail_items", "max_car_listings", "max_gallery_images")
            if row.get(key) is not None
        }
        return cls(**data)


class Business(BaseModel):
    """The subset of a businesses row the catalog pipeline needs."""

    id: str
    owner_id: str | None = None
    category: str = ""
    subcategory: str = ""
    gallery: list[str] = Field(
        default_factory=list,
        description="Ordered gallery references (businesses.images)"
    )
    limits: PlanLimits = Field(default_factory=PlanLimits)

    @property
    def active_kind(self) -> CatalogKind | None:
        return kind_for_category(self.category)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Business:
        return cls(
            id=str(row["id"]),
            owner_id=str(row["owner_id"]) if row.get("owner_id") else None,
            category=row.get("category") or "",
            subcategory=row.get("subcategory") or "",
            gallery=[ref for ref in (row.get("images") or []) if isinstance(ref, str) and ref],
            limits=PlanLimits.from_business_row(row),
        )
