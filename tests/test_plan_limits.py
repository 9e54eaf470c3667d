# =============================================================================
# tests/test_plan_limits.py - Plan Limit Gate Tests
# =============================================================================
# Run with: pytest tests/test_plan_limits.py -v
# =============================================================================

import pytest

from app.exceptions import LimitExceededError
from core.models.business import PlanLimits
from core.models.catalog import CatalogKind, MediaAttachment, MenuItem, RetailItem
from core.services.plan_limits import (
    can_add_gallery_images,
    can_add_images,
    can_add_item,
    can_add_item_images,
    check_catalog_limits,
    ensure_allowed,
)


def _stored(n):
    return [MediaAttachment.stored(f"u/f/i/{i}.jpg") for i in range(n)]


def _pending(n):
    return [MediaAttachment.pending(b"img", f"{i}.jpg", "image/jpeg") for i in range(n)]


class TestCanAddItem:
    """An item may be added only while the count is strictly below the limit."""

    def test_below_limit(self):
        assert can_add_item(CatalogKind.MENU, 4, PlanLimits(max_menu_items=5))

    def test_at_limit_is_rejected(self):
        check = can_add_item(CatalogKind.MENU, 5, PlanLimits(max_menu_items=5))
        assert not check
        assert check.limit == 5
        assert check.current == 5
        assert "maximum of 5 menu items" in check.message
        assert "You currently have 5" in check.message

    def test_zero_limit(self):
        assert not can_add_item(CatalogKind.RETAIL, 0, PlanLimits())

    def test_vehicle_uses_car_listing_limit(self):
        limits = PlanLimits(max_car_listings=2, max_menu_items=50)
        assert not can_add_item(CatalogKind.VEHICLE, 2, limits)
        assert "car listings" in can_add_item(CatalogKind.VEHICLE, 2, limits).message

    def test_allowed_check_has_no_message(self):
        assert can_add_item(CatalogKind.MENU, 0, PlanLimits(max_menu_items=1)).message == ""


class TestCanAddImages:
    """Images may be added while the total stays at or below the cap."""

    def test_reaching_cap_is_allowed(self):
        assert can_add_images(6, 2, 8)

    def test_exceeding_cap_is_rejected(self):
        check = can_add_images(7, 2, 8)
        assert not check
        assert check.requested == 2
        assert "trying to add 2 more" in check.message

    def test_menu_cap_is_per_item_setting(self):
        limits = PlanLimits(max_images_per_item=8, max_gallery_images=2)
        assert can_add_item_images(CatalogKind.MENU, 0, 8, limits)
        assert not can_add_item_images(CatalogKind.MENU, 0, 9, limits)

    def test_retail_cap_follows_gallery_limit(self):
        limits = PlanLimits(max_gallery_images=3)
        assert can_add_item_images(CatalogKind.RETAIL, 1, 2, limits)
        assert not can_add_item_images(CatalogKind.RETAIL, 1, 3, limits)

    def test_retail_cap_is_at_least_one(self):
        limits = PlanLimits(max_gallery_images=0)
        assert can_add_item_images(CatalogKind.RETAIL, 0, 1, limits)

    def test_gallery(self):
        limits = PlanLimits(max_gallery_images=5)
        assert can_add_gallery_images(3, 2, limits)
        assert not can_add_gallery_images(3, 3, limits)


class TestEnsureAllowed:

    def test_passes_allowed_check(self):
        ensure_allowed(can_add_images(0, 1, 1))

    def test_raises_for_rejected_check(self):
        with pytest.raises(LimitExceededError) as exc_info:
            ensure_allowed(can_add_images(1, 1, 1), item_id="abc")
        error = exc_info.value
        assert error.status_code == 403
        assert error.code == "LIMIT_EXCEEDED"
        assert error.item_id == "abc"
        assert error.details == {"limit": 1, "current": 1, "requested": 1}


class TestCheckCatalogLimits:

    def test_valid_catalog(self):
        items = [MenuItem(images=_stored(2) + _pending(1)) for _ in range(3)]
        check_catalog_limits(CatalogKind.MENU, items, PlanLimits(max_menu_items=3))

    def test_too_many_items(self):
        items = [MenuItem() for _ in range(4)]
        with pytest.raises(LimitExceededError) as exc_info:
            check_catalog_limits(CatalogKind.MENU, items, PlanLimits(max_menu_items=3))
        assert exc_info.value.details["current"] == 4

    def test_too_many_images_names_the_item(self):
        item = RetailItem(images=_stored(2) + _pending(2))
        with pytest.raises(LimitExceededError) as exc_info:
            check_catalog_limits(CatalogKind.RETAIL, [item], PlanLimits(max_retail_items=5, max_gallery_images=3))
        assert exc_info.value.item_id == item.id


class TestPlanLimitsFromRow:

    def test_missing_columns_use_defaults(self):
        limits = PlanLimits.from_business_row({"max_menu_items": 12, "max_gallery_images": None})
        assert limits.max_menu_items == 12
        assert limits.max_retail_items == 0
        assert limits.max_car_listings == 0
        assert limits.max_gallery_images == 5
        assert limits.max_images_per_item == 8
