# =============================================================================
# tests/test_categories.py - Category Normalization Tests
# =============================================================================
# Run with: pytest tests/test_categories.py -v
# =============================================================================

import pytest

from core.models.catalog import CatalogKind, kind_for_category
from lib.categories import (
    get_main_category,
    is_valid_subcategory,
    normalize_legacy_category,
)
from lib.utils import normalize_number_string, parse_float, parse_int, require_uuid


class TestNormalizeLegacyCategory:

    @pytest.mark.parametrize("value, expected", [
        ("Restaurant", ("Food", "Restaurant")),
        ("Car Dealership", ("Dealership", "Car Dealer")),
        ("retails", ("Retail", "")),
        ("real_estate", ("Real Estate", "")),
        ("something_else", ("Services", "")),
        ("Food", ("Food", "")),
        ("  Retail ", ("Retail", "")),
        ("Spaceships", ("", "")),
        (None, ("", "")),
    ])
    def test_mapping(self, value, expected):
        assert normalize_legacy_category(value) == expected

    def test_get_main_category(self):
        assert get_main_category("Restaurant") == "Food"

    def test_subcategory_validation(self):
        assert is_valid_subcategory("Food", "Bakery")
        assert is_valid_subcategory("Food", "")
        assert not is_valid_subcategory("Food", "Car Dealer")


class TestKindForCategory:

    @pytest.mark.parametrize("category, kind", [
        ("Food", CatalogKind.MENU),
        ("Restaurant", CatalogKind.MENU),
        ("Dealership", CatalogKind.VEHICLE),
        ("Car Dealership", CatalogKind.VEHICLE),
        ("Retail", CatalogKind.RETAIL),
        ("retail", CatalogKind.RETAIL),
        ("Services", None),
        ("Real Estate", None),
        ("", None),
    ])
    def test_kind(self, category, kind):
        assert kind_for_category(category) == kind


class TestNumberHelpers:

    @pytest.mark.parametrize("value, expected", [
        ("$12,499.99", "12499.99"),
        ("1.2.3", "1.23"),
        ("abc", ""),
        (None, ""),
        (42, "42"),
    ])
    def test_normalize_number_string(self, value, expected):
        assert normalize_number_string(value) == expected

    def test_parse_float(self):
        assert parse_float("$8.50") == 8.5
        assert parse_float("free") is None

    def test_parse_int(self):
        assert parse_int("2019 model") == 2019
        assert parse_int("12.9") == 12
        assert parse_int("") is None

    def test_require_uuid(self):
        value = "0B6F3C9A-6D1E-4C55-9A57-2F1E4B7C8D90"
        assert require_uuid(value) == value.lower()
        with pytest.raises(ValueError):
            require_uuid("m1")
