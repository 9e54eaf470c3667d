# =============================================================================
# lib/categories.py - Business Category Normalization
# =============================================================================
# Businesses store a main category ("Food", "Dealership", ...) and a
# subcategory ("Bakery", "Car Dealer", ...). Rows written by older versions
# of the editor store legacy values such as "Restaurant" or "Car Dealership".
# These helpers map any stored value onto a main category.
# =============================================================================

FOOD = "Food"
DEALERSHIP = "Dealership"
REAL_ESTATE = "Real Estate"
RETAIL = "Retail"
SERVICES = "Services"

BUSINESS_CATEGORIES: dict[str, list[str]] = {
    DEALERSHIP: [
        "Boat Dealer",
        "Car Dealer",
        "Heavy Equipment Dealer",
        "Motorcycle Dealer",
        "Other Dealership",
        "RV / Camper Dealer",
        "Truck Dealer",
    ],
    FOOD: [
        "Bakery",
        "Butcher Shop",
        "Cafe / Coffee Shop",
        "Catering",
        "Dessert Shop",
        "Food Truck",
        "Grocery / Market",
        "Juice Bar",
        "Other Food Business",
        "Restaurant",
    ],
    REAL_ESTATE: [
        "Other Real Estate Services",
        "Property Management",
        "Real Estate Agency",
        "Real Estate Broker",
        "Real Estate Developer",
    ],
    RETAIL: [
        "Beauty Supply",
        "Bookstore",
        "Clothing Store",
        "Convenience Store",
        "Electronics Store",
        "Furniture Store",
        "Grocery Store",
        "Home Appliances",
        "Jewelry Store",
        "Other Retail Store",
        "Pet Store",
    ],
    SERVICES: [
        "Accounting",
        "Auto Repair",
        "Barber Shop",
        "Cleaning Service",
        "Electrical",
        "Hair Salon",
        "HVAC",
        "Insurance Agency",
        "IT Services",
        "Landscaping",
        "Legal Services",
        "Marketing Agency",
        "Moving Company",
        "Nail Salon",
        "Plumbing",
        "Real Estate Agent",
        "Staffing Agency",
        "Tax Services",
        "Tutoring",
        "Trucking Company",
        "Other Services",
    ],
}

# Legacy value -> (main category, subcategory)
_LEGACY_CATEGORIES: dict[str, tuple[str, str]] = {
    "Restaurant": (FOOD, "Restaurant"),
    "Car Dealership": (DEALERSHIP, "Car Dealer"),
    "Retail": (RETAIL, ""),
    "retail": (RETAIL, ""),
    "retails": (RETAIL, ""),
    "Real Estate": (REAL_ESTATE, ""),
    "real estate": (REAL_ESTATE, ""),
    "real_estate": (REAL_ESTATE, ""),
    "Services": (SERVICES, ""),
    "services": (SERVICES, ""),
    "other": (SERVICES, ""),
    "something_else": (SERVICES, ""),
}


def normalize_legacy_category(value: str | None) -> tuple[str, str]:
    """
    Map a stored category value to (main category, subcategory).

    Unknown values map to ("", "").

    Example:
        normalize_legacy_category("Car Dealership")  # ("Dealership", "Car Dealer")
        normalize_legacy_category("Food")            # ("Food", "")
    """
    v = (value or "").strip()
    if v in _LEGACY_CATEGORIES:
        return _LEGACY_CATEGORIES[v]
    if v in BUSINESS_CATEGORIES:
        return v, ""
    return "", ""


def get_main_category(value: str | None) -> str:
    """Main category only (which catalog section the business gets)."""
    category, _ = normalize_legacy_category(value)
    return category


def is_valid_subcategory(category: str, subcategory: str | None) -> bool:
    """An empty subcategory is always allowed."""
    if not subcategory:
        return True
    return subcategory in BUSINESS_CATEGORIES.get(get_main_category(category), [])
