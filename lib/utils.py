# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        business_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        business_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def require_uuid(value: str | UUID) -> str:
    """
    Validate that a value is a UUID and return its canonical string form.

    Raises:
        ValueError: If the value is not a UUID
    """
    if isinstance(value, UUID):
        return str(value)
    return str(UUID(str(value)))


# =============================================================================
# Number Parsing
# =============================================================================

_NUMBER_CHARS = re.compile(r"[^0-9.]")


def normalize_number_string(value: str | int | float | None) -> str:
    """
    Strip everything but digits and the first decimal point.

    Example: "$12,499.99" -> "12499.99", "1.2.3" -> "1.23"
    """
    if value is None:
        return ""
    digits = _NUMBER_CHARS.sub("", str(value))
    head, _, rest = digits.partition(".")
    rest = rest.replace(".", "")
    return f"{head}.{rest}" if rest else head


def parse_float(value: str | int | float | None) -> float | None:
    normalized = normalize_number_string(value)
    try:
        return float(normalized)
    except ValueError:
        return None


def parse_int(value: str | int | float | None) -> int | None:
    normalized = normalize_number_string(value).split(".")[0]
    try:
        return int(normalized)
    except ValueError:
        return None
