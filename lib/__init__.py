# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Shared Supabase client singleton and its error type
# - storage_paths.py: Stored reference <-> public URL conversion
# - categories.py: Business category normalization (legacy values included)
# - utils.py: UUID and number-string helpers
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.storage_paths import to_bare_path, to_display_url, is_absolute_url
from lib.categories import get_main_category, normalize_legacy_category
from lib.utils import normalize_uuid, require_uuid, normalize_number_string

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Storage paths
    "to_bare_path",
    "to_display_url",
    "is_absolute_url",
    # Categories
    "get_main_category",
    "normalize_legacy_category",
    # Utils
    "normalize_uuid",
    "require_uuid",
    "normalize_number_string",
]
