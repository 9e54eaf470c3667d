# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - catalog.py: Business catalog load, save and plan limit checks
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import catalog

__all__ = [
    "health",
    "catalog",
]
