# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Verifies Supabase Auth bearer tokens. Which businesses a user may edit is
# decided elsewhere; this module only establishes who the caller is.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.post("/businesses/{business_id}/catalog")
#   async def submit(user: AuthUser = Depends(get_current_user)):
#       ...
# =============================================================================

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser

__all__ = [
    "get_current_user",
    "AuthUser",
]
