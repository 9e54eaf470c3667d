# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from a Supabase JWT.

    The catalog pipeline only needs the user id: it is the first segment of
    every storage path the user uploads to.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None

    @property
    def owner_id(self) -> str:
        """Storage owner id (string form of the user UUID)."""
        return str(self.id)
