# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Liveness and readiness probes for load balancers and monitoring.
# Readiness verifies the businesses table is queryable and that every bucket
# the catalog pipeline writes to exists.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from core.models.catalog import KIND_SPECS
from core.services.media_uploader import GALLERY_BUCKET
from lib.supabase_client import SupabaseClient

router = APIRouter()

API_VERSION = "1.0.0"

REQUIRED_BUCKETS = sorted({spec.bucket for spec in KIND_SPECS.values()} | {GALLERY_BUCKET})


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual dependency checks."""
    database: str
    storage: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health status; never touches Supabase."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check.

    Reports "degraded" if the database is unreachable or a catalog bucket
    is missing.
    """
    checks = ChecksResponse(database="unknown", storage="unknown")

    try:
        client = SupabaseClient.get_client()
        client.table("businesses").select("id").limit(1).execute()
        checks.database = "healthy"
    except Exception as e:
        checks.database = f"unhealthy: {str(e)[:50]}"

    try:
        client = SupabaseClient.get_client()
        existing = {bucket.name for bucket in client.storage.list_buckets()}
        missing = [name for name in REQUIRED_BUCKETS if name not in existing]
        checks.storage = f"missing buckets: {', '.join(missing)}" if missing else "healthy"
    except Exception as e:
        checks.storage = f"unhealthy: {str(e)[:50]}"

    all_healthy = checks.database == "healthy" and checks.storage == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )
