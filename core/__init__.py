# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for catalogs, businesses and submissions
# - services/: adapters (Supabase rows and storage) and the catalog pipeline
#
# Code in this package should NOT import from FastAPI routers or Celery.
# This keeps the logic testable and reusable.
# =============================================================================
