# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - exceptions.py: Catalog error types and their JSON rendering
# - auth/: Supabase JWT verification
# - routers/: Catalog and health endpoints
#
# The app layer is thin - it handles HTTP concerns and delegates
# catalog logic to the core/ package.
# =============================================================================
