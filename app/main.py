# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Hanar catalog API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    HanarException,
    hanar_exception_handler,
    validation_exception_handler,
)
from app.routers import catalog, health

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown."""
    logger.info(f"Starting Hanar catalog API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info("Shutting down Hanar catalog API")


app = FastAPI(
    title="Hanar Catalog API",
    description="""
## Business Catalog & Media API

Saves what a business owner edits on their listing: menu items (Food),
vehicle listings (Dealership) or retail items (Retail), each with ordered
images, plus the business gallery.

### Saving

1. **Load** - `GET /api/v1/businesses/{id}/catalog` returns items, images
   (bare path + display URL), plan limits and a `version`
2. **Edit** - check each add against the plan with
   `POST /api/v1/businesses/{id}/catalog/limits/check`
3. **Save** - `POST /api/v1/businesses/{id}/catalog` with the staged items,
   new images as base64, and `expected_version`

Switching a business to a category with a different catalog kind deletes the
previous kind's items and images.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Catalog",
            "description": "Load and save a business catalog",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(HanarException)
async def handle_hanar_exception(request: Request, exc: HanarException):
    """Handle custom Hanar exceptions."""
    return await hanar_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

app.include_router(
    catalog.router,
    prefix="/api/v1/businesses",
    tags=["Catalog"]
)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "Hanar Catalog API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
