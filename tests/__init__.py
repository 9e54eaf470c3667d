# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Hanar catalog service:
# - test_storage_paths.py / test_categories.py: lib helpers
# - test_catalog_models.py: Pydantic model validation
# - test_plan_limits.py / test_media_uploader.py: limit gate and uploads
# - test_catalog_reconciler.py / test_category_cascade.py: write passes
# - test_gallery_service.py / test_submission_service.py: orchestration
# - test_orphan_sweeper.py / test_workers.py: media sweep
# - test_supabase_adapters.py / test_api.py: adapters and HTTP surface
#
# Run tests with: pytest
# =============================================================================
