# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# background maintenance of catalog media.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (orphaned media sweep)
# - config.py: Worker-specific settings and the beat schedule
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker --loglevel=info
#
#   # Start the scheduler (daily sweep)
#   celery -A workers.celery_app beat --loglevel=info
#
#   # Submit task (from API or a shell)
#   from workers.tasks import sweep_business_media
#   result = sweep_business_media.delay(business_id)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
