# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers, including the beat schedule that runs
# the orphaned media sweep.
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge tasks after they complete (not before)
    task_acks_late = True

    worker_prefetch_multiplier = 1

    # Task results expire after 1 hour
    result_expires = 3600

    # A full sweep walks every business's folders
    task_time_limit = 1800
    task_soft_time_limit = 1500

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "maintenance": {
            "exchange": "maintenance",
            "routing_key": "maintenance",
        },
    }

    task_routes = {
        "workers.tasks.sweep_business_media": {"queue": "maintenance"},
        "workers.tasks.sweep_all_media": {"queue": "maintenance"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Schedule
    # -------------------------------------------------------------------------

    beat_schedule = {
        "sweep-orphaned-media-daily": {
            "task": "workers.tasks.sweep_all_media",
            "schedule": crontab(hour=3, minute=30),
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
