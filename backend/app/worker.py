"""
Celery Worker Configuration

Configures Celery for background summary generation, so analyzers can
enqueue a summary refresh once they have written an audit's check results.
"""
import logging

from celery import Celery

from app.config import settings

logger = logging.getLogger(__name__)


# Create Celery app
celery_app = Celery(
    "auditscore",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "app.tasks.summary_tasks",
    ],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=600,
    task_soft_time_limit=540,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,
    worker_max_tasks_per_child=100,

    # Result backend settings
    result_expires=86400,  # 24 hours
    result_extended=True,

    # Retry settings
    task_default_retry_delay=60,
    task_max_retries=3,

    # Queue routing
    task_routes={
        "app.tasks.summary_tasks.*": {"queue": "summary"},
    },

    # Default queue
    task_default_queue="default",
)


# Task base class with common functionality
class AuditScoreTask(celery_app.Task):
    """Base task class with error handling and logging."""

    abstract = True

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        """Handle task failure."""
        logger.error(f"Task {self.name}[{task_id}] failed: {exc}")
        self.update_state(
            state="FAILURE",
            meta={
                "exc_type": type(exc).__name__,
                "exc_message": str(exc),
            }
        )

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        """Handle task retry."""
        logger.warning(f"Task {self.name}[{task_id}] retrying: {exc}")


# Register base class
celery_app.Task = AuditScoreTask
