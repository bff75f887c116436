# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# The TrackAura worker runs one periodic job: refreshing catalog teaser
# prices (workers.tasks.refresh_teasers). Broker, queues and the beat
# schedule come from workers.config.CeleryConfig, which reads app settings.
#
# Usage:
#   # Worker with embedded beat scheduler
#   celery -A workers.celery_app worker --beat --loglevel=info
#
#   # Trigger a refresh by hand
#   celery -A workers.celery_app call workers.tasks.refresh_teasers
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun

from app.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_celery_app() -> Celery:
    """Build the worker app with the teaser refresh task registered."""
    app = Celery("trackaura_worker", include=["workers.tasks"])
    app.config_from_object("workers.config:CeleryConfig")

    # Strip credentials before logging the broker
    broker = settings.REDIS_URL.split("@")[-1]
    logger.info(
        f"Celery app ready (broker {broker}, teaser refresh every "
        f"{settings.TEASER_REFRESH_MINUTES} min)"
    )
    return app


celery_app = create_celery_app()


# =============================================================================
# Task Lifecycle Logging
# =============================================================================

@task_prerun.connect
def log_task_start(sender=None, task_id=None, task=None, **extra):
    logger.info(f"Task started: {task.name} [{task_id}]")


@task_postrun.connect
def log_task_result(sender=None, task_id=None, task=None, retval=None, state=None, **extra):
    """Log the outcome; refresh runs also report their counts."""
    if isinstance(retval, dict) and "updated" in retval:
        logger.info(
            f"Task {task.name} [{task_id}] {state}: {retval['updated']} teasers updated "
            f"({retval.get('market_updated', 0)} market, "
            f"{retval.get('generative_updated', 0)} generative), "
            f"{len(retval.get('failed') or [])} failed"
        )
    else:
        logger.info(f"Task {task.name} [{task_id}] {state}")


@task_failure.connect
def log_task_failure(sender=None, task_id=None, exception=None, **extra):
    logger.error(f"Task failed: {sender.name} [{task_id}]: {exception}")


if __name__ == "__main__":
    celery_app.start()
