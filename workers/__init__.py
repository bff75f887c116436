# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# periodic catalog maintenance.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (teaser price refresh)
# - config.py: Worker-specific settings and the beat schedule
#
# Usage:
#   # Start worker with the embedded beat scheduler
#   celery -A workers.celery_app worker --beat --loglevel=info
#
#   # Or use the worker script
#   poetry run python scripts/start_worker.py
#
#   # Trigger a refresh by hand
#   from workers.tasks import refresh_teasers
#   result = refresh_teasers.delay()
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
