#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker with the embedded beat scheduler, which refreshes
# catalog teaser prices every TEASER_REFRESH_MINUTES.
#
# Usage:
#   # Start worker (development)
#   poetry run python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   poetry run celery -A workers.celery_app worker --beat --loglevel=info
#
# Prerequisites:
#   - Redis must be running (brew services start redis)
#   - Environment variables must be set (.env file)
# =============================================================================

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app


def main():
    """Start the Celery worker."""
    print("=" * 60)
    print("TrackAura Celery Worker")
    print("=" * 60)
    print()
    print("Starting worker with beat (teaser refresh)...")
    print("Press Ctrl+C to stop")
    print()

    celery_app.worker_main([
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=1",
    ])


if __name__ == "__main__":
    main()
