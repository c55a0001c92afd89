# -*- coding: utf-8 -*-
"""
Quote Tasks
"""
import logging

from enerjios.celery_app import celery
from enerjios.services.quote_scheduler import run_scheduled_tasks

logger = logging.getLogger(__name__)


@celery.task
def run_quote_scheduler():
    """Expire quotes, send warnings and reminders, clean up notifications."""
    results = run_scheduled_tasks()
    failed = [name for name, result in results.items() if isinstance(result, dict) and 'error' in result]
    if failed:
        logger.warning(f"Quote scheduler finished with failures: {failed}")
    return results
