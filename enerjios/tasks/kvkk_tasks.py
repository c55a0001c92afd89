# -*- coding: utf-8 -*-
"""
KVKK Tasks - Deadline monitoring and daily compliance report
"""
import logging

from enerjios.celery_app import celery
from enerjios.extensions import db
from enerjios.services import kvkk_scheduler

logger = logging.getLogger(__name__)


@celery.task
def run_kvkk_monitoring():
    """
    Overdue notifications, 7-day reminders and (inside the 09:00 window)
    the daily report. Runs hourly via Celery beat.
    """
    try:
        return kvkk_scheduler.run_automated_monitoring()
    except Exception as e:
        logger.error(f"KVKK monitoring error: {e}")
        db.session.rollback()
        return {'error': str(e)}


@celery.task
def send_kvkk_daily_report():
    """Daily compliance report; skipped if one was already sent today."""
    try:
        return kvkk_scheduler.send_daily_compliance_report()
    except Exception as e:
        logger.error(f"KVKK daily report error: {e}")
        db.session.rollback()
        return {'error': str(e)}
