# -*- coding: utf-8 -*-
"""
Celery Application Configuration
"""
import os

from celery import Celery
from celery.schedules import crontab


def make_celery(app=None):
    """
    Create Celery application with Flask integration

    Args:
        app: Flask application instance (optional). Without it, tasks
            build their own app from FLASK_ENV on first run.

    Returns:
        Celery application instance
    """
    celery = Celery(
        'enerjios',
        broker=os.getenv('REDIS_URL', 'redis://localhost:6379/0'),
        backend=os.getenv('REDIS_URL', 'redis://localhost:6379/0'),
        include=[
            'enerjios.tasks.kvkk_tasks',
            'enerjios.tasks.quote_tasks',
            'enerjios.tasks.cleanup_tasks',
        ]
    )

    celery.conf.update(
        # Task settings
        task_serializer='json',
        accept_content=['json'],
        result_serializer='json',
        timezone='Europe/Istanbul',
        enable_utc=True,

        # Task execution
        task_acks_late=True,
        task_reject_on_worker_lost=True,

        # Retry settings
        task_default_retry_delay=60,  # 1 minute
        task_max_retries=3,

        # Beat schedule for periodic tasks
        beat_schedule={
            'kvkk-automated-monitoring': {
                'task': 'enerjios.tasks.kvkk_tasks.run_kvkk_monitoring',
                'schedule': crontab(minute=0),  # Every hour at :00
            },
            'kvkk-daily-compliance-report': {
                'task': 'enerjios.tasks.kvkk_tasks.send_kvkk_daily_report',
                'schedule': crontab(hour=9, minute=5),  # Every day at 09:05
            },
            'quote-scheduler': {
                'task': 'enerjios.tasks.quote_tasks.run_quote_scheduler',
                'schedule': crontab(minute=15),  # Every hour at :15
            },
            'daily-retention-cleanup': {
                'task': 'enerjios.tasks.cleanup_tasks.run_all_cleanup_tasks',
                'schedule': crontab(hour=3, minute=30),  # Every day at 03:30
            },
        }
    )

    if app:
        celery.conf.update(
            broker_url=app.config.get('CELERY_BROKER_URL'),
            result_backend=app.config.get('CELERY_RESULT_BACKEND'),
        )

    flask_app = {'app': app}

    class ContextTask(celery.Task):
        def __call__(self, *args, **kwargs):
            if flask_app['app'] is None:
                from enerjios import create_app
                flask_app['app'] = create_app()
            with flask_app['app'].app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask

    return celery


# Create Celery instance
celery = make_celery()
