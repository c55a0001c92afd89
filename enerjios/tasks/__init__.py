# -*- coding: utf-8 -*-
"""
Celery tasks. Each task wraps a service function so the same job can
also be triggered synchronously from the admin / cron endpoints.
"""
