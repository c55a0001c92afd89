# -*- coding: utf-8 -*-
"""
Health Check Endpoints
System monitoring for EnerjiOS
"""
import os
import time
import logging

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text

from enerjios.extensions import db
from enerjios.utils.timezone import utc_now

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__)

SERVICE_NAME = 'enerjios'


def _basic_status():
    return {
        'status': 'ok',
        'timestamp': utc_now().isoformat(),
        'service': SERVICE_NAME,
    }


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Basic health check for load balancers.
    ---
    tags:
      - Health
    responses:
      200:
        description: Service is up
    """
    return jsonify(_basic_status()), 200


@health_bp.route('/api/health', methods=['GET'])
def api_health_check():
    """Alias for /health"""
    return jsonify(_basic_status()), 200


@health_bp.route('/health/detailed', methods=['GET'])
def detailed_health_check():
    """
    Detailed health check with all dependency statuses.
    ---
    tags:
      - Health
    responses:
      200:
        description: All critical dependencies are healthy
      503:
        description: Database or Redis is unavailable
    """
    health_status = _basic_status()
    health_status['version'] = os.getenv('APP_VERSION', '1.0.0')
    health_status['checks'] = {}

    all_ok = True

    # ====================
    # DATABASE CHECK
    # ====================
    try:
        start = time.time()
        db.session.execute(text('SELECT 1'))
        db.session.commit()
        health_status['checks']['database'] = {
            'status': 'ok',
            'response_time_ms': round((time.time() - start) * 1000, 2)
        }
    except Exception as e:
        all_ok = False
        health_status['checks']['database'] = {'status': 'error', 'error': str(e)}
        logger.error(f"Health check - Database error: {e}")

    # ====================
    # REDIS CHECK
    # ====================
    try:
        import redis
        start = time.time()
        r = redis.from_url(current_app.config['REDIS_URL'], socket_connect_timeout=2)
        r.ping()
        health_status['checks']['redis'] = {
            'status': 'ok',
            'response_time_ms': round((time.time() - start) * 1000, 2)
        }
    except Exception as e:
        all_ok = False
        health_status['checks']['redis'] = {'status': 'error', 'error': str(e)}
        logger.error(f"Health check - Redis error: {e}")

    # ====================
    # CELERY CHECK
    # ====================
    try:
        from enerjios.celery_app import celery
        start = time.time()
        active_workers = celery.control.inspect(timeout=1).ping()
        if active_workers:
            health_status['checks']['celery'] = {
                'status': 'ok',
                'workers': len(active_workers),
                'response_time_ms': round((time.time() - start) * 1000, 2)
            }
        else:
            health_status['checks']['celery'] = {
                'status': 'warning',
                'message': 'No active workers found'
            }
    except Exception as e:
        # Workers being down does not stop the API
        health_status['checks']['celery'] = {'status': 'warning', 'error': str(e)}
        logger.warning(f"Health check - Celery warning: {e}")

    # ====================
    # OUTBOUND CHANNELS
    # ====================
    config = current_app.config
    health_status['checks']['channels'] = {
        'email': bool(config.get('SMTP_USER') and config.get('SMTP_PASS')),
        'whatsapp': bool(config.get('WHATSAPP_API_URL') and config.get('WHATSAPP_API_KEY')),
        'sms': bool(config.get('SMS_API_URL') and config.get('SMS_API_KEY')),
    }

    if not all_ok:
        health_status['status'] = 'degraded'
        return jsonify(health_status), 503

    return jsonify(health_status), 200


@health_bp.route('/health/ready', methods=['GET'])
def readiness_check():
    """
    Kubernetes-style readiness probe.
    Returns 200 only if the database answers.
    """
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()
        return jsonify({'ready': True}), 200
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return jsonify({'ready': False}), 503


@health_bp.route('/health/live', methods=['GET'])
def liveness_check():
    """Kubernetes-style liveness probe."""
    return jsonify({'alive': True}), 200
