# -*- coding: utf-8 -*-
"""
Cleanup Tasks - Automatic Data Retention
KVKK compliant data deletion after retention period
"""
from datetime import timedelta
import logging

from enerjios.celery_app import celery
from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)


# Data retention periods (in days)
RETENTION_PERIODS = {
    'audit_logs': 2 * 365,        # 2 years (legal requirement)
    'consent_logs': 5 * 365,      # 5 years (KVKK requirement)
    'expired_photo_requests': 90,
}


def delete_old_audit_logs(now=None):
    from enerjios.models import AuditLog

    retention_days = RETENTION_PERIODS['audit_logs']
    cutoff_date = (now or utc_now_naive()) - timedelta(days=retention_days)

    count = AuditLog.query.filter(AuditLog.created_at < cutoff_date).delete(synchronize_session=False)
    if count:
        AuditLog.log(
            action='bulk_delete',
            table_name='audit_logs',
            description=f'Retention cleanup: deleted {count} audit logs older than {retention_days} days'
        )
    db.session.commit()
    logger.info(f"Cleanup: Deleted {count} old audit logs")
    return {'deleted': count, 'cutoff_date': cutoff_date.isoformat()}


def delete_old_consent_logs(now=None):
    from enerjios.models import AuditLog, ConsentLog

    retention_days = RETENTION_PERIODS['consent_logs']
    cutoff_date = (now or utc_now_naive()) - timedelta(days=retention_days)

    count = ConsentLog.query.filter(ConsentLog.created_at < cutoff_date).delete(synchronize_session=False)
    if count:
        AuditLog.log(
            action='bulk_delete',
            table_name='consent_logs',
            description=f'KVKK cleanup: deleted {count} consent logs older than {retention_days} days'
        )
    db.session.commit()
    logger.info(f"Cleanup: Deleted {count} old consent logs")
    return {'deleted': count, 'cutoff_date': cutoff_date.isoformat()}


def delete_expired_photo_requests(now=None):
    """Expired photo requests (and their upload rows) past the retention period"""
    from enerjios.models import PhotoRequest, PhotoRequestStatus

    retention_days = RETENTION_PERIODS['expired_photo_requests']
    cutoff_date = (now or utc_now_naive()) - timedelta(days=retention_days)

    old_requests = PhotoRequest.query.filter(
        PhotoRequest.status == PhotoRequestStatus.EXPIRED,
        PhotoRequest.expires_at < cutoff_date,
    ).all()
    for photo_request in old_requests:
        db.session.delete(photo_request)
    db.session.commit()
    logger.info(f"Cleanup: Deleted {len(old_requests)} expired photo requests")
    return {'deleted': len(old_requests), 'cutoff_date': cutoff_date.isoformat()}


CLEANUP_JOBS = {
    'audit_logs': delete_old_audit_logs,
    'consent_logs': delete_old_consent_logs,
    'expired_photo_requests': delete_expired_photo_requests,
}


@celery.task
def run_all_cleanup_tasks():
    """
    Run every retention job. Runs daily via Celery beat.
    One failing job does not stop the others.
    """
    now = utc_now_naive()
    results = {}
    for name, job in CLEANUP_JOBS.items():
        try:
            results[name] = job(now)
        except Exception as e:
            logger.error(f"Cleanup error ({name}): {e}")
            db.session.rollback()
            results[name] = {'error': str(e)}
    return results
