# -*- coding: utf-8 -*-
"""
KVKK Deadline Monitoring

Finds applications whose 30-day response window has passed (overdue)
or is about to pass (due soon) and notifies the KVKK officers.

Every notification is written to the KVKK audit log, and the audit log
is what prevents duplicates:

- overdue alerts are sent at most once per application per calendar day
- reminders are sent at most once per application in any 3-day window
- the compliance report is sent at most once per day
"""
import logging
from datetime import timedelta

from flask import current_app

from enerjios.extensions import db
from enerjios.models import KVKKApplication, KVKKAuditLog, KVKKAuditAction, KVKKStatus
from enerjios.services.email_service import EmailService
from enerjios.services.kvkk_compliance import generate_automated_report
from enerjios.utils.errors import ValidationError
from enerjios.utils.timezone import utc_now_naive, start_of_day

logger = logging.getLogger(__name__)

DUE_SOON_WINDOW = timedelta(days=7)
REMINDER_DEDUP_WINDOW = timedelta(days=3)

# Daily report goes out during the first monitoring run after 09:00
DAILY_REPORT_HOUR = 9
DAILY_REPORT_MINUTE_WINDOW = 30


# ══════════════════════════════════════════════════════════════
# SELECTION RULES
# ══════════════════════════════════════════════════════════════

def is_overdue(application, now):
    return application.status in KVKKStatus.OPEN and application.response_deadline < now


def is_due_soon(application, now):
    return (application.status in KVKKStatus.OPEN
            and now <= application.response_deadline <= now + DUE_SOON_WINDOW)


def select_overdue(applications, now):
    return [a for a in applications if is_overdue(a, now)]


def select_due_soon(applications, now):
    return [a for a in applications if is_due_soon(a, now)]


def notified_application_ids(action, since):
    """IDs of applications that already have `action` in the audit log since `since`"""
    rows = (db.session.query(KVKKAuditLog.application_id)
            .filter(KVKKAuditLog.action == action,
                    KVKKAuditLog.performed_at >= since,
                    KVKKAuditLog.application_id.isnot(None))
            .distinct()
            .all())
    return {row[0] for row in rows}


def exclude_already_notified(applications, notified_ids):
    return [a for a in applications if a.id not in notified_ids]


def _open_applications():
    return KVKKApplication.query.filter(KVKKApplication.status.in_(KVKKStatus.OPEN)).all()


def _admin_recipients():
    return list(current_app.config.get('KVKK_ADMIN_EMAILS') or [])


# ══════════════════════════════════════════════════════════════
# NOTIFICATIONS
# ══════════════════════════════════════════════════════════════

def _notify(applications, action, sender, now):
    """Send one batched notification and audit each application it covered"""
    recipients = _admin_recipients()
    if not recipients:
        logger.warning("KVKK_ADMIN_EMAILS is empty, KVKK notification skipped")
        return []

    delivered = sender(EmailService(), recipients, applications, now)
    if not delivered:
        logger.error(f"KVKK {action} could not be delivered to any recipient")
        return []

    for application in applications:
        KVKKAuditLog.log(
            action,
            application_id=application.id,
            details={
                'recipients': delivered,
                'response_deadline': application.response_deadline.isoformat(),
            },
            performed_at=now,
        )
    db.session.commit()
    return delivered


def check_and_notify_overdue_applications(now=None):
    now = now or utc_now_naive()
    overdue = select_overdue(_open_applications(), now)
    already = notified_application_ids(KVKKAuditAction.OVERDUE_NOTIFICATION_SENT, start_of_day(now))
    pending = exclude_already_notified(overdue, already)

    notified = []
    if pending:
        logger.info(f"Sending overdue notifications for {len(pending)} KVKK applications")
        delivered = _notify(
            pending,
            KVKKAuditAction.OVERDUE_NOTIFICATION_SENT,
            lambda service, to, apps, at: service.send_kvkk_overdue_alert(to, apps, at),
            now,
        )
        if delivered:
            notified = pending

    return {
        'overdue_count': len(overdue),
        'already_notified': len(overdue) - len(pending),
        'notified': len(notified),
        'application_ids': [a.id for a in notified],
    }


def check_and_send_reminders(now=None):
    now = now or utc_now_naive()
    due_soon = select_due_soon(_open_applications(), now)
    already = notified_application_ids(KVKKAuditAction.REMINDER_NOTIFICATION_SENT, now - REMINDER_DEDUP_WINDOW)
    pending = exclude_already_notified(due_soon, already)

    notified = []
    if pending:
        logger.info(f"Sending KVKK deadline reminders for {len(pending)} applications")
        delivered = _notify(
            pending,
            KVKKAuditAction.REMINDER_NOTIFICATION_SENT,
            lambda service, to, apps, at: service.send_kvkk_reminder(to, apps, at),
            now,
        )
        if delivered:
            notified = pending

    return {
        'due_soon_count': len(due_soon),
        'already_notified': len(due_soon) - len(pending),
        'notified': len(notified),
        'application_ids': [a.id for a in notified],
    }


def send_daily_compliance_report(now=None):
    now = now or utc_now_naive()
    already_sent = (KVKKAuditLog.query
                    .filter(KVKKAuditLog.action == KVKKAuditAction.COMPLIANCE_REPORT_SENT,
                            KVKKAuditLog.performed_at >= start_of_day(now))
                    .first())
    if already_sent:
        logger.info("Daily KVKK compliance report already sent today")
        return {'sent': False, 'reason': 'already_sent_today'}

    report = generate_automated_report(now=now)
    recipients = _admin_recipients()
    delivered = EmailService().send_kvkk_compliance_report(recipients, report) if recipients else []
    if not delivered:
        logger.error("Daily KVKK compliance report could not be delivered")
        return {'sent': False, 'reason': 'delivery_failed'}

    KVKKAuditLog.log(
        KVKKAuditAction.COMPLIANCE_REPORT_SENT,
        details={
            'recipients': delivered,
            'compliance_score': report['metrics']['compliance_score'],
            'risk_level': report['risk_level'],
        },
        performed_at=now,
    )
    db.session.commit()
    return {'sent': True, 'recipients': delivered, 'risk_level': report['risk_level']}


def is_daily_report_window(now):
    return now.hour == DAILY_REPORT_HOUR and now.minute < DAILY_REPORT_MINUTE_WINDOW


def run_automated_monitoring(now=None):
    """Full monitoring pass; intended to run every 30 minutes or hourly"""
    now = now or utc_now_naive()
    result = {
        'overdue': check_and_notify_overdue_applications(now),
        'reminders': check_and_send_reminders(now),
        'daily_report': None,
    }
    if is_daily_report_window(now):
        result['daily_report'] = send_daily_compliance_report(now)

    KVKKAuditLog.log(
        KVKKAuditAction.AUTOMATED_MONITORING_EXECUTED,
        details={
            'overdue_notified': result['overdue']['notified'],
            'reminders_sent': result['reminders']['notified'],
            'daily_report': bool(result['daily_report'] and result['daily_report'].get('sent')),
        },
        performed_at=now,
    )
    db.session.commit()
    logger.info("KVKK automated monitoring executed")
    return result


SCHEDULER_ACTIONS = {
    'check_overdue_applications': check_and_notify_overdue_applications,
    'check_reminder_applications': check_and_send_reminders,
    'send_daily_report': send_daily_compliance_report,
    'automated_monitoring': run_automated_monitoring,
}


def run_action(action, now=None):
    handler = SCHEDULER_ACTIONS.get(action)
    if handler is None:
        raise ValidationError(
            'Geçersiz işlem',
            details={'allowed_actions': sorted(SCHEDULER_ACTIONS)},
        )
    return handler(now)
