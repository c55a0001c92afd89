# -*- coding: utf-8 -*-
"""
Quote Scheduler
Periodic quote housekeeping: expiry, expiry warnings, follow-up
reminders, notification cleanup and conversion analytics.
"""
import logging
from datetime import timedelta

from sqlalchemy import update

from enerjios.extensions import db
from enerjios.models import Notification, Quote, QuoteStatus
from enerjios.services.email_service import EmailService
from enerjios.services.quote_delivery import public_quote_url
from enerjios.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)

EXPIRY_WARNING_WINDOW = timedelta(days=2)
PENDING_REMINDER_AFTER = timedelta(days=7)
NOTIFICATION_DEDUP_WINDOW = timedelta(hours=24)
NOTIFICATION_RETENTION = timedelta(days=30)
ANALYTICS_WINDOW = timedelta(days=30)


def quote_action_url(quote):
    return f"/dashboard/quotes/{quote.id}"


def expire_if_needed(quote, now=None):
    """
    Move a SENT/VIEWED quote past its validity to EXPIRED.

    The transition is a conditional UPDATE, so concurrent readers and
    the scheduler expire a quote exactly once. Caller commits.

    Returns:
        True if this call expired the quote
    """
    now = now or utc_now_naive()
    if quote.status not in QuoteStatus.OPEN or not quote.is_past_validity(now):
        return False

    result = db.session.execute(
        update(Quote)
        .where(Quote.id == quote.id,
               Quote.status.in_(QuoteStatus.OPEN),
               Quote.valid_until < now)
        .values(status=QuoteStatus.EXPIRED, expired_at=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return False

    quote.status = QuoteStatus.EXPIRED
    quote.expired_at = now
    Notification.create(
        user_id=quote.created_by_id,
        type='QUOTE_EXPIRED',
        title='Teklif Süresi Doldu',
        message=f"{quote.quote_number} numaralı teklifin geçerlilik süresi doldu.",
        action_url=quote_action_url(quote),
    )
    logger.info(f"Quote {quote.quote_number} expired")
    return True


def check_expired_quotes(now=None):
    now = now or utc_now_naive()
    candidates = Quote.query.filter(
        Quote.status.in_(QuoteStatus.OPEN),
        Quote.valid_until.isnot(None),
        Quote.valid_until < now,
    ).all()

    expired = [quote.id for quote in candidates if expire_if_needed(quote, now)]
    db.session.commit()
    return {'expired': len(expired), 'quote_ids': expired}


def _recently_notified(quote, notification_type, now):
    return Notification.query.filter(
        Notification.user_id == quote.created_by_id,
        Notification.type == notification_type,
        Notification.action_url == quote_action_url(quote),
        Notification.created_at >= now - NOTIFICATION_DEDUP_WINDOW,
    ).first() is not None


def send_expiry_warnings(now=None):
    """Warn creator and customer about quotes expiring in the next two days"""
    now = now or utc_now_naive()
    quotes = Quote.query.filter(
        Quote.status.in_(QuoteStatus.OPEN),
        Quote.valid_until > now,
        Quote.valid_until <= now + EXPIRY_WARNING_WINDOW,
    ).all()

    warned = []
    for quote in quotes:
        if _recently_notified(quote, 'QUOTE_EXPIRING', now):
            continue

        Notification.create(
            user_id=quote.created_by_id,
            type='QUOTE_EXPIRING',
            title='Teklif Süresi Doluyor',
            message=f"{quote.quote_number} numaralı teklifin süresi "
                    f"{quote.valid_until.strftime('%d.%m.%Y')} tarihinde doluyor.",
            action_url=quote_action_url(quote),
        )
        if quote.delivery_email and quote.delivery_token:
            customer_name = quote.customer.display_name if quote.customer else 'Değerli Müşterimiz'
            success, error = EmailService().send_quote_expiry_warning(
                quote, quote.delivery_email, customer_name, public_quote_url(quote.delivery_token)
            )
            if not success:
                logger.warning(f"Expiry warning email for {quote.quote_number} failed: {error}")
        warned.append(quote.id)

    db.session.commit()
    return {'warned': len(warned), 'quote_ids': warned}


def send_pending_quote_reminders(now=None):
    """Remind creators of quotes viewed a week ago without an answer"""
    now = now or utc_now_naive()
    quotes = Quote.query.filter(
        Quote.status == QuoteStatus.VIEWED,
        Quote.viewed_at <= now - PENDING_REMINDER_AFTER,
        db.or_(Quote.valid_until.is_(None), Quote.valid_until > now),
    ).all()

    reminded = []
    for quote in quotes:
        if _recently_notified(quote, 'QUOTE_FOLLOW_UP', now):
            continue
        days = (now - quote.viewed_at).days
        Notification.create(
            user_id=quote.created_by_id,
            type='QUOTE_FOLLOW_UP',
            title='Teklif Takibi',
            message=f"{quote.quote_number} numaralı teklif {days} gündür yanıt bekliyor. "
                    f"Müşteriyle iletişime geçmeyi düşünün.",
            action_url=quote_action_url(quote),
        )
        reminded.append(quote.id)

    db.session.commit()
    return {'reminded': len(reminded), 'quote_ids': reminded}


def cleanup_old_notifications(now=None):
    """Delete read notifications older than 30 days"""
    now = now or utc_now_naive()
    deleted = Notification.query.filter(
        Notification.read.is_(True),
        Notification.created_at < now - NOTIFICATION_RETENTION,
    ).delete(synchronize_session=False)
    db.session.commit()
    logger.info(f"Deleted {deleted} old notifications")
    return {'deleted': deleted}


def generate_quote_analytics(now=None, company_id=None):
    """Counts by status and conversion rate for quotes created in the last 30 days"""
    now = now or utc_now_naive()
    query = Quote.query.filter(Quote.created_at >= now - ANALYTICS_WINDOW)
    if company_id:
        query = query.filter(Quote.company_id == company_id)
    quotes = query.all()

    by_status = {status: 0 for status in (
        QuoteStatus.DRAFT, QuoteStatus.SENT, QuoteStatus.VIEWED,
        QuoteStatus.APPROVED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED,
    )}
    for quote in quotes:
        by_status[quote.status] = by_status.get(quote.status, 0) + 1

    sent = len(quotes) - by_status[QuoteStatus.DRAFT]
    approved = [q for q in quotes if q.status == QuoteStatus.APPROVED]
    approved_value = round(sum(q.total or 0 for q in approved), 2)

    return {
        'period_days': ANALYTICS_WINDOW.days,
        'total_quotes': len(quotes),
        'by_status': by_status,
        'sent_quotes': sent,
        'conversion_rate': round(len(approved) / sent * 100, 1) if sent else 0.0,
        'approved_value': approved_value,
        'average_quote_value': round(sum(q.total or 0 for q in quotes) / len(quotes), 2) if quotes else 0.0,
    }


SCHEDULED_TASKS = {
    'expired': check_expired_quotes,
    'warnings': send_expiry_warnings,
    'reminders': send_pending_quote_reminders,
    'cleanup': cleanup_old_notifications,
    'analytics': generate_quote_analytics,
}


def run_scheduled_tasks(now=None):
    """Run every quote task; one failing task does not stop the rest"""
    now = now or utc_now_naive()
    results = {}
    for name, task in SCHEDULED_TASKS.items():
        try:
            results[name] = task(now)
        except Exception as e:
            db.session.rollback()
            logger.exception(f"Quote scheduler task '{name}' failed: {e}")
            results[name] = {'error': str(e)}
    return results
