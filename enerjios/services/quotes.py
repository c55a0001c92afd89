# -*- coding: utf-8 -*-
"""
Quote lifecycle: building line items, the public customer view and
customer approval / rejection.
"""
import logging
from datetime import timedelta

from flask import current_app

from enerjios.extensions import db
from enerjios.models import (
    Notification, Product, ProjectStatus, Quote, QuoteItem, QuoteStatus,
)
from enerjios.services.email_service import EmailService
from enerjios.services.messaging import WhatsAppService
from enerjios.services.quote_scheduler import expire_if_needed, quote_action_url
from enerjios.utils.errors import GoneError, NotFoundError, ValidationError
from enerjios.utils.helpers import generate_number
from enerjios.utils.timezone import utc_now_naive, to_naive_utc

logger = logging.getLogger(__name__)


def build_items(quote, items_in, company_id):
    """Replace the quote's items; product prices fill in missing unit prices"""
    quote.items = []
    for item_in in items_in:
        product = None
        if item_in.product_id:
            product = db.session.get(Product, item_in.product_id)
            if product is None or (product.company_id not in (None, company_id)):
                raise NotFoundError('Ürün')

        unit_price = item_in.unit_price if item_in.unit_price is not None else (product.unit_price if product else None)
        description = item_in.description or (product.name if product else None)
        if unit_price is None or not description:
            raise ValidationError('Kalem için açıklama ve birim fiyat gerekli')

        quote.items.append(QuoteItem(
            product_id=product.id if product else None,
            description=description,
            quantity=item_in.quantity,
            unit_price=unit_price,
        ))
    quote.recalculate_totals()


def create_quote(data, company_id, user, now=None):
    now = now or utc_now_naive()
    config = current_app.config
    quote = Quote(
        quote_number=generate_number('TKL', now),
        company_id=company_id,
        customer_id=data.customer_id,
        project_id=data.project_id,
        created_by_id=user.id,
        title=data.title,
        notes=data.notes,
        terms=data.terms,
        currency=data.currency.upper(),
        discount=data.discount,
        tax_rate=data.tax_rate if data.tax_rate is not None else config['QUOTE_TAX_RATE'],
        system_size_kw=data.system_size_kw,
        estimated_annual_production=data.estimated_annual_production,
        valid_until=to_naive_utc(data.valid_until) or now + timedelta(days=config['QUOTE_VALIDITY_DAYS']),
        status=QuoteStatus.DRAFT,
    )
    build_items(quote, data.items, company_id)
    db.session.add(quote)
    db.session.commit()
    logger.info(f"Quote {quote.quote_number} created by user {user.id}")
    return quote


def get_quote_by_token(token):
    quote = Quote.query.filter_by(delivery_token=token).first()
    if quote is None:
        raise NotFoundError('Teklif')
    return quote


def view_public_quote(token, now=None):
    """
    Customer opens the quote link.

    An out-of-date quote expires here (410); a SENT quote becomes VIEWED.
    """
    now = now or utc_now_naive()
    quote = get_quote_by_token(token)

    if expire_if_needed(quote, now):
        db.session.commit()
    if quote.status == QuoteStatus.EXPIRED:
        raise GoneError('Bu teklifin geçerlilik süresi dolmuş')

    if quote.status == QuoteStatus.SENT:
        quote.status = QuoteStatus.VIEWED
        quote.viewed_at = now
        Notification.create(
            user_id=quote.created_by_id,
            type='QUOTE_VIEWED',
            title='Teklif Görüntülendi',
            message=f"{quote.quote_number} numaralı teklif müşteri tarafından görüntülendi.",
            action_url=quote_action_url(quote),
        )
        db.session.commit()

    return quote


def _ensure_answerable(quote, now):
    if expire_if_needed(quote, now):
        db.session.commit()
    if quote.status == QuoteStatus.EXPIRED:
        raise GoneError('Bu teklifin geçerlilik süresi dolmuş')
    if quote.status not in QuoteStatus.OPEN:
        raise ValidationError('Bu teklif artık yanıtlanamaz')


def _notify_customer(quote, customer_name, approved):
    """Best-effort confirmation to the customer; failures are only logged"""
    try:
        if quote.delivery_email:
            success, error = EmailService().send_quote_status_update(
                quote, quote.delivery_email, customer_name, approved
            )
            if not success:
                logger.warning(f"Quote status email for {quote.quote_number} failed: {error}")
        if quote.delivery_phone:
            success, error = WhatsAppService().send_quote_status_update(
                quote, quote.delivery_phone, customer_name, approved
            )
            if not success:
                logger.warning(f"Quote status WhatsApp for {quote.quote_number} failed: {error}")
    except Exception as e:
        logger.exception(f"Quote status notification failed for {quote.quote_number}: {e}")


def _notify_creator(quote, type_, title, message):
    try:
        Notification.create(
            user_id=quote.created_by_id,
            type=type_,
            title=title,
            message=message,
            action_url=quote_action_url(quote),
        )
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.exception(f"Creator notification failed for {quote.quote_number}: {e}")


def approve_quote(token, data, ip_address=None, user_agent=None, now=None):
    now = now or utc_now_naive()
    quote = get_quote_by_token(token)
    _ensure_answerable(quote, now)

    quote.status = QuoteStatus.APPROVED
    quote.approved_at = now
    quote.approved_by_name = data.customer_name
    quote.customer_comments = data.comments
    quote.customer_signature = data.signature
    quote.response_ip = ip_address
    quote.response_user_agent = (user_agent or '')[:500]
    if quote.project is not None:
        quote.project.status = ProjectStatus.IN_PROGRESS
    db.session.commit()
    logger.info(f"Quote {quote.quote_number} approved by customer")

    _notify_customer(quote, data.customer_name, approved=True)
    _notify_creator(
        quote, 'QUOTE_ACCEPTED', 'Teklif Onaylandı',
        f"{data.customer_name} {quote.quote_number} numaralı teklifi onayladı.",
    )
    return quote


def reject_quote(token, data, ip_address=None, user_agent=None, now=None):
    now = now or utc_now_naive()
    quote = get_quote_by_token(token)
    _ensure_answerable(quote, now)

    quote.status = QuoteStatus.REJECTED
    quote.rejected_at = now
    quote.customer_comments = data.reason
    quote.response_ip = ip_address
    quote.response_user_agent = (user_agent or '')[:500]
    db.session.commit()
    logger.info(f"Quote {quote.quote_number} rejected by customer")

    customer_name = data.customer_name or (quote.customer.display_name if quote.customer else 'Müşteri')
    _notify_customer(quote, customer_name, approved=False)
    _notify_creator(
        quote, 'QUOTE_REJECTED', 'Teklif Reddedildi',
        f"{quote.quote_number} numaralı teklif reddedildi."
        + (f" Gerekçe: {data.reason}" if data.reason else ''),
    )
    return quote
