# -*- coding: utf-8 -*-
"""
Quote Delivery
Sends a DRAFT quote to the customer over one or more channels.

Each channel is attempted independently; one failing channel never
prevents the others. The quote counts as sent when at least one
channel succeeded.
"""
import logging
from collections import namedtuple

from flask import current_app

from enerjios.extensions import db
from enerjios.models import QuoteStatus
from enerjios.services.email_service import EmailService
from enerjios.services.messaging import WhatsAppService, SmsService
from enerjios.utils.errors import AuthorizationError, ValidationError
from enerjios.utils.quote_pdf import QuotePDFGenerator
from enerjios.utils.security import generate_token
from enerjios.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)

CHANNEL_EMAIL = 'EMAIL'
CHANNEL_WHATSAPP = 'WHATSAPP'
CHANNEL_SMS = 'SMS'

DeliveryReport = namedtuple('DeliveryReport', 'results success')


def public_quote_url(token):
    return f"{current_app.config['APP_URL'].rstrip('/')}/quotes/view/{token}"


def summarize_results(results):
    """Overall success is true when any channel succeeded"""
    return DeliveryReport(results, any(r['success'] for r in results))


def _attempt(channel, send):
    try:
        success, error = send()
    except Exception as e:
        logger.exception(f"Quote delivery via {channel} raised: {e}")
        success, error = False, str(e)
    return {'channel': channel, 'success': bool(success), 'error': None if success else error}


def deliver_quote(quote, channels, sender, email=None, phone=None, name=None, message=None, now=None):
    """
    Deliver a quote over the requested channels.

    Raises:
        ValidationError: quote is not DRAFT or no contact address is known
        AuthorizationError: sender did not create the quote
    """
    now = now or utc_now_naive()

    if quote.created_by_id != sender.id:
        raise AuthorizationError('Sadece teklifi oluşturan kullanıcı gönderebilir')
    if quote.status != QuoteStatus.DRAFT:
        raise ValidationError('Sadece taslak teklifler gönderilebilir')

    customer = quote.customer
    email = email or (customer.email if customer else None)
    phone = phone or (customer.phone if customer else None)
    name = name or (customer.display_name if customer else None) or 'Değerli Müşterimiz'

    if not email and not phone:
        raise ValidationError('Gönderim için e-posta adresi veya telefon numarası gerekli')

    token = quote.delivery_token or generate_token()
    url = public_quote_url(token)

    results = []
    for channel in channels:
        if channel == CHANNEL_EMAIL:
            if not email:
                results.append({'channel': channel, 'success': False, 'error': 'E-posta adresi bulunamadı'})
                continue
            results.append(_attempt(channel, lambda: EmailService().send_quote(
                quote, email, name, url, message,
                pdf_bytes=QuotePDFGenerator().create_quote_pdf(quote, url),
            )))
        elif channel == CHANNEL_WHATSAPP:
            if not phone:
                results.append({'channel': channel, 'success': False, 'error': 'Telefon numarası bulunamadı'})
                continue
            results.append(_attempt(channel, lambda: WhatsAppService().send_quote(
                quote, phone, name, url, message
            )))
        elif channel == CHANNEL_SMS:
            if not phone:
                results.append({'channel': channel, 'success': False, 'error': 'Telefon numarası bulunamadı'})
                continue
            results.append(_attempt(channel, lambda: SmsService().send_quote(quote, phone, name, url)))
        else:
            results.append({'channel': channel, 'success': False, 'error': 'Desteklenmeyen kanal'})

    report = summarize_results(results)

    if report.success:
        quote.delivery_token = token
        quote.status = QuoteStatus.SENT
        quote.sent_at = now
        quote.delivery_channel = ','.join(r['channel'] for r in results if r['success'])
        quote.delivery_email = email
        quote.delivery_phone = phone
        db.session.commit()
        logger.info(f"Quote {quote.quote_number} sent via {quote.delivery_channel}")
    else:
        logger.warning(f"Quote {quote.quote_number} could not be delivered on any channel")

    return report
