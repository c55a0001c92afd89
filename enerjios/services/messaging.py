# -*- coding: utf-8 -*-
"""
Messaging Services - WhatsApp and SMS gateways over HTTP
"""
import re
import logging

import requests
from flask import current_app

from enerjios.utils.helpers import format_currency, format_date_tr

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 15


def format_phone_number(phone):
    """
    Normalize a Turkish phone number to 90XXXXXXXXXX.

    Non-digits are stripped, a leading trunk 0 is replaced with the
    country code, and 90 is prefixed when missing.
    """
    if not phone:
        return ''
    digits = re.sub(r'\D', '', phone)
    if not digits:
        return ''
    if digits.startswith('0'):
        return '90' + digits[1:]
    if not digits.startswith('90'):
        return '90' + digits
    return digits


class _HttpGateway:
    """Shared JSON-over-HTTP sender"""
    url_key = None
    api_key_key = None
    name = 'gateway'

    def __init__(self):
        self.api_url = current_app.config.get(self.url_key)
        self.api_key = current_app.config.get(self.api_key_key)

    @property
    def is_configured(self):
        return bool(self.api_url and self.api_key)

    def _post(self, payload):
        """
        Returns:
            tuple: (success: bool, error: str or None)
        """
        if not self.is_configured:
            logger.warning(f"{self.name} not configured, message skipped")
            return False, f"{self.name} servisi yapılandırılmamış"

        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json',
                },
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(f"{self.name} request failed: {e}")
            return False, str(e)

        if not response.ok:
            logger.error(f"{self.name} API error {response.status_code}: {response.text[:200]}")
            return False, f"{self.name} API hatası ({response.status_code})"

        return True, None


class WhatsAppService(_HttpGateway):
    url_key = 'WHATSAPP_API_URL'
    api_key_key = 'WHATSAPP_API_KEY'
    name = 'WhatsApp'

    def send_message(self, phone, message):
        formatted = format_phone_number(phone)
        if not formatted:
            return False, 'Geçersiz telefon numarası'
        success, error = self._post({'phone': formatted, 'message': message, 'type': 'text'})
        if success:
            logger.info(f"WhatsApp message sent to {formatted}")
        return success, error

    def send_quote(self, quote, phone, customer_name, quote_url, message=None):
        company_name = quote.company.name if quote.company else 'EnerjiOS'
        text = (
            f"Merhaba {customer_name},\n\n"
            f"{company_name} tarafından hazırlanan {quote.quote_number} numaralı güneş enerjisi teklifiniz hazır.\n"
            f"💰 Toplam: {format_currency(quote.total, quote.currency)}\n"
            f"📅 Geçerlilik: {format_date_tr(quote.valid_until)}\n"
        )
        if message:
            text += f"\n{message}\n"
        text += f"\nTeklifi görüntülemek için: {quote_url}"
        return self.send_message(phone, text)

    def send_quote_status_update(self, quote, phone, customer_name, approved):
        if approved:
            text = (f"Sayın {customer_name}, {quote.quote_number} numaralı teklifi onayladığınız için "
                    f"teşekkür ederiz. Ekibimiz kurulum planlaması için sizinle iletişime geçecek. ☀️")
        else:
            text = (f"Sayın {customer_name}, {quote.quote_number} numaralı teklif için yanıtınız alındı. "
                    f"Size uygun yeni bir teklif için iletişime geçeceğiz.")
        return self.send_message(phone, text)


class SmsService(_HttpGateway):
    url_key = 'SMS_API_URL'
    api_key_key = 'SMS_API_KEY'
    name = 'SMS'

    # Single-part SMS limit for Turkish characters is lower; keep messages short
    MAX_LENGTH = 320

    def send_sms(self, phone, message):
        formatted = format_phone_number(phone)
        if not formatted:
            return False, 'Geçersiz telefon numarası'
        success, error = self._post({
            'to': formatted,
            'sender': current_app.config.get('SMS_SENDER'),
            'message': message[:self.MAX_LENGTH],
        })
        if success:
            logger.info(f"SMS sent to {formatted}")
        return success, error

    def send_quote(self, quote, phone, customer_name, quote_url):
        text = (f"Sayin {customer_name}, {quote.quote_number} nolu gunes enerjisi teklifiniz hazir. "
                f"Toplam: {format_currency(quote.total, quote.currency)}. Goruntule: {quote_url}")
        return self.send_sms(phone, text)
