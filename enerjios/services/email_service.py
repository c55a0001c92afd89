# -*- coding: utf-8 -*-
"""
Email Service - SMTP Integration
Handles all outbound email for EnerjiOS
"""
import re
import smtplib
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.mime.application import MIMEApplication

from flask import current_app

from enerjios.utils.email_templates import EmailTemplates

logger = logging.getLogger(__name__)


class EmailService:
    """Email service using the configured SMTP relay"""

    def __init__(self, sender_name=None):
        config = current_app.config
        self.host = config.get('SMTP_HOST')
        self.port = config.get('SMTP_PORT', 587)
        self.user = config.get('SMTP_USER')
        self.password = config.get('SMTP_PASS')
        self.from_email = config.get('SMTP_FROM')
        self.sender_name = sender_name or config.get('COMPANY_NAME', 'EnerjiOS')

    @property
    def is_configured(self):
        return bool(self.host and self.user and self.password)

    def send_email(self, to_email, subject, html_content, text_content=None, attachments=None):
        """
        Send an email via SMTP.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML body content
            text_content: Plain text body (optional, derived from HTML if omitted)
            attachments: List of (filename, bytes) tuples (optional)

        Returns:
            tuple: (success: bool, message: str)
        """
        if not self.is_configured:
            logger.warning(f"SMTP not configured, email to {to_email} skipped")
            return False, "E-posta servisi yapılandırılmamış"

        try:
            msg = MIMEMultipart('mixed')
            msg['Subject'] = subject
            msg['From'] = f"{self.sender_name} <{self.from_email}>"
            msg['To'] = to_email

            if not text_content:
                text_content = re.sub('<[^>]+>', '', html_content)

            body = MIMEMultipart('alternative')
            body.attach(MIMEText(text_content, 'plain', 'utf-8'))
            body.attach(MIMEText(html_content, 'html', 'utf-8'))
            msg.attach(body)

            for filename, payload in attachments or []:
                part = MIMEApplication(payload, Name=filename)
                part.add_header('Content-Disposition', f'attachment; filename="{filename}"')
                msg.attach(part)

            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                server.starttls()
                server.login(self.user, self.password)
                server.send_message(msg)

            logger.info(f"Email sent successfully to {to_email}")
            return True, "E-posta gönderildi"

        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP auth error: {e}")
            return False, "SMTP kimlik doğrulama hatası"
        except smtplib.SMTPException as e:
            logger.error(f"SMTP error: {e}")
            return False, f"SMTP hatası: {str(e)}"
        except OSError as e:
            logger.error(f"Email connection error: {e}")
            return False, f"E-posta hatası: {str(e)}"

    def send_to_many(self, recipients, subject, html_content):
        """
        Send the same email to several recipients.

        Returns:
            list of recipients that were reached
        """
        delivered = []
        for recipient in recipients:
            success, _ = self.send_email(recipient, subject, html_content)
            if success:
                delivered.append(recipient)
        return delivered

    # ══════════════════════════════════════════════════════════════
    # QUOTES
    # ══════════════════════════════════════════════════════════════

    def send_quote(self, quote, to_email, customer_name, quote_url, message=None, pdf_bytes=None):
        company_name = quote.company.name if quote.company else self.sender_name
        html = EmailTemplates.quote_delivery(customer_name, quote, quote_url, company_name, message)
        attachments = [(f"{quote.quote_number}.pdf", pdf_bytes)] if pdf_bytes else None
        return self.send_email(
            to_email,
            f"Güneş Enerjisi Teklifiniz - {quote.quote_number}",
            html,
            attachments=attachments,
        )

    def send_quote_status_update(self, quote, to_email, customer_name, approved):
        company_name = quote.company.name if quote.company else self.sender_name
        html = EmailTemplates.quote_status_update(customer_name, quote, approved, company_name)
        subject = 'Teklifiniz Onaylandı' if approved else 'Teklif Yanıtınız Alındı'
        return self.send_email(to_email, f"{subject} - {quote.quote_number}", html)

    def send_quote_expiry_warning(self, quote, to_email, customer_name, quote_url):
        company_name = quote.company.name if quote.company else self.sender_name
        html = EmailTemplates.quote_expiry_warning(customer_name, quote, quote_url, company_name)
        return self.send_email(to_email, f"Teklifinizin Süresi Doluyor - {quote.quote_number}", html)

    # ══════════════════════════════════════════════════════════════
    # KVKK
    # ══════════════════════════════════════════════════════════════

    def send_kvkk_overdue_alert(self, recipients, applications, now):
        html = EmailTemplates.kvkk_overdue_alert(applications, now)
        return self.send_to_many(
            recipients, f"🚨 KVKK: {len(applications)} başvurunun yanıt süresi geçti", html
        )

    def send_kvkk_reminder(self, recipients, applications, now):
        html = EmailTemplates.kvkk_reminder(applications, now)
        return self.send_to_many(
            recipients, f"⏰ KVKK: {len(applications)} başvurunun yanıt süresi yaklaşıyor", html
        )

    def send_kvkk_compliance_report(self, recipients, report):
        html = EmailTemplates.kvkk_compliance_report(report)
        return self.send_to_many(recipients, "📊 Günlük KVKK Uyum Raporu", html)

    def send_kvkk_application_received(self, application):
        html = EmailTemplates.kvkk_application_received(
            application.full_name, application.application_no, application.response_deadline
        )
        return self.send_email(
            application.email, f"KVKK Başvurunuz Alındı - {application.application_no}", html
        )

    # ══════════════════════════════════════════════════════════════
    # PHOTO REQUESTS
    # ══════════════════════════════════════════════════════════════

    def send_photo_request(self, photo_request, upload_url, company_name):
        html = EmailTemplates.photo_request(
            photo_request.customer_name, upload_url, company_name,
            photo_request.message, photo_request.expires_at,
        )
        return self.send_email(
            photo_request.customer_email, f"{company_name} - Fotoğraf Talebi", html
        )
