# -*- coding: utf-8 -*-
"""
HTML Email Templates
Branded email templates for EnerjiOS
"""
from datetime import datetime
from html import escape

from enerjios.utils.helpers import format_currency, format_date_tr


class EmailTemplates:
    """HTML email template generator."""

    # Brand colors
    PRIMARY_COLOR = "#f59e0b"
    SECONDARY_COLOR = "#ea580c"
    SUCCESS_COLOR = "#16a34a"
    WARNING_COLOR = "#ca8a04"
    DANGER_COLOR = "#dc2626"

    @classmethod
    def _base_template(cls, content, footer_text="", brand="EnerjiOS"):
        """Base HTML template wrapper."""
        return f'''
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(brand)}</title>
</head>
<body style="margin: 0; padding: 0; font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background-color: #f4f4f4;">
    <table role="presentation" style="width: 100%; border-collapse: collapse;">
        <tr>
            <td align="center" style="padding: 40px 0;">
                <table role="presentation" style="width: 600px; border-collapse: collapse; background-color: #ffffff; border-radius: 8px;">
                    <tr>
                        <td style="background: linear-gradient(135deg, {cls.PRIMARY_COLOR} 0%, {cls.SECONDARY_COLOR} 100%); padding: 30px; border-radius: 8px 8px 0 0; text-align: center;">
                            <h1 style="color: #ffffff; margin: 0; font-size: 26px;">☀️ {escape(brand)}</h1>
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 40px 30px;">
                            {content}
                        </td>
                    </tr>
                    <tr>
                        <td style="background-color: #f8f9fa; padding: 20px 30px; border-radius: 0 0 8px 8px; text-align: center;">
                            <p style="color: #6c757d; font-size: 12px; margin: 0;">
                                {footer_text if footer_text else f"Bu e-posta {escape(brand)} tarafından gönderilmiştir."}
                            </p>
                            <p style="color: #6c757d; font-size: 12px; margin: 10px 0 0 0;">
                                © {datetime.now().year} {escape(brand)}. Tüm hakları saklıdır.
                            </p>
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
'''

    @classmethod
    def _button(cls, url, label, color=None):
        return f'''
<p style="text-align: center; margin: 30px 0;">
    <a href="{escape(url)}" style="background-color: {color or cls.PRIMARY_COLOR}; color: #ffffff; padding: 14px 28px; text-decoration: none; border-radius: 6px; font-weight: bold;">{escape(label)}</a>
</p>'''

    @classmethod
    def quote_delivery(cls, customer_name, quote, quote_url, company_name, message=None):
        content = f'''
<h2 style="color: #333; margin-top: 0;">Merhaba {escape(customer_name)},</h2>
<p style="color: #555; font-size: 16px; line-height: 1.6;">
    {escape(company_name)} sizin için <strong>{escape(quote.quote_number)}</strong> numaralı güneş enerjisi teklifini hazırladı.
</p>
{f'<p style="color: #555; font-style: italic;">{escape(message)}</p>' if message else ''}
<table style="width: 100%; border-collapse: collapse; margin: 20px 0;">
    <tr><td style="padding: 8px; color: #6c757d;">Toplam Tutar</td>
        <td style="padding: 8px; font-weight: bold; text-align: right;">{format_currency(quote.total, quote.currency)}</td></tr>
    <tr><td style="padding: 8px; color: #6c757d;">Sistem Gücü</td>
        <td style="padding: 8px; text-align: right;">{quote.system_size_kw or '-'} kWp</td></tr>
    <tr><td style="padding: 8px; color: #6c757d;">Geçerlilik</td>
        <td style="padding: 8px; text-align: right;">{format_date_tr(quote.valid_until)}</td></tr>
</table>
{cls._button(quote_url, 'Teklifi Görüntüle')}
<p style="color: #6c757d; font-size: 13px;">Teklifin PDF kopyası bu e-postanın ekindedir.</p>
'''
        return cls._base_template(content, brand=company_name)

    @classmethod
    def quote_status_update(cls, customer_name, quote, approved, company_name):
        if approved:
            headline = 'Teklifiniz onaylandı 🎉'
            body = 'Onayınız için teşekkür ederiz. Proje ekibimiz kurulum planlaması için en kısa sürede sizinle iletişime geçecek.'
            color = cls.SUCCESS_COLOR
        else:
            headline = 'Teklif yanıtınız alındı'
            body = 'Geri bildiriminiz için teşekkür ederiz. İhtiyaçlarınıza uygun yeni bir teklif için sizinle iletişime geçeceğiz.'
            color = cls.WARNING_COLOR
        content = f'''
<h2 style="color: {color}; margin-top: 0;">{headline}</h2>
<p style="color: #555; font-size: 16px; line-height: 1.6;">Sayın {escape(customer_name)},</p>
<p style="color: #555; font-size: 16px; line-height: 1.6;">
    <strong>{escape(quote.quote_number)}</strong> numaralı teklif için: {body}
</p>
'''
        return cls._base_template(content, brand=company_name)

    @classmethod
    def quote_expiry_warning(cls, customer_name, quote, quote_url, company_name):
        content = f'''
<h2 style="color: {cls.WARNING_COLOR}; margin-top: 0;">Teklifinizin süresi dolmak üzere</h2>
<p style="color: #555; font-size: 16px; line-height: 1.6;">
    Sayın {escape(customer_name)}, <strong>{escape(quote.quote_number)}</strong> numaralı teklifiniz
    {format_date_tr(quote.valid_until)} tarihinde geçerliliğini yitirecek.
</p>
{cls._button(quote_url, 'Teklifi İncele')}
'''
        return cls._base_template(content, brand=company_name)

    @classmethod
    def kvkk_overdue_alert(cls, applications, now):
        rows = ''.join(
            f'<tr><td style="padding: 6px;">{escape(app.application_no)}</td>'
            f'<td style="padding: 6px;">{escape(app.request_type)}</td>'
            f'<td style="padding: 6px;">{format_date_tr(app.response_deadline)}</td>'
            f'<td style="padding: 6px; color: {cls.DANGER_COLOR};">{(now - app.response_deadline).days} gün</td></tr>'
            for app in applications
        )
        content = f'''
<h2 style="color: {cls.DANGER_COLOR}; margin-top: 0;">⚠️ Süresi Geçmiş KVKK Başvuruları</h2>
<p style="color: #555;">Aşağıdaki başvurular için 30 günlük yasal yanıt süresi aşılmıştır.</p>
<table style="width: 100%; border-collapse: collapse;">
    <tr style="background: #f8f9fa;"><th>Başvuru No</th><th>Tür</th><th>Son Tarih</th><th>Gecikme</th></tr>
    {rows}
</table>
'''
        return cls._base_template(content)

    @classmethod
    def kvkk_reminder(cls, applications, now):
        rows = ''.join(
            f'<tr><td style="padding: 6px;">{escape(app.application_no)}</td>'
            f'<td style="padding: 6px;">{escape(app.request_type)}</td>'
            f'<td style="padding: 6px;">{format_date_tr(app.response_deadline)}</td>'
            f'<td style="padding: 6px;">{max(0, app.days_until_deadline(now))} gün</td></tr>'
            for app in applications
        )
        content = f'''
<h2 style="color: {cls.WARNING_COLOR}; margin-top: 0;">⏰ Yaklaşan KVKK Yanıt Süreleri</h2>
<p style="color: #555;">Aşağıdaki başvuruların yanıt süresi 7 gün içinde doluyor.</p>
<table style="width: 100%; border-collapse: collapse;">
    <tr style="background: #f8f9fa;"><th>Başvuru No</th><th>Tür</th><th>Son Tarih</th><th>Kalan</th></tr>
    {rows}
</table>
'''
        return cls._base_template(content)

    @classmethod
    def kvkk_compliance_report(cls, report):
        metrics = report['metrics']
        recommendations = ''.join(f'<li>{escape(item)}</li>' for item in report['recommendations'])
        content = f'''
<h2 style="color: #333; margin-top: 0;">📊 Günlük KVKK Uyum Raporu</h2>
<table style="width: 100%; border-collapse: collapse;">
    <tr><td style="padding: 6px;">Uyum Skoru</td><td style="padding: 6px; font-weight: bold;">{metrics['compliance_score']}</td></tr>
    <tr><td style="padding: 6px;">Risk Seviyesi</td><td style="padding: 6px;">{report['risk_level']}</td></tr>
    <tr><td style="padding: 6px;">Toplam Başvuru</td><td style="padding: 6px;">{metrics['total_applications']}</td></tr>
    <tr><td style="padding: 6px;">Bekleyen</td><td style="padding: 6px;">{metrics['pending_applications']}</td></tr>
    <tr><td style="padding: 6px;">Süresi Geçmiş</td><td style="padding: 6px;">{metrics['overdue_applications']}</td></tr>
    <tr><td style="padding: 6px;">Ortalama Yanıt (gün)</td><td style="padding: 6px;">{metrics['average_response_days']}</td></tr>
</table>
<h3>Öneriler</h3>
<ul>{recommendations}</ul>
'''
        return cls._base_template(content)

    @classmethod
    def kvkk_application_received(cls, full_name, application_no, deadline):
        content = f'''
<h2 style="color: #333; margin-top: 0;">Başvurunuz alındı</h2>
<p style="color: #555; font-size: 16px; line-height: 1.6;">Sayın {escape(full_name)},</p>
<p style="color: #555; font-size: 16px; line-height: 1.6;">
    6698 sayılı KVKK kapsamındaki başvurunuz <strong>{escape(application_no)}</strong> numarası ile kayıt altına alınmıştır.
    Başvurunuz en geç {format_date_tr(deadline)} tarihine kadar yanıtlanacaktır.
</p>
'''
        return cls._base_template(content)

    @classmethod
    def photo_request(cls, customer_name, upload_url, company_name, message=None, expires_at=None):
        content = f'''
<h2 style="color: #333; margin-top: 0;">Merhaba {escape(customer_name)},</h2>
<p style="color: #555; font-size: 16px; line-height: 1.6;">
    Güneş enerjisi sisteminizi doğru tasarlayabilmemiz için çatınızın ve elektrik panonuzun fotoğraflarına ihtiyacımız var.
</p>
{f'<p style="color: #555; font-style: italic;">{escape(message)}</p>' if message else ''}
{cls._button(upload_url, 'Fotoğraf Yükle')}
<p style="color: #6c757d; font-size: 13px;">Bağlantı {format_date_tr(expires_at)} tarihine kadar geçerlidir.</p>
'''
        return cls._base_template(content, brand=company_name)
