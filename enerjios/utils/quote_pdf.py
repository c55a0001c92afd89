# -*- coding: utf-8 -*-
"""
Quote PDF Generator
Renders a quote with its line items, totals and a QR code that links
to the customer's public quote page.
"""
from io import BytesIO
from xml.sax.saxutils import escape

import qrcode
from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Image, Table, TableStyle

from enerjios.utils.helpers import format_currency, format_date_tr


class QuotePDFGenerator:
    """Generate quote PDFs in memory."""

    def __init__(self):
        self.primary_color = colors.HexColor('#f59e0b')
        self.dark_color = colors.HexColor('#2c3e50')
        self.light_color = colors.HexColor('#f8f9fa')

        styles = getSampleStyleSheet()
        self.title_style = ParagraphStyle(
            'QuoteTitle', parent=styles['Title'], textColor=self.dark_color, fontSize=20
        )
        self.normal_style = styles['Normal']
        self.small_style = ParagraphStyle('Small', parent=styles['Normal'], fontSize=8,
                                          textColor=colors.grey)
        self.right_style = ParagraphStyle('Right', parent=styles['Normal'], alignment=TA_RIGHT)

    def generate_qr_code(self, url):
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=3,
            border=2,
        )
        qr.add_data(url)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        img.save(buffer, format='PNG')
        buffer.seek(0)
        return buffer

    def _header(self, quote):
        company = quote.company
        customer = quote.customer
        left = [
            Paragraph(f"<b>{escape(company.name) if company else ''}</b>", self.normal_style),
            Paragraph(escape((company.address or '') if company else ''), self.small_style),
            Paragraph(f"VKN: {company.tax_number or '-'}" if company else '', self.small_style),
        ]
        right = [
            Paragraph(f"<b>Teklif No:</b> {quote.quote_number}", self.right_style),
            Paragraph(f"<b>Tarih:</b> {format_date_tr(quote.created_at)}", self.right_style),
            Paragraph(f"<b>Geçerlilik:</b> {format_date_tr(quote.valid_until)}", self.right_style),
        ]
        if customer:
            right.append(Paragraph(f"<b>Müşteri:</b> {escape(customer.display_name)}", self.right_style))
        table = Table([[left, right]], colWidths=[9 * cm, 8 * cm])
        table.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
        return table

    def _items_table(self, quote):
        rows = [['#', 'Açıklama', 'Miktar', 'Birim Fiyat', 'Tutar']]
        for index, item in enumerate(quote.items, start=1):
            rows.append([
                str(index),
                Paragraph(escape(item.description), self.normal_style),
                f"{item.quantity:g}",
                format_currency(item.unit_price, quote.currency),
                format_currency(item.total, quote.currency),
            ])

        table = Table(rows, colWidths=[1 * cm, 8 * cm, 2 * cm, 3 * cm, 3 * cm], repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), self.primary_color),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('ALIGN', (2, 1), (-1, -1), 'RIGHT'),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, self.light_color]),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor('#dee2e6')),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]))
        return table

    def _totals_table(self, quote):
        rows = [
            ['Ara Toplam', format_currency(quote.subtotal, quote.currency)],
        ]
        if quote.discount:
            rows.append(['İndirim', f"-{format_currency(quote.discount, quote.currency)}"])
        rows.extend([
            [f"KDV (%{quote.tax_rate:g})", format_currency(quote.tax, quote.currency)],
            ['Genel Toplam', format_currency(quote.total, quote.currency)],
        ])
        table = Table(rows, colWidths=[4 * cm, 4 * cm], hAlign='RIGHT')
        table.setStyle(TableStyle([
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('LINEABOVE', (0, -1), (-1, -1), 1, self.dark_color),
        ]))
        return table

    def create_quote_pdf(self, quote, public_url=None):
        """
        Render a quote to PDF.

        Args:
            quote: Quote with items loaded
            public_url: customer-facing quote URL, embedded as a QR code

        Returns:
            bytes: PDF document
        """
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer, pagesize=A4,
            leftMargin=2 * cm, rightMargin=2 * cm, topMargin=2 * cm, bottomMargin=2 * cm,
            title=f"Teklif {quote.quote_number}",
        )

        story = [
            Paragraph(escape(quote.title or 'Güneş Enerjisi Sistemi Teklifi'), self.title_style),
            Spacer(1, 0.4 * cm),
            self._header(quote),
            Spacer(1, 0.8 * cm),
        ]
        if quote.system_size_kw:
            production = (f", tahmini yıllık üretim {quote.estimated_annual_production:,.0f} kWh"
                          if quote.estimated_annual_production else '')
            story.append(Paragraph(
                f"Sistem gücü: <b>{quote.system_size_kw:g} kWp</b>{production}", self.normal_style
            ))
            story.append(Spacer(1, 0.4 * cm))

        story.extend([
            self._items_table(quote),
            Spacer(1, 0.5 * cm),
            self._totals_table(quote),
        ])

        if quote.notes:
            story.extend([Spacer(1, 0.6 * cm), Paragraph(f"<b>Notlar:</b> {escape(quote.notes)}", self.normal_style)])
        if quote.terms:
            story.extend([Spacer(1, 0.3 * cm), Paragraph(f"<b>Şartlar:</b> {escape(quote.terms)}", self.small_style)])

        if public_url:
            story.extend([
                Spacer(1, 1 * cm),
                Image(self.generate_qr_code(public_url), width=3 * cm, height=3 * cm),
                Paragraph('Teklifi çevrimiçi görüntülemek ve onaylamak için kodu okutun.', self.small_style),
            ])

        doc.build(story)
        return buffer.getvalue()
