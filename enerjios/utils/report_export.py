# -*- coding: utf-8 -*-
"""
Report Export Utilities
Export tabular reports to CSV or Excel
"""
import csv
import io
from datetime import date, datetime

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side, Alignment


# Report definitions: (header, row key)
QUOTE_COLUMNS = [
    ('Teklif No', 'quote_number'),
    ('Başlık', 'title'),
    ('Durum', 'status'),
    ('Para Birimi', 'currency'),
    ('Ara Toplam', 'subtotal'),
    ('İndirim', 'discount'),
    ('KDV', 'tax'),
    ('Toplam', 'total'),
    ('Geçerlilik', 'valid_until'),
    ('Gönderim', 'sent_at'),
    ('Oluşturulma', 'created_at'),
]

LEAVE_BALANCE_COLUMNS = [
    ('Personel', 'employee_name'),
    ('Departman', 'department'),
    ('İşe Giriş', 'hire_date'),
    ('Kıdem (Yıl)', 'years_of_service'),
    ('Yıllık İzin Hakkı', 'vacation_total'),
    ('Kullanılan', 'vacation_used'),
    ('Bekleyen', 'vacation_pending'),
    ('Kalan', 'vacation_remaining'),
    ('Hastalık İzni', 'sick_used'),
    ('Mazeret İzni', 'personal_used'),
]

KVKK_COLUMNS = [
    ('Başvuru No', 'application_no'),
    ('Talep Türü', 'request_type'),
    ('Durum', 'status'),
    ('Başvuran', 'full_name'),
    ('Başvuru Tarihi', 'submitted_at'),
    ('Yasal Süre Sonu', 'response_deadline'),
    ('Sonuçlanma', 'processed_at'),
]


def flatten_leave_balance(balance):
    """Leave balance dict -> one flat export row"""
    return {
        'employee_name': balance['employee_name'],
        'department': balance['department'],
        'hire_date': balance['hire_date'],
        'years_of_service': balance['years_of_service'],
        'vacation_total': balance['vacation']['total'],
        'vacation_used': balance['vacation']['used'],
        'vacation_pending': balance['vacation']['pending'],
        'vacation_remaining': balance['vacation']['remaining'],
        'sick_used': balance['sick']['used'],
        'personal_used': balance['personal']['used'],
    }


def _cell_value(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None:
        return ''
    return value


def export_csv(rows, columns):
    """
    Render rows as CSV.

    Returns:
        bytes: UTF-8 with BOM so Excel opens Turkish characters correctly
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=';')
    writer.writerow([header for header, _ in columns])
    for row in rows:
        writer.writerow([_cell_value(row.get(key)) for _, key in columns])
    return buffer.getvalue().encode('utf-8-sig')


class ExcelExporter:
    """Export data to formatted Excel workbooks."""

    HEADER_COLOR = "F59E0B"
    HEADER_FONT_COLOR = "FFFFFF"
    ALT_ROW_COLOR = "FFF7E6"
    BORDER_COLOR = "DEE2E6"

    def __init__(self):
        self.wb = Workbook()
        self.ws = self.wb.active
        self._setup_styles()

    def _setup_styles(self):
        self.header_fill = PatternFill(
            start_color=self.HEADER_COLOR,
            end_color=self.HEADER_COLOR,
            fill_type="solid"
        )
        self.header_font = Font(color=self.HEADER_FONT_COLOR, bold=True, size=11)
        self.alt_fill = PatternFill(
            start_color=self.ALT_ROW_COLOR,
            end_color=self.ALT_ROW_COLOR,
            fill_type="solid"
        )
        side = Side(style='thin', color=self.BORDER_COLOR)
        self.thin_border = Border(left=side, right=side, top=side, bottom=side)
        self.center_align = Alignment(horizontal='center', vertical='center')
        self.left_align = Alignment(horizontal='left', vertical='center')

    def _apply_header_style(self, row):
        for cell in row:
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = self.center_align
            cell.border = self.thin_border

    def _apply_data_style(self, row, row_num):
        for cell in row:
            if row_num % 2 == 0:
                cell.fill = self.alt_fill
            cell.border = self.thin_border
            cell.alignment = self.left_align

    def _auto_width(self, ws):
        """Column width follows the longest value, capped at 50"""
        for column in ws.columns:
            longest = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
            ws.column_dimensions[column[0].column_letter].width = min(longest + 2, 50)

    def export(self, rows, columns, title='Rapor'):
        """
        Write rows to a single sheet.

        Returns:
            bytes: the .xlsx file content
        """
        ws = self.ws
        ws.title = title[:31]

        ws.append([header for header, _ in columns])
        self._apply_header_style(ws[1])

        for i, row in enumerate(rows, 2):
            ws.append([_cell_value(row.get(key)) for _, key in columns])
            self._apply_data_style(ws[i], i)

        self._auto_width(ws)
        ws.freeze_panes = 'A2'

        output = io.BytesIO()
        self.wb.save(output)
        return output.getvalue()
