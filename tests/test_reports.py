# -*- coding: utf-8 -*-
"""
Tests for CSV / Excel report exports
"""
import io
from datetime import timedelta

from openpyxl import load_workbook

from enerjios.models import AuditLog, KVKKApplication, QuoteStatus
from enerjios.utils.report_export import QUOTE_COLUMNS, export_csv
from enerjios.utils.timezone import utc_now_naive


def _csv_lines(response):
    return response.data.decode('utf-8-sig').strip().splitlines()


class TestExportHelpers:
    """Rendering without HTTP"""

    def test_csv_uses_semicolon_and_bom(self):
        content = export_csv([{'quote_number': 'TKL-1', 'title': 'Çatı; GES', 'total': 10.5}], QUOTE_COLUMNS)

        assert content.startswith(b'\xef\xbb\xbf')
        lines = content.decode('utf-8-sig').splitlines()
        assert lines[0].split(';')[:2] == ['Teklif No', 'Başlık']
        assert lines[1].startswith('TKL-1;"Çatı; GES";')


class TestQuoteExport:
    """Quotes export is scoped to the user's company"""

    def test_csv_export(self, client, company, other_company, company_user, make_quote, auth_headers):
        make_quote(company, company_user)
        make_quote(company, company_user, status=QuoteStatus.APPROVED)
        make_quote(other_company, company_user)

        response = client.get('/api/reports/quotes', headers=auth_headers(company_user))

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert 'attachment; filename=teklifler_' in response.headers['Content-Disposition']
        assert len(_csv_lines(response)) == 3

        log = AuditLog.query.filter_by(action='data_export').one()
        assert log.table_name == 'quotes'
        assert log.description == 'Exported 2 records from quotes'

    def test_status_filter(self, client, company, company_user, make_quote, auth_headers):
        make_quote(company, company_user)
        make_quote(company, company_user, status=QuoteStatus.APPROVED)

        response = client.get('/api/reports/quotes?status=approved', headers=auth_headers(company_user))
        lines = _csv_lines(response)
        assert len(lines) == 2
        assert ';APPROVED;' in lines[1]

    def test_xlsx_export(self, client, company, company_user, make_quote, auth_headers):
        make_quote(company, company_user)

        response = client.get('/api/reports/quotes?format=xlsx', headers=auth_headers(company_user))

        assert response.status_code == 200
        sheet = load_workbook(io.BytesIO(response.data)).active
        assert sheet.title == 'Teklifler'
        assert sheet['A1'].value == 'Teklif No'
        assert sheet['H2'].value == 108000
        assert sheet.max_row == 2

    def test_unknown_format(self, client, company_user, auth_headers):
        response = client.get('/api/reports/quotes?format=pdf', headers=auth_headers(company_user))
        assert response.status_code == 400
        assert response.get_json()['details']['valid_formats'] == ['csv', 'xlsx']
        assert AuditLog.query.filter_by(action='data_export').count() == 0


class TestLeaveAndKVKKExport:
    """Leave balances for managers, KVKK applications for admins"""

    def test_leave_balances(self, client, company_user, employee_user, auth_headers):
        response = client.get('/api/reports/leave-balances?year=2030', headers=auth_headers(company_user))

        assert response.status_code == 200
        assert 'izin_bakiyeleri_2030_' in response.headers['Content-Disposition']
        lines = _csv_lines(response)
        assert len(lines) == 2
        row = lines[1].split(';')
        assert row[1] == 'Saha Ekibi'
        assert row[4] == '35'

    def test_employees_cannot_export_leave_balances(self, client, employee_user, auth_headers):
        response = client.get('/api/reports/leave-balances', headers=auth_headers(employee_user))
        assert response.status_code == 403

    def test_kvkk_export_hides_identity_numbers(self, client, db_session, admin_user, auth_headers):
        submitted = utc_now_naive() - timedelta(days=2)
        db_session.add(KVKKApplication(
            application_no='KVKK-R-1', request_type='DATA_ACCESS', status='PENDING',
            full_name='Zeynep Kaya', tc_no='12345678901', email='zeynep@example.com',
            details='Verilerimi görmek istiyorum.', submitted_at=submitted,
            response_deadline=submitted + timedelta(days=30),
        ))
        db_session.commit()

        response = client.get('/api/reports/kvkk-applications', headers=auth_headers(admin_user))

        assert response.status_code == 200
        text = response.data.decode('utf-8-sig')
        assert 'KVKK-R-1' in text
        assert '12345678901' not in text
        assert 'zeynep@example.com' not in text

    def test_kvkk_export_admin_only(self, client, company_user, auth_headers):
        response = client.get('/api/reports/kvkk-applications', headers=auth_headers(company_user))
        assert response.status_code == 403
