# -*- coding: utf-8 -*-
"""
Report Export Routes
CSV / Excel downloads for quotes, leave balances and KVKK applications.
Every export is written to the audit log.
"""
import logging

from flask import Blueprint, Response, g, request

from enerjios.extensions import db
from enerjios.models import AuditLog, Employee, KVKKApplication, Quote
from enerjios.services import leave as leave_service
from enerjios.utils.decorators import admin_required, roles_required
from enerjios.utils.errors import ValidationError
from enerjios.utils.helpers import client_ip, scope_to_company
from enerjios.utils.report_export import (
    KVKK_COLUMNS, LEAVE_BALANCE_COLUMNS, QUOTE_COLUMNS,
    ExcelExporter, export_csv, flatten_leave_balance,
)
from enerjios.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')

EXPORT_FORMATS = {
    'csv': 'text/csv; charset=utf-8',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}


def _export_format():
    fmt = request.args.get('format', 'csv').lower()
    if fmt not in EXPORT_FORMATS:
        raise ValidationError('Geçersiz rapor formatı', details={'valid_formats': list(EXPORT_FORMATS)})
    return fmt


def _download(rows, columns, table_name, basename, title):
    """Render rows, log the export and return the file as an attachment"""
    fmt = _export_format()
    if fmt == 'xlsx':
        content = ExcelExporter().export(rows, columns, title=title)
    else:
        content = export_csv(rows, columns)

    AuditLog.log_data_export(g.current_user, table_name, len(rows), ip_address=client_ip())
    db.session.commit()
    logger.info(f"User {g.current_user.id} exported {len(rows)} rows from {table_name} as {fmt}")

    filename = f"{basename}_{utc_now_naive().strftime('%Y%m%d')}.{fmt}"
    return Response(
        content,
        mimetype=EXPORT_FORMATS[fmt],
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )


@reports_bp.route('/quotes', methods=['GET'])
@roles_required('ADMIN', 'COMPANY', 'EMPLOYEE')
def export_quotes():
    """
    Export quotes
    ---
    tags:
      - Reports
    security:
      - Bearer: []
    parameters:
      - name: format
        in: query
        type: string
        enum: [csv, xlsx]
      - name: status
        in: query
        type: string
    responses:
      200:
        description: File download
      400:
        description: Unknown format
    """
    query = scope_to_company(Quote.query, Quote, g.current_user)
    status = request.args.get('status')
    if status:
        query = query.filter(Quote.status == status.upper())
    quotes = query.order_by(Quote.created_at.desc()).all()
    rows = [q.to_dict(include_items=False) for q in quotes]
    return _download(rows, QUOTE_COLUMNS, 'quotes', 'teklifler', 'Teklifler')


@reports_bp.route('/leave-balances', methods=['GET'])
@roles_required('ADMIN', 'COMPANY')
def export_leave_balances():
    """
    Export leave balances of active employees
    ---
    tags:
      - Reports
    security:
      - Bearer: []
    parameters:
      - name: format
        in: query
        type: string
        enum: [csv, xlsx]
      - name: year
        in: query
        type: integer
    responses:
      200:
        description: File download
    """
    today = utc_now_naive().date()
    year = request.args.get('year', today.year, type=int)
    employees = (scope_to_company(Employee.query, Employee, g.current_user)
                 .filter(Employee.is_active.is_(True))
                 .order_by(Employee.last_name)
                 .all())
    rows = [flatten_leave_balance(leave_service.calculate_leave_balance(e, year, today))
            for e in employees]
    return _download(rows, LEAVE_BALANCE_COLUMNS, 'employees', f'izin_bakiyeleri_{year}', f'İzin {year}')


@reports_bp.route('/kvkk-applications', methods=['GET'])
@admin_required
def export_kvkk_applications():
    """
    Export KVKK applications (no personal details beyond the applicant name)
    ---
    tags:
      - Reports
    security:
      - Bearer: []
    parameters:
      - name: format
        in: query
        type: string
        enum: [csv, xlsx]
      - name: status
        in: query
        type: string
    responses:
      200:
        description: File download
    """
    query = KVKKApplication.query
    status = request.args.get('status')
    if status:
        query = query.filter(KVKKApplication.status == status.upper())
    applications = query.order_by(KVKKApplication.submitted_at.desc()).all()
    rows = [a.to_dict(include_personal=False) for a in applications]
    return _download(rows, KVKK_COLUMNS, 'kvkk_applications', 'kvkk_basvurulari', 'KVKK')
