# -*- coding: utf-8 -*-
"""
HR Routes - Departments, employees, leave management and time tracking
"""
import logging

from flask import Blueprint, jsonify, g, request

from enerjios.extensions import db
from enerjios.models import (
    Department, Employee, LeaveRequest, LeaveStatus, LeaveType, TimeEntry, UserRole,
)
from enerjios.schemas.hr import (
    ClockIn, ClockOut, DepartmentCreate, EmployeeCreate, LeaveRequestCreate, LeaveReviewIn,
)
from enerjios.services import leave as leave_service
from enerjios.services import time_tracking
from enerjios.utils.decorators import login_required, roles_required
from enerjios.utils.errors import NotFoundError, ValidationError
from enerjios.utils.helpers import (
    ensure_company_access, get_or_404, get_pagination_args, paginated_response,
    parse_body, resolve_company_id, scope_to_company,
)
from enerjios.utils.timezone import parse_date, utc_now_naive

logger = logging.getLogger(__name__)

hr_bp = Blueprint('hr', __name__, url_prefix='/api/hr')

MANAGER_ROLES = ('ADMIN', 'COMPANY')


def _resolve_employee(employee_id=None):
    """
    Employee a request acts on.

    Employees always act on their own record; managers name the employee.
    """
    user = g.current_user
    if user.role == UserRole.EMPLOYEE:
        if user.employee is None:
            raise NotFoundError('Personel kaydı')
        return user.employee

    if not employee_id:
        raise ValidationError('Personel seçilmelidir')
    employee = get_or_404(Employee, employee_id, 'Personel')
    ensure_company_access(user, employee.company_id)
    return employee


# ══════════════════════════════════════════════════════════════════
# DEPARTMENTS & EMPLOYEES
# ══════════════════════════════════════════════════════════════════

@hr_bp.route('/departments', methods=['GET'])
@roles_required(*MANAGER_ROLES)
def list_departments():
    """
    List departments
    ---
    tags:
      - HR
    security:
      - Bearer: []
    responses:
      200:
        description: Departments with employee counts
    """
    departments = scope_to_company(Department.query, Department, g.current_user) \
        .order_by(Department.name).all()
    return jsonify({'departments': [d.to_dict() for d in departments]})


@hr_bp.route('/departments', methods=['POST'])
@roles_required(*MANAGER_ROLES)
def create_department():
    """
    Create a department
    ---
    tags:
      - HR
    security:
      - Bearer: []
    responses:
      201:
        description: Department created
      409:
        description: Department name already used
    """
    data = parse_body(DepartmentCreate)
    company_id = resolve_company_id(g.current_user, data.company_id)
    department = Department(company_id=company_id, name=data.name, description=data.description)
    db.session.add(department)
    db.session.commit()
    return jsonify({'department': department.to_dict()}), 201


@hr_bp.route('/employees', methods=['GET'])
@roles_required(*MANAGER_ROLES)
def list_employees():
    """
    List employees
    ---
    tags:
      - HR
    security:
      - Bearer: []
    parameters:
      - name: department_id
        in: query
        type: integer
      - name: active
        in: query
        type: boolean
    responses:
      200:
        description: Paginated employees
    """
    query = scope_to_company(Employee.query, Employee, g.current_user)
    department_id = request.args.get('department_id', type=int)
    if department_id:
        query = query.filter(Employee.department_id == department_id)
    if request.args.get('active', 'true').lower() != 'all':
        query = query.filter(Employee.is_active.is_(True))

    page, per_page = get_pagination_args(default_per_page=50)
    pagination = query.order_by(Employee.last_name, Employee.first_name).paginate(
        page=page, per_page=per_page, error_out=False
    )
    return jsonify(paginated_response(pagination, 'employees'))


@hr_bp.route('/employees', methods=['POST'])
@roles_required(*MANAGER_ROLES)
def create_employee():
    """
    Create an employee
    ---
    tags:
      - HR
    security:
      - Bearer: []
    responses:
      201:
        description: Employee created
      409:
        description: Employee code already used in this company
    """
    data = parse_body(EmployeeCreate)
    company_id = resolve_company_id(g.current_user, data.company_id)

    if data.department_id:
        department = get_or_404(Department, data.department_id, 'Departman')
        if department.company_id != company_id:
            raise NotFoundError('Departman')

    employee = Employee(company_id=company_id, **data.model_dump(exclude={'company_id'}))
    db.session.add(employee)
    db.session.commit()
    logger.info(f"Employee {employee.employee_code} created for company {company_id}")
    return jsonify({'employee': employee.to_dict()}), 201


# ══════════════════════════════════════════════════════════════════
# LEAVE
# ══════════════════════════════════════════════════════════════════

@hr_bp.route('/leave-requests', methods=['POST'])
@login_required
def create_leave_request():
    """
    Request leave.
    Days are business days with both ends inclusive. Overlapping
    requests and vacation beyond the remaining balance are refused.
    ---
    tags:
      - HR
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [leave_type, start_date, end_date]
          properties:
            employee_id:
              type: integer
            leave_type:
              type: string
              enum: [VACATION, SICK, PERSONAL]
            start_date:
              type: string
              format: date
            end_date:
              type: string
              format: date
            reason:
              type: string
    responses:
      201:
        description: Leave request created
      400:
        description: Invalid dates, overlap or insufficient balance
    """
    data = parse_body(LeaveRequestCreate)
    employee = _resolve_employee(data.employee_id)
    now = utc_now_naive()

    if data.start_date > data.end_date:
        raise ValidationError('Bitiş tarihi başlangıç tarihinden önce olamaz')

    days = leave_service.calculate_leave_days(data.start_date, data.end_date)
    if days == 0:
        raise ValidationError('Seçilen aralıkta iş günü bulunmuyor')

    conflict = leave_service.find_conflicting_leave(
        employee.leave_requests.all(), data.start_date, data.end_date
    )
    if conflict is not None:
        raise ValidationError(
            'Bu tarihlerde başka bir izin talebiniz var',
            details={'conflicting_request': conflict.to_dict()},
        )

    if data.leave_type == LeaveType.VACATION:
        ok, remaining = leave_service.validate_vacation_balance(
            employee, data.start_date, days, now.date()
        )
        if not ok:
            raise ValidationError(
                'Yetersiz yıllık izin bakiyesi',
                details={'requested_days': days, 'remaining_days': remaining},
            )

    leave_request = LeaveRequest(
        employee_id=employee.id,
        leave_type=data.leave_type,
        start_date=data.start_date,
        end_date=data.end_date,
        days=days,
        reason=data.reason,
        status=LeaveStatus.PENDING,
    )
    db.session.add(leave_request)
    db.session.commit()
    logger.info(f"Leave request {leave_request.id} ({days} days) for employee {employee.id}")
    return jsonify({'leave_request': leave_request.to_dict()}), 201


@hr_bp.route('/leave-requests', methods=['GET'])
@login_required
def list_leave_requests():
    """
    List leave requests
    ---
    tags:
      - HR
    security:
      - Bearer: []
    parameters:
      - name: status
        in: query
        type: string
        enum: [PENDING, APPROVED, REJECTED]
      - name: employee_id
        in: query
        type: integer
    responses:
      200:
        description: Leave requests
    """
    user = g.current_user
    query = LeaveRequest.query.join(Employee)

    if user.role == UserRole.EMPLOYEE:
        employee = _resolve_employee()
        query = query.filter(LeaveRequest.employee_id == employee.id)
    elif user.role in MANAGER_ROLES:
        query = scope_to_company(query, Employee, user)
        employee_id = request.args.get('employee_id', type=int)
        if employee_id:
            query = query.filter(LeaveRequest.employee_id == employee_id)
    else:
        raise NotFoundError('Personel kaydı')

    status = request.args.get('status')
    if status:
        query = query.filter(LeaveRequest.status == status)

    page, per_page = get_pagination_args()
    pagination = query.order_by(LeaveRequest.start_date.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    return jsonify(paginated_response(pagination, 'leave_requests'))


@hr_bp.route('/leave-requests/<int:leave_id>/review', methods=['PUT', 'POST'])
@roles_required(*MANAGER_ROLES)
def review_leave_request(leave_id):
    """
    Approve or reject a pending leave request
    ---
    tags:
      - HR
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [status]
          properties:
            status:
              type: string
              enum: [APPROVED, REJECTED]
            note:
              type: string
    responses:
      200:
        description: Reviewed request
      400:
        description: Request already reviewed
    """
    leave_request = get_or_404(LeaveRequest, leave_id, 'İzin talebi')
    ensure_company_access(g.current_user, leave_request.employee.company_id)
    data = parse_body(LeaveReviewIn)

    if leave_request.status != LeaveStatus.PENDING:
        raise ValidationError('Bu izin talebi zaten değerlendirilmiş')

    leave_request.status = data.status
    leave_request.review_note = data.note
    leave_request.reviewed_by_id = g.current_user.id
    leave_request.reviewed_at = utc_now_naive()
    db.session.commit()
    logger.info(f"Leave request {leave_request.id} {data.status.lower()} by user {g.current_user.id}")
    return jsonify({'leave_request': leave_request.to_dict()})


@hr_bp.route('/leave-balance', methods=['GET'])
@login_required
def leave_balance():
    """
    Leave balances for a year.
    Managers get every matching employee plus company and department
    aggregates; employees get their own balance.
    ---
    tags:
      - HR
    security:
      - Bearer: []
    parameters:
      - name: year
        in: query
        type: integer
      - name: employee_id
        in: query
        type: integer
      - name: department_id
        in: query
        type: integer
    responses:
      200:
        description: Balances and statistics
    """
    user = g.current_user
    today = utc_now_naive().date()
    year = request.args.get('year', today.year, type=int)

    if user.role == UserRole.EMPLOYEE:
        employees = [_resolve_employee()]
    elif user.role in MANAGER_ROLES:
        query = scope_to_company(Employee.query, Employee, user).filter(Employee.is_active.is_(True))
        employee_id = request.args.get('employee_id', type=int)
        if employee_id:
            query = query.filter(Employee.id == employee_id)
        department_id = request.args.get('department_id', type=int)
        if department_id:
            query = query.filter(Employee.department_id == department_id)
        employees = query.order_by(Employee.last_name).all()
    else:
        raise NotFoundError('Personel kaydı')

    balances = [leave_service.calculate_leave_balance(e, year, today) for e in employees]
    return jsonify({
        'year': year,
        'balances': balances,
        'company_stats': leave_service.company_stats(balances),
        'department_stats': leave_service.department_stats(balances),
        'carryover_rules': leave_service.carryover_rules(year),
    })


# ══════════════════════════════════════════════════════════════════
# TIME TRACKING
# ══════════════════════════════════════════════════════════════════

@hr_bp.route('/time/clock-in', methods=['POST'])
@login_required
def clock_in():
    """
    Clock in for today
    ---
    tags:
      - HR
    security:
      - Bearer: []
    responses:
      201:
        description: Time entry opened
      400:
        description: Already clocked in today
    """
    data = ClockIn.model_validate(request.get_json(silent=True) or {})
    employee = _resolve_employee(data.employee_id)
    entry = time_tracking.clock_in(employee, utc_now_naive(), data.location, data.notes)
    return jsonify({'entry': entry.to_dict()}), 201


@hr_bp.route('/time/clock-out', methods=['POST'])
@login_required
def clock_out():
    """
    Clock out for today
    ---
    tags:
      - HR
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        schema:
          type: object
          properties:
            break_minutes:
              type: integer
            notes:
              type: string
    responses:
      200:
        description: Time entry closed with worked and overtime hours
      400:
        description: No open entry for today
    """
    data = ClockOut.model_validate(request.get_json(silent=True) or {})
    employee = _resolve_employee(data.employee_id)
    entry = time_tracking.clock_out(employee, utc_now_naive(), data.break_minutes, data.notes)
    return jsonify({'entry': entry.to_dict()})


@hr_bp.route('/time/entries', methods=['GET'])
@login_required
def time_entries():
    """
    Time entries in a date range
    ---
    tags:
      - HR
    security:
      - Bearer: []
    parameters:
      - name: employee_id
        in: query
        type: integer
      - name: start_date
        in: query
        type: string
        format: date
      - name: end_date
        in: query
        type: string
        format: date
    responses:
      200:
        description: Entries and totals
    """
    employee = _resolve_employee(request.args.get('employee_id', type=int))
    query = employee.time_entries

    try:
        start = parse_date(request.args.get('start_date'))
        end = parse_date(request.args.get('end_date'))
    except ValueError:
        raise ValidationError('Tarih formatı YYYY-MM-DD olmalıdır')
    if start:
        query = query.filter(TimeEntry.work_date >= start)
    if end:
        query = query.filter(TimeEntry.work_date <= end)

    entries = query.order_by(TimeEntry.work_date.desc()).all()
    return jsonify({
        'employee_id': employee.id,
        'entries': [e.to_dict() for e in entries],
        'total_hours': round(sum(e.total_hours or 0 for e in entries), 2),
        'overtime_hours': round(sum(e.overtime_hours or 0 for e in entries), 2),
    })
