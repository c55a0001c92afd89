# -*- coding: utf-8 -*-
"""
Leave Management
Annual leave entitlement, balances and leave request validation.
"""
import logging
from datetime import date, timedelta

from enerjios.models import LeaveRequest, LeaveStatus, LeaveType

logger = logging.getLogger(__name__)


# (minimum whole years of service, annual vacation days), highest first
VACATION_ENTITLEMENT_STEPS = (
    (5, 35),
    (3, 30),
    (1, 25),
    (0, 20),
)

CARRYOVER_MAX_DAYS = 5
NO_DEPARTMENT = 'Departman Yok'


def calculate_years_of_service(hire_date, as_of):
    """Whole years between hire date and `as_of` (never negative)"""
    days = (as_of - hire_date).days
    return max(0, days // 365)


def get_vacation_entitlement(years_of_service):
    for min_years, days in VACATION_ENTITLEMENT_STEPS:
        if years_of_service >= min_years:
            return days
    return VACATION_ENTITLEMENT_STEPS[-1][1]


def calculate_leave_days(start_date, end_date):
    """Business days between two dates, both inclusive, weekends excluded"""
    if end_date < start_date:
        return 0
    days = 0
    current = start_date
    while current <= end_date:
        if current.weekday() < 5:
            days += 1
        current += timedelta(days=1)
    return days


def find_conflicting_leave(requests, start_date, end_date, exclude_id=None):
    """First non-rejected request whose dates overlap [start_date, end_date]"""
    for leave in requests:
        if leave.id == exclude_id or leave.status == LeaveStatus.REJECTED:
            continue
        if leave.start_date <= end_date and leave.end_date >= start_date:
            return leave
    return None


def _sum_days(requests, leave_type, status):
    return sum(r.days for r in requests if r.leave_type == leave_type and r.status == status)


def summarize_leave(requests, entitlement):
    """
    Balance for one employee-year from already-loaded requests.

    remaining = max(0, entitlement - approved - pending)
    """
    used = _sum_days(requests, LeaveType.VACATION, LeaveStatus.APPROVED)
    pending = _sum_days(requests, LeaveType.VACATION, LeaveStatus.PENDING)
    return {
        'vacation': {
            'total': entitlement,
            'used': used,
            'pending': pending,
            'remaining': max(0, entitlement - used - pending),
        },
        'sick': {
            'used': _sum_days(requests, LeaveType.SICK, LeaveStatus.APPROVED),
            'pending': _sum_days(requests, LeaveType.SICK, LeaveStatus.PENDING),
        },
        'personal': {
            'used': _sum_days(requests, LeaveType.PERSONAL, LeaveStatus.APPROVED),
            'pending': _sum_days(requests, LeaveType.PERSONAL, LeaveStatus.PENDING),
        },
    }


def requests_in_year(employee, year):
    start = date(year, 1, 1)
    end = date(year, 12, 31)
    return (employee.leave_requests
            .filter(LeaveRequest.start_date >= start, LeaveRequest.start_date <= end)
            .all())


def calculate_leave_balance(employee, year, as_of):
    years = calculate_years_of_service(employee.hire_date, as_of)
    entitlement = get_vacation_entitlement(years)
    balance = summarize_leave(requests_in_year(employee, year), entitlement)
    balance.update({
        'employee_id': employee.id,
        'employee_name': employee.full_name,
        'department': employee.department.name if employee.department else NO_DEPARTMENT,
        'hire_date': employee.hire_date.isoformat(),
        'years_of_service': years,
        'year': year,
    })
    return balance


def carryover_rules(year):
    return {
        'vacation_carryover_max_days': CARRYOVER_MAX_DAYS,
        'carryover_deadline': f"{year + 1}-03-31",
    }


def company_stats(balances):
    if not balances:
        return {
            'total_employees': 0,
            'total_vacation_days': 0,
            'used_vacation_days': 0,
            'pending_vacation_days': 0,
            'average_remaining_days': 0,
        }
    return {
        'total_employees': len(balances),
        'total_vacation_days': sum(b['vacation']['total'] for b in balances),
        'used_vacation_days': sum(b['vacation']['used'] for b in balances),
        'pending_vacation_days': sum(b['vacation']['pending'] for b in balances),
        'average_remaining_days': round(
            sum(b['vacation']['remaining'] for b in balances) / len(balances), 1
        ),
    }


def department_stats(balances):
    stats = {}
    for balance in balances:
        dept = stats.setdefault(balance['department'], {
            'employees': 0, 'total': 0, 'used': 0, 'pending': 0, 'remaining': 0,
        })
        dept['employees'] += 1
        for key in ('total', 'used', 'pending', 'remaining'):
            dept[key] += balance['vacation'][key]
    return stats


def validate_vacation_balance(employee, start_date, days, as_of):
    """
    Raise-free check used before creating a VACATION request.

    Returns:
        (ok: bool, remaining: int)
    """
    balance = calculate_leave_balance(employee, start_date.year, as_of)
    remaining = balance['vacation']['remaining']
    return days <= remaining, remaining
