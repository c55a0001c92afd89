# -*- coding: utf-8 -*-
"""
HR Models - Departments, employees, leave requests and time entries
"""
from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive


class LeaveType:
    VACATION = 'VACATION'
    SICK = 'SICK'
    PERSONAL = 'PERSONAL'

    ALL = (VACATION, SICK, PERSONAL)


class LeaveStatus:
    PENDING = 'PENDING'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'


class TimeEntryStatus:
    IN = 'IN'
    OUT = 'OUT'


class Department(db.Model):
    __tablename__ = 'departments'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utc_now_naive)

    __table_args__ = (
        db.UniqueConstraint('company_id', 'name', name='uq_department_company_name'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'name': self.name,
            'description': self.description,
            'employee_count': len(self.employees),
        }


class Employee(db.Model):
    __tablename__ = 'employees'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), index=True)

    employee_code = db.Column(db.String(30), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255))
    phone = db.Column(db.String(20))
    position = db.Column(db.String(100))
    hire_date = db.Column(db.Date, nullable=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utc_now_naive)

    department = db.relationship('Department', backref='employees')
    user = db.relationship('User', backref=db.backref('employee', uselist=False))

    __table_args__ = (
        db.UniqueConstraint('company_id', 'employee_code', name='uq_employee_company_code'),
    )

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'user_id': self.user_id,
            'department_id': self.department_id,
            'department': self.department.name if self.department else None,
            'employee_code': self.employee_code,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'full_name': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'position': self.position,
            'hire_date': self.hire_date.isoformat() if self.hire_date else None,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<Employee {self.employee_code}>'


class LeaveRequest(db.Model):
    __tablename__ = 'leave_requests'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False, index=True)
    leave_type = db.Column(db.String(20), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    days = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text)
    status = db.Column(db.String(20), default=LeaveStatus.PENDING, nullable=False, index=True)

    reviewed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    reviewed_at = db.Column(db.DateTime)
    review_note = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utc_now_naive)

    employee = db.relationship('Employee', backref=db.backref('leave_requests', lazy='dynamic'))

    def to_dict(self):
        return {
            'id': self.id,
            'employee_id': self.employee_id,
            'employee_name': self.employee.full_name if self.employee else None,
            'leave_type': self.leave_type,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'days': self.days,
            'reason': self.reason,
            'status': self.status,
            'reviewed_by_id': self.reviewed_by_id,
            'reviewed_at': self.reviewed_at.isoformat() if self.reviewed_at else None,
            'review_note': self.review_note,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class TimeEntry(db.Model):
    """One attendance record per employee per calendar day"""
    __tablename__ = 'time_entries'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False, index=True)
    work_date = db.Column(db.Date, nullable=False)
    clock_in = db.Column(db.DateTime, nullable=False)
    clock_out = db.Column(db.DateTime)
    break_minutes = db.Column(db.Integer, default=0)
    total_hours = db.Column(db.Float)
    overtime_hours = db.Column(db.Float, default=0)
    is_overtime = db.Column(db.Boolean, default=False)
    status = db.Column(db.String(5), default=TimeEntryStatus.IN, nullable=False)
    location = db.Column(db.String(255))
    notes = db.Column(db.Text)

    employee = db.relationship('Employee', backref=db.backref('time_entries', lazy='dynamic'))

    __table_args__ = (
        db.UniqueConstraint('employee_id', 'work_date', name='uq_time_entry_employee_day'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'employee_id': self.employee_id,
            'work_date': self.work_date.isoformat(),
            'clock_in': self.clock_in.isoformat() if self.clock_in else None,
            'clock_out': self.clock_out.isoformat() if self.clock_out else None,
            'break_minutes': self.break_minutes,
            'total_hours': self.total_hours,
            'overtime_hours': self.overtime_hours,
            'is_overtime': self.is_overtime,
            'status': self.status,
            'location': self.location,
            'notes': self.notes,
        }
