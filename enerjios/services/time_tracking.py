# -*- coding: utf-8 -*-
"""
Time Tracking
Clock-in / clock-out with one attendance record per employee per day.
"""
import logging

from enerjios.extensions import db
from enerjios.models import TimeEntry, TimeEntryStatus
from enerjios.utils.errors import ValidationError

logger = logging.getLogger(__name__)

STANDARD_WORKDAY_HOURS = 8


def calculate_hours(clock_in, clock_out, break_minutes=0):
    """Worked hours, breaks deducted, floored at zero"""
    minutes = (clock_out - clock_in).total_seconds() / 60
    return round(max(0.0, (minutes - (break_minutes or 0)) / 60), 2)


def detect_overtime(total_hours):
    """(is_overtime, overtime_hours) against the 8-hour workday"""
    overtime = max(0.0, total_hours - STANDARD_WORKDAY_HOURS)
    return overtime > 0, round(overtime, 2)


def _join_notes(existing, new):
    if not new:
        return existing
    if not existing:
        return new
    return f"{existing} | {new}"


def today_entry(employee, now):
    return TimeEntry.query.filter_by(employee_id=employee.id, work_date=now.date()).first()


def clock_in(employee, now, location=None, notes=None):
    if today_entry(employee, now):
        raise ValidationError('Bugün için zaten giriş yapılmış')

    entry = TimeEntry(
        employee_id=employee.id,
        work_date=now.date(),
        clock_in=now,
        status=TimeEntryStatus.IN,
        location=location,
        notes=notes,
    )
    db.session.add(entry)
    db.session.commit()
    logger.info(f"Employee {employee.id} clocked in")
    return entry


def clock_out(employee, now, break_minutes=0, notes=None):
    entry = today_entry(employee, now)
    if entry is None:
        raise ValidationError('Bugün için giriş kaydı bulunamadı')
    if entry.status == TimeEntryStatus.OUT:
        raise ValidationError('Bugün için zaten çıkış yapılmış')

    entry.clock_out = now
    entry.break_minutes = break_minutes or 0
    entry.total_hours = calculate_hours(entry.clock_in, now, entry.break_minutes)
    entry.is_overtime, entry.overtime_hours = detect_overtime(entry.total_hours)
    entry.status = TimeEntryStatus.OUT
    entry.notes = _join_notes(entry.notes, notes)
    db.session.commit()
    logger.info(f"Employee {employee.id} clocked out after {entry.total_hours}h")
    return entry
