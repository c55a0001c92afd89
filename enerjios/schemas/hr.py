# -*- coding: utf-8 -*-
from datetime import date
from typing import Optional, Literal

from pydantic import BaseModel, Field

from enerjios.schemas.auth import EMAIL_PATTERN


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    company_id: Optional[int] = None


class EmployeeCreate(BaseModel):
    employee_code: str = Field(..., min_length=1, max_length=30)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = None
    position: Optional[str] = None
    hire_date: date
    department_id: Optional[int] = None
    user_id: Optional[int] = None
    company_id: Optional[int] = None


class LeaveRequestCreate(BaseModel):
    employee_id: Optional[int] = None
    leave_type: Literal['VACATION', 'SICK', 'PERSONAL']
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=1000)


class LeaveReviewIn(BaseModel):
    status: Literal['APPROVED', 'REJECTED']
    note: Optional[str] = None


class ClockIn(BaseModel):
    employee_id: Optional[int] = None
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=500)


class ClockOut(BaseModel):
    employee_id: Optional[int] = None
    break_minutes: int = Field(0, ge=0, le=600)
    notes: Optional[str] = Field(None, max_length=500)
