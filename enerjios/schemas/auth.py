# -*- coding: utf-8 -*-
from typing import Optional, Literal

from pydantic import BaseModel, Field

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


class RegisterIn(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=2, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    role: Literal['COMPANY', 'CUSTOMER', 'FARMER'] = 'CUSTOMER'

    # Company accounts register their company in the same request
    company_name: Optional[str] = Field(None, min_length=2, max_length=255)
    tax_number: Optional[str] = Field(None, min_length=10, max_length=11)
    city: Optional[str] = None


class LoginIn(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
