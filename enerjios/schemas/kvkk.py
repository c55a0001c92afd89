# -*- coding: utf-8 -*-
from typing import Optional, Literal

from pydantic import BaseModel, Field, field_validator

from enerjios.schemas.auth import EMAIL_PATTERN


# Form values -> stored request types
KVKK_REQUEST_TYPE_MAP = {
    'info': 'DATA_ACCESS',
    'access': 'DATA_ACCESS',
    'correction': 'DATA_CORRECTION',
    'deletion': 'DATA_DELETION',
    'portability': 'DATA_PORTABILITY',
    'objection': 'DATA_OBJECTION',
    'other': 'OTHER',
}


class KVKKApplicationIn(BaseModel):
    request_type: Literal['info', 'access', 'correction', 'deletion', 'portability', 'objection', 'other']
    full_name: str = Field(..., min_length=2, max_length=255)
    tc_no: str = Field(..., min_length=11, max_length=11, pattern=r'^\d{11}$')
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., min_length=10, max_length=20)
    address: str = Field(..., min_length=5)
    city: str = Field(..., min_length=2)
    district: str = Field(..., min_length=2)
    postal_code: Optional[str] = Field(None, max_length=10)
    details: str = Field(..., min_length=10)
    previous_application: bool = False
    consent_to_process: bool
    accept_terms: bool

    @field_validator('consent_to_process', 'accept_terms')
    @classmethod
    def must_be_true(cls, value):
        if not value:
            raise ValueError('Bu onay zorunludur')
        return value


class KVKKStatusUpdate(BaseModel):
    status: Literal['PENDING', 'IN_PROGRESS', 'COMPLETED', 'REJECTED']
    response: Optional[str] = None


class KVKKSchedulerAction(BaseModel):
    action: str


class ConsentIn(BaseModel):
    consent_type: Literal['registration', 'marketing', 'analytics', 'installation']
    action: Literal['granted', 'revoked']
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
