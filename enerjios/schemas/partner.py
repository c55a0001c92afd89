# -*- coding: utf-8 -*-
from typing import Optional, List, Literal

from pydantic import BaseModel, Field


class PartnerRegisterIn(BaseModel):
    company_id: int
    partner_type: Literal['INSTALLER', 'EPC', 'DISTRIBUTOR', 'CONSULTANT'] = 'INSTALLER'
    service_areas: List[str] = Field(..., min_length=1)
    specialties: List[str] = Field(default_factory=list)
    min_project_size: float = Field(0, ge=0)
    max_project_size: float = Field(..., gt=0)
    response_time_hours: int = Field(24, ge=1, le=168)
    description: Optional[str] = Field(None, max_length=2000)
    preferred_contact: Literal['EMAIL', 'PHONE', 'WHATSAPP'] = 'EMAIL'


class PartnerReviewIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class CommissionCreate(BaseModel):
    quote_id: int
    rate: Optional[float] = Field(None, gt=0, le=100)


class ExchangeRateIn(BaseModel):
    currency: str = Field(..., min_length=3, max_length=3)
    rate: float = Field(..., ge=0.01, le=1000)
    note: Optional[str] = Field(None, max_length=255)


class ExchangeRateUpdate(BaseModel):
    rate: Optional[float] = Field(None, ge=0.01, le=1000)
    is_active: Optional[bool] = None
    note: Optional[str] = Field(None, max_length=255)


class ExchangeRateBulkItem(BaseModel):
    id: int
    rate: float = Field(..., ge=0.01, le=1000)
    is_active: Optional[bool] = None


class ExchangeRateBulkIn(BaseModel):
    rates: List[ExchangeRateBulkItem] = Field(..., min_length=1)


class PhotoRequestCreate(BaseModel):
    customer_name: str = Field(..., min_length=2, max_length=255)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    project_request_id: Optional[int] = None
    message: Optional[str] = Field(None, max_length=2000)
    guidelines: Optional[str] = None
    expires_in_days: int = Field(7, ge=1, le=60)
    company_id: Optional[int] = None
