# -*- coding: utf-8 -*-
"""
Schemas for customers, project requests, products and quotes
"""
from datetime import datetime
from typing import Optional, List, Literal

from pydantic import BaseModel, Field, field_validator

from enerjios.schemas.auth import EMAIL_PATTERN


class CustomerCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    company_name: Optional[str] = None
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    notes: Optional[str] = None
    company_id: Optional[int] = None  # admins only


class CustomerUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    company_name: Optional[str] = None
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    notes: Optional[str] = None


class ProjectRequestCreate(BaseModel):
    customer_name: str = Field(..., min_length=2, max_length=255)
    customer_email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    customer_phone: Optional[str] = Field(None, max_length=20)
    city: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    project_type: Literal['RESIDENTIAL', 'COMMERCIAL', 'INDUSTRIAL', 'AGRICULTURAL', 'ROOFTOP', 'LAND'] = 'RESIDENTIAL'
    estimated_capacity: Optional[float] = Field(None, gt=0)
    estimated_budget: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    source: Optional[str] = 'WEBSITE'
    priority: Literal['HIGH', 'MEDIUM', 'LOW'] = 'MEDIUM'
    company_id: Optional[int] = None
    customer_id: Optional[int] = None


class ProjectRequestStatusUpdate(BaseModel):
    status: Literal['OPEN', 'CONTACTED', 'ASSIGNED', 'SITE_VISIT', 'CONVERTED_TO_PROJECT', 'LOST']
    note: Optional[str] = None
    assigned_to_id: Optional[int] = None


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    brand: Optional[str] = None
    model: Optional[str] = None
    category: Literal['PANEL', 'INVERTER', 'BATTERY', 'MOUNTING', 'CABLE', 'OTHER'] = 'PANEL'
    unit: str = 'adet'
    unit_price: float = Field(..., ge=0)
    currency: str = Field('TRY', min_length=3, max_length=3)
    power_watt: Optional[float] = Field(None, ge=0)
    warranty_years: Optional[int] = Field(None, ge=0)
    stock: int = Field(0, ge=0)


class QuoteItemIn(BaseModel):
    product_id: Optional[int] = None
    description: Optional[str] = Field(None, max_length=500)
    quantity: float = Field(..., gt=0)
    unit_price: Optional[float] = Field(None, ge=0)


class QuoteCreate(BaseModel):
    customer_id: Optional[int] = None
    project_id: Optional[int] = None
    title: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    terms: Optional[str] = None
    currency: str = Field('TRY', min_length=3, max_length=3)
    discount: float = Field(0, ge=0)
    tax_rate: Optional[float] = Field(None, ge=0, le=100)
    system_size_kw: Optional[float] = Field(None, gt=0)
    estimated_annual_production: Optional[float] = Field(None, ge=0)
    valid_until: Optional[datetime] = None
    items: List[QuoteItemIn] = Field(..., min_length=1)
    company_id: Optional[int] = None


class QuoteUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    terms: Optional[str] = None
    discount: Optional[float] = Field(None, ge=0)
    tax_rate: Optional[float] = Field(None, ge=0, le=100)
    valid_until: Optional[datetime] = None
    items: Optional[List[QuoteItemIn]] = Field(None, min_length=1)


class QuoteSendIn(BaseModel):
    channels: List[Literal['EMAIL', 'WHATSAPP', 'SMS']] = Field(..., min_length=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)
    name: Optional[str] = None
    message: Optional[str] = Field(None, max_length=1000)

    @field_validator('channels')
    @classmethod
    def unique_channels(cls, value):
        return list(dict.fromkeys(value))


class QuoteApproveIn(BaseModel):
    customer_name: str = Field(..., min_length=2, max_length=255)
    accepted_terms: bool
    comments: Optional[str] = None
    signature: Optional[str] = None

    @field_validator('accepted_terms')
    @classmethod
    def terms_must_be_accepted(cls, value):
        if not value:
            raise ValueError('Şartlar kabul edilmelidir')
        return value


class QuoteRejectIn(BaseModel):
    customer_name: Optional[str] = None
    reason: Optional[str] = Field(None, max_length=2000)
