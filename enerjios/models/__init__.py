# -*- coding: utf-8 -*-
"""
Models Package
Import all models here for easy access
"""
from enerjios.models.user import User, UserRole
from enerjios.models.company import Company, Customer
from enerjios.models.project import (
    Project, ProjectStatus, ProjectRequest, ProjectRequestStatus,
    ProjectRequestStatusHistory,
)
from enerjios.models.quote import Product, Quote, QuoteItem, QuoteStatus
from enerjios.models.hr import (
    Department, Employee, LeaveRequest, LeaveStatus, LeaveType,
    TimeEntry, TimeEntryStatus,
)
from enerjios.models.kvkk import (
    KVKKApplication, KVKKAuditLog, KVKKAuditAction, KVKKRequestType,
    KVKKStatus, ConsentLog, KVKK_CONSENT_TEXTS, KVKK_RESPONSE_DAYS,
)
from enerjios.models.audit_log import AuditLog
from enerjios.models.partner import (
    Partner, PartnerType, PartnerQuoteRequest, Commission, PartnerReview,
)
from enerjios.models.notification import Notification
from enerjios.models.exchange_rate import ManualExchangeRate
from enerjios.models.photo import PhotoRequest, PhotoUpload, PhotoRequestStatus

__all__ = [
    'User', 'UserRole',
    'Company', 'Customer',
    'Project', 'ProjectStatus', 'ProjectRequest', 'ProjectRequestStatus',
    'ProjectRequestStatusHistory',
    'Product', 'Quote', 'QuoteItem', 'QuoteStatus',
    'Department', 'Employee', 'LeaveRequest', 'LeaveStatus', 'LeaveType',
    'TimeEntry', 'TimeEntryStatus',
    'KVKKApplication', 'KVKKAuditLog', 'KVKKAuditAction', 'KVKKRequestType',
    'KVKKStatus', 'ConsentLog', 'KVKK_CONSENT_TEXTS', 'KVKK_RESPONSE_DAYS',
    'AuditLog',
    'Partner', 'PartnerType', 'PartnerQuoteRequest', 'Commission', 'PartnerReview',
    'Notification',
    'ManualExchangeRate',
    'PhotoRequest', 'PhotoUpload', 'PhotoRequestStatus',
]
