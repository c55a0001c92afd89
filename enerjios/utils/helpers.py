# -*- coding: utf-8 -*-
"""
Helper Functions - Common request and formatting utilities
"""
import random
import string

from flask import request

from enerjios.extensions import db
from enerjios.utils.errors import AuthorizationError, NotFoundError, ValidationError


def generate_code(length=8):
    """Random uppercase alphanumeric code"""
    chars = string.ascii_uppercase + string.digits
    return ''.join(random.choices(chars, k=length))


def generate_number(prefix, now):
    """
    Human-readable document number, e.g. TKL-2025-4F7K2Q.

    Used for quote and project request numbers.
    """
    return f"{prefix}-{now.year}-{generate_code(6)}"


def parse_body(schema):
    """
    Validate the JSON request body against a pydantic schema.

    Raises pydantic.ValidationError (rendered as 400 with an issue list)
    when the body does not match.
    """
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError('Geçerli bir JSON gövdesi gerekli')
    return schema.model_validate(data)


def get_or_404(model, object_id, resource='Kayıt'):
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFoundError(resource)
    return obj


def ensure_company_access(user, company_id):
    """Raise 403 unless the user may see data of the given company"""
    if not user.can_access_company(company_id):
        raise AuthorizationError('Bu kayda erişim yetkiniz yok')


def resolve_company_id(user, requested=None):
    """
    Company a new record belongs to.

    Admins may create records for any company; everyone else writes to
    their own.
    """
    if user.is_admin():
        company_id = requested or user.company_id
    else:
        company_id = user.company_id
    if not company_id:
        raise ValidationError('Firma bilgisi gerekli')
    return company_id


def scope_to_company(query, model, user):
    """Restrict a query to the user's tenant (admins see everything)"""
    if user.is_admin():
        company_id = request.args.get('company_id', type=int)
        if company_id:
            return query.filter(model.company_id == company_id)
        return query
    return query.filter(model.company_id == user.company_id)


def get_pagination_args(default_per_page=20, max_per_page=100):
    page = max(request.args.get('page', 1, type=int), 1)
    per_page = min(max(request.args.get('per_page', default_per_page, type=int), 1), max_per_page)
    return page, per_page


def paginated_response(pagination, key):
    return {
        key: [item.to_dict() for item in pagination.items],
        'total': pagination.total,
        'page': pagination.page,
        'pages': pagination.pages,
        'per_page': pagination.per_page,
    }


def client_ip():
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr


def format_currency(amount, currency='TRY'):
    """Format an amount the Turkish way: 1.234.567,89 ₺"""
    symbol = {'TRY': '₺', 'USD': '$', 'EUR': '€'}.get(currency, currency)
    formatted = f"{amount or 0:,.2f}".replace(',', 'X').replace('.', ',').replace('X', '.')
    return f"{formatted} {symbol}"


def format_date_tr(dt):
    """DD.MM.YYYY"""
    return dt.strftime('%d.%m.%Y') if dt else '-'
