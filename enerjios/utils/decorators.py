# -*- coding: utf-8 -*-
"""
Decorators - Reusable route decorators
"""
from functools import wraps

from flask import g, request, current_app

from enerjios.extensions import db
from enerjios.utils.errors import AuthenticationError, AuthorizationError
from enerjios.utils.security import decode_access_token, get_bearer_token, verify_shared_secret


def _load_current_user():
    from enerjios.models import User

    token = get_bearer_token(request)
    if not token:
        raise AuthenticationError('Oturum açmanız gerekiyor')

    payload = decode_access_token(token)
    if not payload:
        raise AuthenticationError('Geçersiz veya süresi dolmuş oturum')

    user = db.session.get(User, int(payload['sub']))
    if not user or not user.is_active:
        raise AuthenticationError('Kullanıcı bulunamadı veya pasif')
    return user


def login_required(f):
    """
    Require a valid bearer token.
    The authenticated user is available as g.current_user.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.current_user = _load_current_user()
        return f(*args, **kwargs)
    return decorated_function


def roles_required(*roles):
    """
    Check that the current user has one of the allowed roles

    Usage:
        @roles_required('ADMIN', 'COMPANY')
        def company_route():
            pass
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = _load_current_user()
            if user.role not in roles:
                raise AuthorizationError('Bu işlem için yetkiniz yok')
            g.current_user = user
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    """Only platform admins can access"""
    return roles_required('ADMIN')(f)


def cron_secret_required(f):
    """
    Require the shared cron secret as a bearer token.
    Used by external schedulers that trigger background jobs over HTTP.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get('CRON_SECRET')
        if not verify_shared_secret(get_bearer_token(request), expected):
            raise AuthenticationError('Geçersiz cron anahtarı')
        return f(*args, **kwargs)
    return decorated_function


def current_user_rate_key():
    """
    Rate-limit key for per-user limits.

    Flask-Limiter evaluates keys before the view runs, so the token is
    decoded here instead of relying on g.current_user.
    """
    from flask_limiter.util import get_remote_address

    token = get_bearer_token(request)
    payload = decode_access_token(token) if token else None
    if payload:
        return f"user:{payload['sub']}"
    return get_remote_address()
