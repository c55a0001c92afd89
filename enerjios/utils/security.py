# -*- coding: utf-8 -*-
"""
Security Utilities
JWT access tokens and random token helpers
"""
import secrets
import logging

import jwt
from flask import current_app

from enerjios.utils.timezone import utc_now

logger = logging.getLogger(__name__)

JWT_ALGORITHM = 'HS256'


def create_access_token(user):
    """Issue a signed access token for a user"""
    now = utc_now()
    payload = {
        'sub': str(user.id),
        'role': user.role,
        'company_id': user.company_id,
        'iat': now,
        'exp': now + current_app.config['JWT_EXPIRES'],
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET'], algorithm=JWT_ALGORITHM)


def decode_access_token(token):
    """
    Decode and verify an access token.

    Returns:
        dict payload, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, current_app.config['JWT_SECRET'], algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Expired access token presented")
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f"Invalid access token presented: {e}")
        return None


def get_bearer_token(request):
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[7:].strip() or None
    return None


def generate_token(nbytes=32):
    """URL-safe hex token for public quote and photo links"""
    return secrets.token_hex(nbytes)


def verify_shared_secret(provided, expected):
    """Constant-time comparison for cron/webhook secrets"""
    if not provided or not expected:
        return False
    return secrets.compare_digest(str(provided), str(expected))
