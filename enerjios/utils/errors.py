# -*- coding: utf-8 -*-
"""
API Errors
Exception hierarchy and JSON error handlers shared by all blueprints.

Every error body has the shape::

    {"error": "<message>", "code": "<CODE>", "details": ...}
"""
import logging

from flask import jsonify
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


# User-friendly messages for generic HTTP failures
USER_FRIENDLY_MESSAGES = {
    400: 'Geçersiz istek',
    401: 'Kimlik doğrulama gerekli',
    403: 'Bu işlem için yetkiniz yok',
    404: 'Kayıt bulunamadı',
    405: 'Bu yöntem desteklenmiyor',
    409: 'Kayıt zaten mevcut',
    410: 'Kaynağın süresi doldu',
    413: 'Dosya boyutu çok büyük',
    429: 'Çok fazla istek. Lütfen biraz bekleyin.',
    500: 'Beklenmeyen bir hata oluştu. Lütfen daha sonra tekrar deneyin.',
}


class APIError(Exception):
    """Base class for errors that map directly to an HTTP response."""
    status_code = 500
    code = 'INTERNAL_ERROR'

    def __init__(self, message=None, details=None, status_code=None, code=None):
        super().__init__(message)
        self.message = message or USER_FRIENDLY_MESSAGES.get(status_code or self.status_code)
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        if self.details is not None:
            payload['details'] = self.details
        return payload


class ValidationError(APIError):
    status_code = 400
    code = 'VALIDATION_ERROR'


class AuthenticationError(APIError):
    status_code = 401
    code = 'AUTHENTICATION_ERROR'


class AuthorizationError(APIError):
    status_code = 403
    code = 'AUTHORIZATION_ERROR'


class NotFoundError(APIError):
    status_code = 404
    code = 'NOT_FOUND'

    def __init__(self, resource='Kayıt', details=None):
        super().__init__(f'{resource} bulunamadı', details=details)


class ConflictError(APIError):
    status_code = 409
    code = 'CONFLICT'


class GoneError(APIError):
    status_code = 410
    code = 'GONE'


class RateLimitError(APIError):
    status_code = 429
    code = 'RATE_LIMIT_EXCEEDED'


class ExternalServiceError(APIError):
    status_code = 502
    code = 'EXTERNAL_SERVICE_ERROR'


def format_validation_issues(exc: PydanticValidationError):
    """Flatten pydantic errors into a JSON-safe issue list."""
    issues = []
    for error in exc.errors():
        issues.append({
            'field': '.'.join(str(part) for part in error.get('loc', ())),
            'message': error.get('msg'),
            'type': error.get('type'),
        })
    return issues


def register_error_handlers(app):
    """Register JSON error handlers"""

    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error(f"API error: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(PydanticValidationError)
    def handle_schema_error(error):
        return jsonify({
            'error': 'Geçersiz veri',
            'code': 'VALIDATION_ERROR',
            'details': format_validation_issues(error),
        }), 400

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        from enerjios.extensions import db
        db.session.rollback()
        logger.warning(f"Integrity error: {error.orig}")
        return jsonify({
            'error': USER_FRIENDLY_MESSAGES[409],
            'code': 'CONFLICT',
        }), 409

    @app.errorhandler(429)
    def ratelimit_handler(error):
        return jsonify({
            'error': USER_FRIENDLY_MESSAGES[429],
            'code': 'RATE_LIMIT_EXCEEDED',
            'details': str(getattr(error, 'description', '')),
        }), 429

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({
            'error': USER_FRIENDLY_MESSAGES.get(error.code, error.name),
            'code': error.name.upper().replace(' ', '_'),
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        from enerjios.extensions import db
        db.session.rollback()
        logger.exception(f"Unhandled error: {error}")
        return jsonify({
            'error': USER_FRIENDLY_MESSAGES[500],
            'code': 'INTERNAL_ERROR',
        }), 500
