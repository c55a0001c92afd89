# -*- coding: utf-8 -*-
"""
Configuration classes for EnerjiOS
"""
import os
from datetime import timedelta


def _split_env_list(name, default=''):
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


class Config:
    """Base configuration"""
    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'your-secret-key-change-in-production')
    JSON_SORT_KEYS = False

    # JWT
    JWT_SECRET = os.getenv('JWT_SECRET', os.getenv('SECRET_KEY', 'your-secret-key-change-in-production'))
    JWT_EXPIRES = timedelta(hours=int(os.getenv('JWT_EXPIRES_HOURS', 24)))

    # Database
    DATABASE_URL = os.getenv('DATABASE_URL', '')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Rate Limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STRATEGY = 'fixed-window'
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True
    NOTIFICATIONS_RATE_LIMIT = os.getenv('NOTIFICATIONS_RATE_LIMIT', '60 per minute')
    LOGIN_RATE_LIMIT = os.getenv('LOGIN_RATE_LIMIT', '10 per minute')

    # Upload
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', '/tmp/enerjios-uploads')
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024  # 20MB
    ALLOWED_PHOTO_EXTENSIONS = {'jpg', 'jpeg', 'png', 'heic', 'webp'}

    # Email
    SMTP_HOST = os.getenv('SMTP_HOST', 'smtp-relay.brevo.com')
    SMTP_PORT = int(os.getenv('SMTP_PORT', 587))
    SMTP_USER = os.getenv('SMTP_USER', '')
    SMTP_PASS = os.getenv('SMTP_PASS', '')
    SMTP_FROM = os.getenv('SMTP_FROM', 'noreply@enerjios.com')
    KVKK_ADMIN_EMAILS = _split_env_list('KVKK_ADMIN_EMAILS', 'kvkk@enerjios.com')

    # Messaging providers
    WHATSAPP_API_URL = os.getenv('WHATSAPP_API_URL', '')
    WHATSAPP_API_KEY = os.getenv('WHATSAPP_API_KEY', '')
    SMS_API_URL = os.getenv('SMS_API_URL', '')
    SMS_API_KEY = os.getenv('SMS_API_KEY', '')
    SMS_SENDER = os.getenv('SMS_SENDER', 'ENERJIOS')

    # Solar resource API
    NREL_API_KEY = os.getenv('NREL_API_KEY', 'DEMO_KEY')
    NREL_API_URL = os.getenv('NREL_API_URL', 'https://developer.nrel.gov/api/pvwatts/v6.json')

    # Public links
    APP_URL = os.getenv('APP_URL', 'http://localhost:5000')
    COMPANY_NAME = os.getenv('COMPANY_NAME', 'EnerjiOS')

    # Scheduled jobs triggered over HTTP
    CRON_SECRET = os.getenv('CRON_SECRET', '')

    # Business defaults
    QUOTE_TAX_RATE = float(os.getenv('QUOTE_TAX_RATE', 20))
    QUOTE_VALIDITY_DAYS = int(os.getenv('QUOTE_VALIDITY_DAYS', 30))

    # Redis / Celery
    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    CELERY_BROKER_URL = REDIS_URL
    CELERY_RESULT_BACKEND = REDIS_URL

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Swagger
    SWAGGER = {
        'title': 'EnerjiOS API',
        'version': '1.0',
        'description': 'Solar energy business platform API',
        'uiversion': 3,
        'specs_route': '/apidocs/'
    }


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///enerjios_dev.db')
    SQLALCHEMY_ECHO = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """
    Production configuration

    ══════════════════════════════════════════════════════════════════
    DATABASE CONNECTION POOL SIZING
    ══════════════════════════════════════════════════════════════════

    Web workers and Celery workers share PostgreSQL max_connections:
        (gunicorn_workers + celery_workers) × pool_size + overflow
    ══════════════════════════════════════════════════════════════════
    """
    DEBUG = False
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', '')
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', os.getenv('REDIS_URL', 'memory://'))

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': int(os.getenv('DB_POOL_SIZE', 5)),
        'max_overflow': int(os.getenv('DB_MAX_OVERFLOW', 10)),
        'pool_pre_ping': True,
        'pool_recycle': int(os.getenv('DB_POOL_RECYCLE', 1800)),
        'pool_timeout': int(os.getenv('DB_POOL_TIMEOUT', 30)),
    }


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True

    SECRET_KEY = 'test-secret-key-for-testing-only'
    JWT_SECRET = 'test-jwt-secret-for-testing-only'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'
    CRON_SECRET = 'test-cron-secret'
    KVKK_ADMIN_EMAILS = ['kvkk-admin@example.com']
    WHATSAPP_API_URL = 'https://whatsapp.example.com/send'
    WHATSAPP_API_KEY = 'test-whatsapp-key'
    SMS_API_URL = 'https://sms.example.com/send'
    SMS_API_KEY = 'test-sms-key'
    APP_URL = 'http://testserver'
    LOG_LEVEL = 'WARNING'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


# Weak/default secret keys that should never be used in production
WEAK_SECRET_KEYS = [
    'your-secret-key-change-in-production',
    'change-this-in-production',
    'secret-key',
    'dev-secret-key',
    'test-secret-key',
]


def validate_production_config():
    """
    Validate configuration for production environment.
    Exits the process if critical settings are missing or insecure.
    """
    import sys
    import logging

    logger = logging.getLogger(__name__)
    env = os.getenv('FLASK_ENV', 'development')

    if env != 'production':
        return True

    errors = []
    warnings = []

    secret_key = os.getenv('SECRET_KEY', '')
    if not secret_key:
        errors.append("SECRET_KEY is not set")
    elif secret_key in WEAK_SECRET_KEYS:
        errors.append("SECRET_KEY is using a weak default value")
    elif len(secret_key) < 32:
        warnings.append("SECRET_KEY should be at least 32 characters")

    jwt_secret = os.getenv('JWT_SECRET', '')
    if not jwt_secret:
        warnings.append("JWT_SECRET is not set - falling back to SECRET_KEY")
    elif jwt_secret in WEAK_SECRET_KEYS:
        errors.append("JWT_SECRET is using a weak default value")

    db_url = os.getenv('DATABASE_URL', '')
    if not db_url:
        errors.append("DATABASE_URL is not set")
    elif 'sqlite' in db_url.lower():
        warnings.append("SQLite is not recommended for production")

    if not os.getenv('CRON_SECRET'):
        warnings.append("CRON_SECRET is not set - /api/cron endpoints are disabled")

    for warning in warnings:
        logger.warning(f"⚠️ Production Warning: {warning}")

    if errors:
        for error in errors:
            logger.error(f"❌ Production Error: {error}")

        print("\n" + "=" * 60)
        print("❌ CRITICAL PRODUCTION CONFIGURATION ERRORS:")
        print("=" * 60)
        for error in errors:
            print(f"  • {error}")
        print("=" * 60 + "\n")

        sys.exit(1)

    return True


def get_config(env=None):
    """Get configuration based on environment"""
    env = env or os.getenv('FLASK_ENV', 'development')

    if env == 'production':
        validate_production_config()

    return config.get(env, config['default'])
