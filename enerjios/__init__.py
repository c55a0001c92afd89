# -*- coding: utf-8 -*-
"""
EnerjiOS - Flask Application Factory
"""
import os
import logging

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def configure_logging(app):
    """Set level and format once for the whole process"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger('enerjios').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_name_or_class=None):
    """
    Application factory

    Args:
        config_name_or_class: 'development' / 'production' / 'testing',
            a config class, or None to read FLASK_ENV
    """
    from config import config, get_config

    if config_name_or_class is None:
        config_class = get_config()
    elif isinstance(config_name_or_class, str):
        config_class = config.get(config_name_or_class, config['default'])
    else:
        config_class = config_name_or_class

    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    # ProxyFix for nginx
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    from enerjios.extensions import init_extensions
    init_extensions(app)

    # Models must be imported before create_all / migrations
    from enerjios import models  # noqa: F401

    register_blueprints(app)

    from enerjios.utils.errors import register_error_handlers
    register_error_handlers(app)

    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    return app


def register_blueprints(app):
    """Register all blueprints"""
    from enerjios.routes import BLUEPRINTS

    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)
        app.logger.info(f"✅ {blueprint.name} blueprint registered")
