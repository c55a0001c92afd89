# -*- coding: utf-8 -*-
"""
Routes Package - Flask Blueprints
"""
from enerjios.routes.auth import auth_bp
from enerjios.routes.health import health_bp
from enerjios.routes.customers import customers_bp
from enerjios.routes.projects import projects_bp
from enerjios.routes.products import products_bp
from enerjios.routes.quotes import quotes_bp, public_quotes_bp, cron_bp
from enerjios.routes.hr import hr_bp
from enerjios.routes.kvkk import kvkk_bp
from enerjios.routes.partners import partners_bp
from enerjios.routes.notifications import notifications_bp
from enerjios.routes.exchange_rates import exchange_rates_bp
from enerjios.routes.photos import photos_bp, public_photos_bp
from enerjios.routes.reports import reports_bp
from enerjios.routes.solar import solar_bp

BLUEPRINTS = [
    auth_bp, health_bp, customers_bp, projects_bp, products_bp,
    quotes_bp, public_quotes_bp, cron_bp, hr_bp, kvkk_bp, partners_bp,
    notifications_bp, exchange_rates_bp, photos_bp, public_photos_bp,
    reports_bp, solar_bp,
]

__all__ = [
    'auth_bp', 'health_bp', 'customers_bp', 'projects_bp', 'products_bp',
    'quotes_bp', 'public_quotes_bp', 'cron_bp', 'hr_bp', 'kvkk_bp', 'partners_bp',
    'notifications_bp', 'exchange_rates_bp', 'photos_bp', 'public_photos_bp',
    'reports_bp', 'solar_bp', 'BLUEPRINTS',
]
