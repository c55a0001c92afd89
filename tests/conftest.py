# -*- coding: utf-8 -*-
"""
Pytest Configuration and Fixtures
Shared fixtures for all test modules
"""
import os
import sys
from datetime import date

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

PASSWORD = 'TestPassword123!'


@pytest.fixture(scope='function')
def app(tmp_path):
    """Fresh application and in-memory database per test"""
    from config import TestingConfig
    from enerjios import create_app
    from enerjios.extensions import db

    class Config(TestingConfig):
        UPLOAD_FOLDER = str(tmp_path / 'uploads')

    app = create_app(Config)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Test client fixture (function-scoped)"""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    from enerjios.extensions import db
    return db.session


def _make_user(db_session, email, role, company=None, name='Test User'):
    from enerjios.models import User

    user = User(email=email, name=name, role=role,
                company_id=company.id if company else None, is_active=True)
    user.set_password(PASSWORD)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def company(db_session):
    """Create a test company"""
    from enerjios.models import Company

    company = Company(name='Test Solar A.Ş.', tax_number='1234567890',
                      email='info@testsolar.com', city='İzmir', is_active=True)
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture(scope='function')
def other_company(db_session):
    from enerjios.models import Company

    company = Company(name='Rakip Enerji Ltd.', tax_number='9876543210', city='Bursa')
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture(scope='function')
def company_user(db_session, company):
    """Company owner account"""
    from enerjios.models import UserRole
    return _make_user(db_session, 'owner@testsolar.com', UserRole.COMPANY, company, 'Firma Sahibi')


@pytest.fixture(scope='function')
def admin_user(db_session):
    """Create a test admin user"""
    from enerjios.models import UserRole
    return _make_user(db_session, 'admin@enerjios.com', UserRole.ADMIN, name='Admin User')


@pytest.fixture(scope='function')
def employee_user(db_session, company):
    """Employee account with an Employee record hired in 2019"""
    from enerjios.models import Department, Employee, UserRole

    user = _make_user(db_session, 'staff@testsolar.com', UserRole.EMPLOYEE, company, 'Ayşe Yılmaz')
    department = Department(company_id=company.id, name='Saha Ekibi')
    db_session.add(department)
    db_session.flush()
    db_session.add(Employee(
        company_id=company.id, user_id=user.id, department_id=department.id,
        employee_code='EMP-001', first_name='Ayşe', last_name='Yılmaz',
        hire_date=date(2019, 1, 15),
    ))
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def customer(db_session, company):
    from enerjios.models import Customer

    customer = Customer(company_id=company.id, first_name='Mehmet', last_name='Demir',
                        email='mehmet@example.com', phone='0555 111 22 33', city='İzmir')
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def auth_headers(app):
    """Build Authorization headers for a user"""
    from enerjios.utils.security import create_access_token

    def _headers(user):
        return {'Authorization': f'Bearer {create_access_token(user)}'}
    return _headers


@pytest.fixture(scope='function')
def make_quote(db_session):
    """Factory for quotes in any status"""
    from enerjios.models import Quote, QuoteItem, QuoteStatus

    counter = {'n': 0}

    def _make(company, creator, customer=None, status=QuoteStatus.DRAFT, valid_until=None,
              token=None, **kwargs):
        counter['n'] += 1
        quote = Quote(
            quote_number=f'TKL-TEST-{counter["n"]:04d}',
            company_id=company.id,
            customer_id=customer.id if customer else None,
            created_by_id=creator.id,
            title='10 kWp Çatı GES',
            status=status,
            valid_until=valid_until,
            delivery_token=token,
            tax_rate=20,
            **kwargs
        )
        quote.items = [QuoteItem(description='550W Panel', quantity=18, unit_price=5000)]
        quote.recalculate_totals()
        db_session.add(quote)
        db_session.commit()
        return quote
    return _make
