# -*- coding: utf-8 -*-
"""
Unit Tests for Authentication, Health and Error Responses
Tests registration, login, tokens, health probes and JSON error bodies
"""
from datetime import timedelta
from unittest.mock import patch

import jwt

from enerjios.models import Company, UserRole

PASSWORD = 'TestPassword123!'


class TestRegister:
    """Tests for account registration"""

    def test_register_customer(self, client):
        """Test that a customer account is created with a token"""
        response = client.post('/api/auth/register', json={
            'email': 'Yeni@Example.com',
            'password': 'GucluSifre123',
            'name': 'Elif Şahin',
        })
        assert response.status_code == 201
        data = response.get_json()
        assert data['user']['email'] == 'yeni@example.com'
        assert data['user']['role'] == 'CUSTOMER'
        assert data['token']

    def test_register_company_creates_company(self, client):
        """Test that a company account registers its company"""
        response = client.post('/api/auth/register', json={
            'email': 'firma@example.com',
            'password': 'GucluSifre123',
            'name': 'Firma Sahibi',
            'role': 'COMPANY',
            'company_name': 'Yeni Enerji Ltd.',
            'tax_number': '5555555555',
        })
        assert response.status_code == 201
        company = Company.query.filter_by(tax_number='5555555555').first()
        assert response.get_json()['user']['company_id'] == company.id

    def test_company_requires_tax_number(self, client):
        response = client.post('/api/auth/register', json={
            'email': 'firma@example.com',
            'password': 'GucluSifre123',
            'name': 'Firma Sahibi',
            'role': 'COMPANY',
            'company_name': 'Yeni Enerji Ltd.',
        })
        assert response.status_code == 400

    def test_duplicate_email(self, client, company_user):
        """Test that an existing email cannot register again"""
        response = client.post('/api/auth/register', json={
            'email': company_user.email.upper(),
            'password': 'GucluSifre123',
            'name': 'Başka Biri',
        })
        assert response.status_code == 409
        assert response.get_json()['code'] == 'CONFLICT'

    def test_admin_role_cannot_be_self_assigned(self, client):
        response = client.post('/api/auth/register', json={
            'email': 'hacker@example.com',
            'password': 'GucluSifre123',
            'name': 'Hacker',
            'role': UserRole.ADMIN,
        })
        assert response.status_code == 400

    def test_short_password(self, client):
        response = client.post('/api/auth/register', json={
            'email': 'kisa@example.com', 'password': '123', 'name': 'Kısa Şifre',
        })
        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'


class TestLogin:
    """Tests for login and bearer tokens"""

    def test_login_with_valid_credentials(self, client, company_user):
        """Test successful login returns a usable token"""
        response = client.post('/api/auth/login', json={
            'email': 'OWNER@testsolar.com', 'password': PASSWORD,
        })
        assert response.status_code == 200
        token = response.get_json()['token']

        me = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert me.status_code == 200
        assert me.get_json()['user']['id'] == company_user.id

    def test_login_with_invalid_password(self, client, company_user):
        """Test login fails with wrong password"""
        response = client.post('/api/auth/login', json={
            'email': company_user.email, 'password': 'wrongpassword',
        })
        assert response.status_code == 401
        assert response.get_json()['code'] == 'AUTHENTICATION_ERROR'

    def test_inactive_account(self, client, db_session, company_user):
        company_user.is_active = False
        db_session.commit()
        response = client.post('/api/auth/login', json={
            'email': company_user.email, 'password': PASSWORD,
        })
        assert response.status_code == 401

    def test_expired_token(self, app, client, company_user):
        """Test that an expired token is rejected"""
        from enerjios.utils.timezone import utc_now

        now = utc_now()
        token = jwt.encode(
            {'sub': str(company_user.id), 'iat': now - timedelta(hours=2), 'exp': now - timedelta(hours=1)},
            app.config['JWT_SECRET'], algorithm='HS256',
        )
        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401

    def test_tampered_token(self, client, company_user, auth_headers):
        headers = auth_headers(company_user)
        headers['Authorization'] += 'x'
        assert client.get('/api/auth/me', headers=headers).status_code == 401


class TestHealth:
    """Tests for health probes"""

    def test_basic_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json()['service'] == 'enerjios'

    def test_liveness_and_readiness(self, client):
        assert client.get('/health/live').get_json() == {'alive': True}
        assert client.get('/health/ready').status_code == 200

    @patch('enerjios.celery_app.celery.control.inspect', side_effect=ConnectionError('broker down'))
    @patch('redis.from_url', side_effect=ConnectionError('redis down'))
    def test_detailed_health_degraded_without_redis(self, mock_redis, mock_inspect, client):
        """Test that a Redis outage marks the service degraded"""
        response = client.get('/health/detailed')
        assert response.status_code == 503
        data = response.get_json()
        assert data['status'] == 'degraded'
        assert data['checks']['database']['status'] == 'ok'
        assert data['checks']['redis']['status'] == 'error'


class TestErrorResponses:
    """Tests for JSON error bodies"""

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/does-not-exist')
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'

    def test_invalid_json_body(self, client):
        response = client.post('/api/auth/login', data='not-json', content_type='application/json')
        assert response.status_code == 400
