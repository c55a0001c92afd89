# -*- coding: utf-8 -*-
"""
Tests for in-app notifications and the per-user rate limit on listing them
"""
import pytest

from enerjios.models import Notification


@pytest.fixture
def notifications(db_session, company_user, admin_user):
    rows = [
        Notification.create(company_user.id, 'QUOTE_VIEWED', 'Teklif Görüntülendi'),
        Notification.create(company_user.id, 'QUOTE_ACCEPTED', 'Teklif Onaylandı'),
        Notification.create(admin_user.id, 'SYSTEM', 'Sistem'),
    ]
    db_session.commit()
    return rows


class TestNotificationAPI:
    """Listing and marking notifications"""

    def test_list_own_notifications(self, client, company_user, notifications, auth_headers):
        response = client.get('/api/notifications', headers=auth_headers(company_user))

        assert response.status_code == 200
        data = response.get_json()
        assert data['total'] == 2
        assert data['unread_count'] == 2

    def test_mark_read(self, client, company_user, notifications, auth_headers):
        headers = auth_headers(company_user)
        response = client.post(f'/api/notifications/{notifications[0].id}/read', headers=headers)

        assert response.status_code == 200
        assert response.get_json()['notification']['read'] is True
        unread = client.get('/api/notifications?unread=true', headers=headers).get_json()
        assert unread['total'] == 1

    def test_cannot_mark_other_users_notification(self, client, company_user, notifications, auth_headers):
        response = client.post(f'/api/notifications/{notifications[2].id}/read',
                               headers=auth_headers(company_user))
        assert response.status_code == 404

    def test_mark_all_read(self, client, company_user, notifications, auth_headers):
        response = client.post('/api/notifications/read-all', headers=auth_headers(company_user))
        assert response.get_json()['updated'] == 2

    def test_requires_login(self, client):
        assert client.get('/api/notifications').status_code == 401


class TestNotificationRateLimit:
    """Listing is limited per user with a fixed window"""

    def test_limit_is_per_user(self, tmp_path):
        from config import TestingConfig
        from enerjios import create_app
        from enerjios.extensions import db
        from enerjios.models import User, UserRole
        from enerjios.utils.security import create_access_token

        class Config(TestingConfig):
            RATELIMIT_ENABLED = True
            NOTIFICATIONS_RATE_LIMIT = '2 per minute'
            UPLOAD_FOLDER = str(tmp_path / 'uploads')

        app = create_app(Config)
        with app.app_context():
            db.create_all()
            try:
                first = User(email='first@example.com', name='Birinci', role=UserRole.ADMIN)
                second = User(email='second@example.com', name='İkinci', role=UserRole.ADMIN)
                first.set_password('TestPassword123!')
                second.set_password('TestPassword123!')
                db.session.add_all([first, second])
                db.session.commit()

                client = app.test_client()
                first_headers = {'Authorization': f'Bearer {create_access_token(first)}'}
                second_headers = {'Authorization': f'Bearer {create_access_token(second)}'}

                assert client.get('/api/notifications', headers=first_headers).status_code == 200
                assert client.get('/api/notifications', headers=first_headers).status_code == 200

                limited = client.get('/api/notifications', headers=first_headers)
                assert limited.status_code == 429
                assert limited.get_json()['code'] == 'RATE_LIMIT_EXCEEDED'

                assert client.get('/api/notifications', headers=second_headers).status_code == 200
            finally:
                db.session.remove()
                db.drop_all()
