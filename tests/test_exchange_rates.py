# -*- coding: utf-8 -*-
"""
Tests for manual exchange rates (one active rate per currency)
"""
from enerjios.models import AuditLog, ManualExchangeRate

URL = '/api/admin/exchange-rates'


def _rate(db_session, currency, rate, is_active=True):
    record = ManualExchangeRate(currency=currency, rate=rate, is_active=is_active)
    db_session.add(record)
    db_session.commit()
    return record


class TestExchangeRateAPI:
    """Admin rate management"""

    def test_create_rate(self, client, admin_user, auth_headers):
        response = client.post(URL, headers=auth_headers(admin_user),
                               json={'currency': 'usd', 'rate': 34.25, 'note': 'TCMB satış'})

        assert response.status_code == 201
        assert response.get_json()['rate']['currency'] == 'USD'
        assert AuditLog.query.filter_by(table_name='manual_exchange_rates', action='create').count() == 1

    def test_second_active_rate_conflicts(self, client, db_session, admin_user, auth_headers):
        existing = _rate(db_session, 'USD', 34.0)

        response = client.post(URL, headers=auth_headers(admin_user), json={'currency': 'USD', 'rate': 35.0})

        assert response.status_code == 409
        assert response.get_json()['details']['active_rate_id'] == existing.id

    def test_rate_bounds(self, client, admin_user, auth_headers):
        response = client.post(URL, headers=auth_headers(admin_user), json={'currency': 'EUR', 'rate': 0})
        assert response.status_code == 400

    def test_reactivation_conflicts(self, client, db_session, admin_user, auth_headers):
        _rate(db_session, 'EUR', 37.0)
        old = _rate(db_session, 'EUR', 36.0, is_active=False)

        response = client.put(f'{URL}/{old.id}', headers=auth_headers(admin_user), json={'is_active': True})
        assert response.status_code == 409

    def test_deactivate_then_create(self, client, db_session, admin_user, auth_headers):
        headers = auth_headers(admin_user)
        rate = _rate(db_session, 'USD', 34.0)

        assert client.delete(f'{URL}/{rate.id}', headers=headers).status_code == 200
        assert client.post(URL, headers=headers, json={'currency': 'USD', 'rate': 34.5}).status_code == 201

        active = client.get(f'{URL}?active=true', headers=headers).get_json()['rates']
        assert [r['rate'] for r in active] == [34.5]

    def test_admin_only(self, client, company_user, auth_headers):
        assert client.get(URL, headers=auth_headers(company_user)).status_code == 403


class TestBulkUpdate:
    """Bulk updates are all-or-nothing"""

    def test_bulk_update(self, client, db_session, admin_user, auth_headers):
        usd = _rate(db_session, 'USD', 34.0)
        eur = _rate(db_session, 'EUR', 37.0)

        response = client.put(f'{URL}/bulk', headers=auth_headers(admin_user), json={
            'rates': [{'id': usd.id, 'rate': 34.8}, {'id': eur.id, 'rate': 37.6}],
        })

        assert response.status_code == 200
        assert response.get_json()['updated'] == 2
        assert db_session.get(ManualExchangeRate, eur.id).rate == 37.6

    def test_missing_rate_rolls_back(self, client, db_session, admin_user, auth_headers):
        usd = _rate(db_session, 'USD', 34.0)

        response = client.put(f'{URL}/bulk', headers=auth_headers(admin_user), json={
            'rates': [{'id': usd.id, 'rate': 50.0}, {'id': 9999, 'rate': 1.0}],
        })

        assert response.status_code == 404
        assert db_session.get(ManualExchangeRate, usd.id).rate == 34.0

    def test_conflict_rolls_back(self, client, db_session, admin_user, auth_headers):
        active = _rate(db_session, 'USD', 34.0)
        inactive = _rate(db_session, 'USD', 33.0, is_active=False)

        response = client.put(f'{URL}/bulk', headers=auth_headers(admin_user), json={
            'rates': [{'id': active.id, 'rate': 35.0}, {'id': inactive.id, 'rate': 36.0, 'is_active': True}],
        })

        assert response.status_code == 409
        assert db_session.get(ManualExchangeRate, active.id).rate == 34.0
        assert db_session.get(ManualExchangeRate, inactive.id).is_active is False
