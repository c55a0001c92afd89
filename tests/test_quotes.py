# -*- coding: utf-8 -*-
"""
Tests for quotes: totals, multi-channel delivery, expiry and the public flow
"""
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
import requests

from enerjios.models import Notification, QuoteStatus
from enerjios.services.quote_delivery import deliver_quote
from enerjios.services.quote_scheduler import (
    check_expired_quotes, expire_if_needed, send_expiry_warnings,
)
from enerjios.utils.errors import AuthorizationError, ValidationError
from enerjios.utils.timezone import utc_now_naive

EMAIL_PATCH = 'enerjios.services.email_service.EmailService.send_email'
HTTP_PATCH = 'enerjios.services.messaging.requests.post'


def _ok_response():
    response = MagicMock()
    response.ok = True
    response.status_code = 200
    return response


class TestQuoteTotals:
    """Totals are derived from the line items"""

    def test_totals_with_tax(self, company, company_user, make_quote):
        quote = make_quote(company, company_user)
        assert quote.subtotal == 90000
        assert quote.tax == 18000
        assert quote.total == 108000

    def test_create_via_api(self, client, company_user, customer, auth_headers):
        response = client.post('/api/quotes', headers=auth_headers(company_user), json={
            'customer_id': customer.id,
            'title': 'Çatı GES',
            'discount': 200,
            'tax_rate': 20,
            'items': [{'description': 'Montaj', 'quantity': 2, 'unit_price': 1000}],
        })

        assert response.status_code == 201
        quote = response.get_json()['quote']
        assert quote['status'] == 'DRAFT'
        assert quote['subtotal'] == 2000
        assert quote['tax'] == 360
        assert quote['total'] == 2160
        assert quote['valid_until'] is not None

    def test_customer_of_other_company_rejected(self, client, company_user, other_company,
                                                db_session, auth_headers):
        from enerjios.models import Customer

        stranger = Customer(company_id=other_company.id, first_name='Ali', last_name='Veli')
        db_session.add(stranger)
        db_session.commit()

        response = client.post('/api/quotes', headers=auth_headers(company_user), json={
            'customer_id': stranger.id,
            'items': [{'description': 'Panel', 'quantity': 1, 'unit_price': 10}],
        })
        assert response.status_code == 404


class TestQuoteDelivery:
    """Each channel is attempted on its own; any success sends the quote"""

    @patch(HTTP_PATCH)
    @patch(EMAIL_PATCH, return_value=(True, 'ok'))
    def test_all_channels_succeed(self, mock_email, mock_post, company, company_user, customer, make_quote):
        mock_post.return_value = _ok_response()
        quote = make_quote(company, company_user, customer)

        report = deliver_quote(quote, ['EMAIL', 'WHATSAPP', 'SMS'], company_user)

        assert report.success is True
        assert [r['channel'] for r in report.results] == ['EMAIL', 'WHATSAPP', 'SMS']
        assert quote.status == QuoteStatus.SENT
        assert quote.delivery_token
        assert quote.delivery_channel == 'EMAIL,WHATSAPP,SMS'
        assert mock_post.call_count == 2

    @patch(HTTP_PATCH, side_effect=requests.ConnectionError('gateway down'))
    @patch(EMAIL_PATCH, return_value=(True, 'ok'))
    def test_failing_channel_does_not_block_others(self, mock_email, mock_post,
                                                   company, company_user, customer, make_quote):
        quote = make_quote(company, company_user, customer)

        report = deliver_quote(quote, ['WHATSAPP', 'EMAIL'], company_user)

        assert report.success is True
        whatsapp = report.results[0]
        assert whatsapp['success'] is False
        assert whatsapp['error']
        assert quote.delivery_channel == 'EMAIL'

    @patch(HTTP_PATCH, side_effect=requests.Timeout('slow'))
    @patch(EMAIL_PATCH, return_value=(False, 'SMTP hatası'))
    def test_all_channels_fail(self, mock_email, mock_post, company, company_user, customer, make_quote):
        quote = make_quote(company, company_user, customer)

        report = deliver_quote(quote, ['EMAIL', 'SMS'], company_user)

        assert report.success is False
        assert quote.status == QuoteStatus.DRAFT
        assert quote.delivery_token is None

    def test_missing_phone_for_whatsapp(self, company, company_user, make_quote):
        quote = make_quote(company, company_user)

        report = deliver_quote(quote, ['WHATSAPP'], company_user, email='x@example.com')

        assert report.success is False
        assert report.results[0]['error'] == 'Telefon numarası bulunamadı'

    def test_only_creator_can_send(self, company, company_user, admin_user, customer, make_quote):
        quote = make_quote(company, company_user, customer)
        with pytest.raises(AuthorizationError):
            deliver_quote(quote, ['EMAIL'], admin_user)

    def test_only_drafts_can_be_sent(self, company, company_user, customer, make_quote):
        quote = make_quote(company, company_user, customer, status=QuoteStatus.APPROVED)
        with pytest.raises(ValidationError):
            deliver_quote(quote, ['EMAIL'], company_user)

    def test_contact_required(self, company, company_user, make_quote):
        quote = make_quote(company, company_user)
        with pytest.raises(ValidationError):
            deliver_quote(quote, ['EMAIL'], company_user)

    @patch(EMAIL_PATCH, return_value=(True, 'ok'))
    def test_send_endpoint(self, mock_email, client, company, company_user, customer,
                           make_quote, auth_headers):
        quote = make_quote(company, company_user, customer)

        response = client.post(f'/api/quotes/{quote.id}/send', headers=auth_headers(company_user),
                               json={'channels': ['EMAIL', 'EMAIL']})

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert len(data['results']) == 1
        assert data['public_url'].startswith('http://testserver/quotes/view/')


class TestQuoteExpiry:
    """Out-of-date quotes expire exactly once"""

    def test_expire_once(self, db_session, company, company_user, make_quote):
        now = utc_now_naive()
        quote = make_quote(company, company_user, status=QuoteStatus.SENT,
                           valid_until=now - timedelta(days=1), token='tok-expire')

        assert expire_if_needed(quote, now) is True
        db_session.commit()
        assert expire_if_needed(quote, now) is False
        assert check_expired_quotes(now)['expired'] == 0

        assert quote.status == QuoteStatus.EXPIRED
        assert Notification.query.filter_by(type='QUOTE_EXPIRED').count() == 1

    def test_valid_quote_not_expired(self, company, company_user, make_quote):
        now = utc_now_naive()
        quote = make_quote(company, company_user, status=QuoteStatus.VIEWED,
                           valid_until=now + timedelta(days=5))
        assert expire_if_needed(quote, now) is False

    def test_drafts_never_expire(self, company, company_user, make_quote):
        now = utc_now_naive()
        quote = make_quote(company, company_user, valid_until=now - timedelta(days=5))
        assert expire_if_needed(quote, now) is False

    def test_scheduler_expires_open_quotes(self, company, company_user, make_quote):
        now = utc_now_naive()
        make_quote(company, company_user, status=QuoteStatus.SENT, valid_until=now - timedelta(hours=1))
        make_quote(company, company_user, status=QuoteStatus.VIEWED, valid_until=now - timedelta(days=3))
        make_quote(company, company_user, status=QuoteStatus.APPROVED, valid_until=now - timedelta(days=3))

        assert check_expired_quotes(now)['expired'] == 2
        assert check_expired_quotes(now)['expired'] == 0

    @patch(EMAIL_PATCH, return_value=(True, 'ok'))
    def test_expiry_warning_not_repeated(self, mock_email, company, company_user, customer, make_quote):
        now = utc_now_naive()
        make_quote(company, company_user, customer, status=QuoteStatus.SENT,
                   valid_until=now + timedelta(days=1), token='tok-warn',
                   delivery_email='mehmet@example.com')

        assert send_expiry_warnings(now)['warned'] == 1
        assert send_expiry_warnings(now)['warned'] == 0
        assert mock_email.call_count == 1


class TestPublicQuoteFlow:
    """Customer view, approval and rejection through the token link"""

    APPROVAL = {'customer_name': 'Mehmet Demir', 'accepted_terms': True, 'comments': 'Uygun'}

    def test_view_marks_viewed(self, client, company, company_user, customer, make_quote):
        make_quote(company, company_user, customer, status=QuoteStatus.SENT,
                   valid_until=utc_now_naive() + timedelta(days=10), token='tok-view')

        response = client.get('/api/public/quotes/tok-view')

        assert response.status_code == 200
        data = response.get_json()['quote']
        assert data['status'] == 'VIEWED'
        assert 'delivery_email' not in data
        assert Notification.query.filter_by(type='QUOTE_VIEWED').count() == 1

    def test_unknown_token(self, client):
        assert client.get('/api/public/quotes/nope').status_code == 404

    def test_expired_quote_is_gone(self, client, company, company_user, make_quote):
        make_quote(company, company_user, status=QuoteStatus.SENT,
                   valid_until=utc_now_naive() - timedelta(days=1), token='tok-old')

        assert client.get('/api/public/quotes/tok-old').status_code == 410
        assert client.get('/api/public/quotes/tok-old').status_code == 410
        assert Notification.query.filter_by(type='QUOTE_EXPIRED').count() == 1

    @patch(HTTP_PATCH)
    @patch(EMAIL_PATCH, return_value=(True, 'ok'))
    def test_approve(self, mock_email, mock_post, client, company, company_user, customer, make_quote):
        mock_post.return_value = _ok_response()
        make_quote(company, company_user, customer, status=QuoteStatus.VIEWED,
                   valid_until=utc_now_naive() + timedelta(days=10), token='tok-ok',
                   delivery_email='mehmet@example.com')

        response = client.post('/api/public/quotes/tok-ok/approve', json=self.APPROVAL)

        assert response.status_code == 200
        assert response.get_json()['quote']['status'] == 'APPROVED'
        assert Notification.query.filter_by(type='QUOTE_ACCEPTED').count() == 1

        again = client.post('/api/public/quotes/tok-ok/reject', json={})
        assert again.status_code == 400

    def test_approval_requires_terms(self, client, company, company_user, make_quote):
        make_quote(company, company_user, status=QuoteStatus.SENT,
                   valid_until=utc_now_naive() + timedelta(days=10), token='tok-terms')

        response = client.post('/api/public/quotes/tok-terms/approve',
                               json=dict(self.APPROVAL, accepted_terms=False))
        assert response.status_code == 400

    def test_reject_without_body(self, client, company, company_user, make_quote):
        make_quote(company, company_user, status=QuoteStatus.SENT,
                   valid_until=utc_now_naive() + timedelta(days=10), token='tok-no')

        response = client.post('/api/public/quotes/tok-no/reject')
        assert response.status_code == 200
        assert response.get_json()['quote']['status'] == 'REJECTED'


class TestQuoteCron:
    """Scheduler endpoint guarded by the cron secret"""

    def test_requires_secret(self, client):
        assert client.get('/api/cron/quotes').status_code == 401
        assert client.get('/api/cron/quotes', headers={'Authorization': 'Bearer wrong'}).status_code == 401

    def test_runs_all_tasks(self, client):
        response = client.get('/api/cron/quotes', headers={'Authorization': 'Bearer test-cron-secret'})
        assert response.status_code == 200
        assert set(response.get_json()['results']) == {'expired', 'warnings', 'reminders', 'cleanup', 'analytics'}

    def test_unknown_task(self, client):
        response = client.post('/api/cron/quotes', headers={'Authorization': 'Bearer test-cron-secret'},
                               json={'task': 'explode'})
        assert response.status_code == 400
        assert 'valid_tasks' in response.get_json()['details']
