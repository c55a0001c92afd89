# -*- coding: utf-8 -*-
"""
Tests for KVKK applications, compliance scoring and deadline monitoring
"""
from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from enerjios.models import KVKKApplication, KVKKAuditAction, KVKKAuditLog, KVKKStatus
from enerjios.services import kvkk_compliance, kvkk_scheduler
from enerjios.utils.errors import ValidationError
from enerjios.utils.timezone import utc_now_naive

NOW = datetime(2024, 6, 30, 12, 0)


def _app(status, submitted, deadline, processed=None):
    return SimpleNamespace(status=status, submitted_at=submitted,
                           response_deadline=deadline, processed_at=processed)


def _application(db_session, no, submitted, status=KVKKStatus.PENDING):
    application = KVKKApplication(
        application_no=no,
        request_type='DATA_ACCESS',
        status=status,
        full_name='Zeynep Kaya',
        tc_no='12345678901',
        email='zeynep@example.com',
        details='Hakkımda işlenen verileri öğrenmek istiyorum.',
        submitted_at=submitted,
        response_deadline=submitted + timedelta(days=30),
    )
    db_session.add(application)
    db_session.commit()
    return application


class TestComplianceMetrics:
    """Score, risk level and trend from loaded applications"""

    def test_empty_period_is_fully_compliant(self):
        metrics = kvkk_compliance.compute_compliance_metrics([], NOW)
        assert metrics['compliance_score'] == 100
        assert metrics['total_applications'] == 0

    def test_nothing_completed_yet_is_not_penalized(self):
        apps = [_app(KVKKStatus.PENDING, datetime(2024, 6, 20), datetime(2024, 7, 20))]
        metrics = kvkk_compliance.compute_compliance_metrics(apps, NOW)
        assert metrics['compliance_score'] == 100
        assert metrics['pending_applications'] == 1

    def test_mixed_applications(self):
        apps = [
            _app(KVKKStatus.COMPLETED, datetime(2024, 6, 1), datetime(2024, 7, 1), datetime(2024, 6, 11)),
            _app(KVKKStatus.COMPLETED, datetime(2024, 6, 5), datetime(2024, 7, 5), datetime(2024, 6, 15)),
            _app(KVKKStatus.COMPLETED, datetime(2024, 5, 1), datetime(2024, 5, 31), datetime(2024, 6, 10)),
            _app(KVKKStatus.PENDING, datetime(2024, 5, 15), datetime(2024, 6, 14)),
            _app(KVKKStatus.IN_PROGRESS, datetime(2024, 6, 20), datetime(2024, 7, 20)),
        ]
        metrics = kvkk_compliance.compute_compliance_metrics(apps, NOW)

        assert metrics['completed_on_time'] == 2
        assert metrics['completed_late'] == 1
        assert metrics['pending_applications'] == 2
        assert metrics['overdue_applications'] == 1
        assert metrics['average_response_days'] == 20
        # round(2/3 * 100) - round(1/5 * 50)
        assert metrics['compliance_score'] == 57

    def test_slow_answers_cost_points(self):
        apps = [_app(KVKKStatus.COMPLETED, datetime(2024, 5, 1), datetime(2024, 5, 31), datetime(2024, 5, 28))]
        metrics = kvkk_compliance.compute_compliance_metrics(apps, NOW)
        assert metrics['average_response_days'] == 27
        assert metrics['compliance_score'] == 90

    def test_risk_levels(self):
        assert kvkk_compliance.determine_risk_level(95, 0, 10) == 'LOW'
        assert kvkk_compliance.determine_risk_level(80, 0, 10) == 'MEDIUM'
        assert kvkk_compliance.determine_risk_level(95, 1, 10) == 'MEDIUM'
        assert kvkk_compliance.determine_risk_level(90, 0, 26) == 'HIGH'
        assert kvkk_compliance.determine_risk_level(90, 6, 10) == 'CRITICAL'
        assert kvkk_compliance.determine_risk_level(40, 0, 10) == 'CRITICAL'

    def test_recommendations_never_empty(self):
        metrics = kvkk_compliance.compute_compliance_metrics([], NOW)
        metrics['compliance_score'] = 88
        assert kvkk_compliance.generate_recommendations(metrics) == ['Genel uyumluluk durumu tatmin edici']

    def test_trend_groups_by_submission_day(self):
        apps = [
            _app(KVKKStatus.COMPLETED, datetime(2024, 6, 1, 9), datetime(2024, 7, 1), datetime(2024, 6, 3)),
            _app(KVKKStatus.PENDING, datetime(2024, 6, 1, 15), datetime(2024, 7, 1)),
            _app(KVKKStatus.PENDING, datetime(2024, 5, 20), datetime(2024, 6, 19)),
        ]
        trend = kvkk_compliance.compute_compliance_trend(apps, NOW)

        assert [day['date'] for day in trend] == ['2024-05-20', '2024-06-01']
        assert trend[0]['overdue_count'] == 1
        assert trend[1]['score'] == 50
        assert trend[1]['total_applications'] == 2


class TestDeadlineRules:
    """Overdue and due-soon boundaries at a fixed now"""

    def test_deadline_now_is_not_overdue(self):
        application = _app(KVKKStatus.PENDING, NOW - timedelta(days=30), NOW)
        assert not kvkk_scheduler.is_overdue(application, NOW)
        assert kvkk_scheduler.is_overdue(application, NOW + timedelta(seconds=1))

    def test_in_progress_counts_as_open(self):
        deadline = NOW - timedelta(days=1)
        assert kvkk_scheduler.is_overdue(_app(KVKKStatus.IN_PROGRESS, NOW - timedelta(days=31), deadline), NOW)
        assert not kvkk_scheduler.is_overdue(_app(KVKKStatus.COMPLETED, NOW - timedelta(days=31), deadline), NOW)
        assert not kvkk_scheduler.is_overdue(_app(KVKKStatus.REJECTED, NOW - timedelta(days=31), deadline), NOW)

    def test_due_soon_window_is_inclusive(self):
        submitted = NOW - timedelta(days=23)
        assert kvkk_scheduler.is_due_soon(_app(KVKKStatus.PENDING, submitted, NOW + timedelta(days=7)), NOW)
        assert kvkk_scheduler.is_due_soon(_app(KVKKStatus.IN_PROGRESS, submitted, NOW), NOW)
        assert not kvkk_scheduler.is_due_soon(
            _app(KVKKStatus.PENDING, submitted, NOW + timedelta(days=7, seconds=1)), NOW)

    def test_past_deadline_is_not_due_soon(self):
        application = _app(KVKKStatus.PENDING, NOW - timedelta(days=31), NOW - timedelta(minutes=1))
        assert not kvkk_scheduler.is_due_soon(application, NOW)
        assert kvkk_scheduler.is_overdue(application, NOW)

    def test_selection(self):
        late = _app(KVKKStatus.PENDING, NOW - timedelta(days=35), NOW - timedelta(days=5))
        soon = _app(KVKKStatus.IN_PROGRESS, NOW - timedelta(days=27), NOW + timedelta(days=3))
        fresh = _app(KVKKStatus.PENDING, NOW - timedelta(days=1), NOW + timedelta(days=29))
        done = _app(KVKKStatus.COMPLETED, NOW - timedelta(days=35), NOW - timedelta(days=5))
        applications = [late, soon, fresh, done]

        assert kvkk_scheduler.select_overdue(applications, NOW) == [late]
        assert kvkk_scheduler.select_due_soon(applications, NOW) == [soon]

    def test_exclude_already_notified(self):
        first, second = SimpleNamespace(id=1), SimpleNamespace(id=2)
        assert kvkk_scheduler.exclude_already_notified([first, second], {1}) == [second]


class TestDeadlineMonitoring:
    """Overdue alerts, reminders and the daily report are sent once"""

    @patch('enerjios.services.email_service.EmailService.send_email', return_value=(True, 'ok'))
    def test_overdue_notified_again_next_day(self, mock_send, db_session):
        now = utc_now_naive().replace(hour=12, minute=0, second=0, microsecond=0)
        _application(db_session, 'KVKK-T-6', now - timedelta(days=35))

        today = kvkk_scheduler.check_and_notify_overdue_applications(now)
        tomorrow = kvkk_scheduler.check_and_notify_overdue_applications(now + timedelta(days=1))

        assert today['notified'] == 1
        assert tomorrow['notified'] == 1
        assert mock_send.call_count == 2

    @patch('enerjios.services.email_service.EmailService.send_email', return_value=(True, 'ok'))
    def test_reminder_repeats_after_three_days(self, mock_send, db_session):
        now = utc_now_naive().replace(second=0, microsecond=0)
        _application(db_session, 'KVKK-T-7', now - timedelta(days=24))

        first = kvkk_scheduler.check_and_send_reminders(now)
        within = kvkk_scheduler.check_and_send_reminders(now + timedelta(days=2, hours=23))
        after = kvkk_scheduler.check_and_send_reminders(now + timedelta(days=3, minutes=1))

        assert first['notified'] == 1
        assert within['notified'] == 0
        assert after['notified'] == 1

    @patch('enerjios.services.email_service.EmailService.send_email', return_value=(True, 'ok'))
    def test_overdue_notified_once_per_day(self, mock_send, db_session):
        now = utc_now_naive().replace(hour=12, minute=0)
        _application(db_session, 'KVKK-T-1', now - timedelta(days=35))

        first = kvkk_scheduler.check_and_notify_overdue_applications(now)
        second = kvkk_scheduler.check_and_notify_overdue_applications(now + timedelta(minutes=30))

        assert first['notified'] == 1
        assert second['notified'] == 0
        assert second['already_notified'] == 1
        assert mock_send.call_count == 1

    @patch('enerjios.services.email_service.EmailService.send_email', return_value=(False, 'down'))
    def test_failed_delivery_is_not_audited(self, mock_send, db_session):
        now = utc_now_naive()
        _application(db_session, 'KVKK-T-2', now - timedelta(days=40))

        result = kvkk_scheduler.check_and_notify_overdue_applications(now)

        assert result['notified'] == 0
        assert KVKKAuditLog.query.filter_by(
            action=KVKKAuditAction.OVERDUE_NOTIFICATION_SENT).count() == 0

    @patch('enerjios.services.email_service.EmailService.send_email', return_value=(True, 'ok'))
    def test_reminder_for_due_soon_application(self, mock_send, db_session):
        now = utc_now_naive()
        _application(db_session, 'KVKK-T-3', now - timedelta(days=26))
        _application(db_session, 'KVKK-T-4', now - timedelta(days=5))

        first = kvkk_scheduler.check_and_send_reminders(now)
        second = kvkk_scheduler.check_and_send_reminders(now + timedelta(days=1))

        assert first['due_soon_count'] == 1
        assert first['notified'] == 1
        assert second['notified'] == 0

    def test_completed_applications_are_not_monitored(self, db_session):
        now = utc_now_naive()
        _application(db_session, 'KVKK-T-5', now - timedelta(days=45), status=KVKKStatus.COMPLETED)

        result = kvkk_scheduler.check_and_notify_overdue_applications(now)
        assert result['overdue_count'] == 0

    @patch('enerjios.services.email_service.EmailService.send_email', return_value=(True, 'ok'))
    def test_daily_report_sent_once(self, mock_send, db_session):
        morning = utc_now_naive().replace(hour=9, minute=10, second=0, microsecond=0)

        first = kvkk_scheduler.run_automated_monitoring(morning)
        second = kvkk_scheduler.run_automated_monitoring(morning + timedelta(minutes=15))

        assert first['daily_report']['sent'] is True
        assert second['daily_report'] == {'sent': False, 'reason': 'already_sent_today'}
        assert KVKKAuditLog.query.filter_by(
            action=KVKKAuditAction.AUTOMATED_MONITORING_EXECUTED).count() == 2

    def test_outside_report_window(self, db_session):
        afternoon = utc_now_naive().replace(hour=15, minute=0)
        result = kvkk_scheduler.run_automated_monitoring(afternoon)
        assert result['daily_report'] is None

    def test_unknown_scheduler_action(self, db_session):
        with pytest.raises(ValidationError):
            kvkk_scheduler.run_action('delete_everything')


class TestKVKKAPI:
    """Public application form and admin endpoints"""

    PAYLOAD = {
        'request_type': 'deletion',
        'full_name': 'Zeynep Kaya',
        'tc_no': '12345678901',
        'email': 'Zeynep@Example.com',
        'phone': '05551234567',
        'address': 'Atatürk Cad. No:1',
        'city': 'İzmir',
        'district': 'Konak',
        'details': 'Tüm kişisel verilerimin silinmesini talep ediyorum.',
        'consent_to_process': True,
        'accept_terms': True,
    }

    @patch('enerjios.services.email_service.EmailService.send_email', return_value=(True, 'ok'))
    def test_submit_application(self, mock_send, client):
        response = client.post('/api/kvkk/applications', json=self.PAYLOAD)

        assert response.status_code == 201
        data = response.get_json()
        assert data['application_no'].startswith('KVKK-')

        application = KVKKApplication.query.filter_by(application_no=data['application_no']).first()
        assert application.request_type == 'DATA_DELETION'
        assert application.email == 'zeynep@example.com'
        assert application.response_deadline - application.submitted_at == timedelta(days=30)
        assert application.audit_logs.count() == 1

    def test_terms_must_be_accepted(self, client):
        payload = dict(self.PAYLOAD, accept_terms=False)
        response = client.post('/api/kvkk/applications', json=payload)
        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    @patch('enerjios.services.email_service.EmailService.send_email', return_value=(False, 'down'))
    def test_email_failure_does_not_fail_submission(self, mock_send, client):
        response = client.post('/api/kvkk/applications', json=self.PAYLOAD)
        assert response.status_code == 201

    @patch('enerjios.services.email_service.EmailService.send_email', return_value=(True, 'ok'))
    def test_lookup_hides_personal_details(self, mock_send, client):
        created = client.post('/api/kvkk/applications', json=self.PAYLOAD).get_json()

        response = client.get(f"/api/kvkk/applications/lookup?application_no={created['application_no']}")
        assert response.status_code == 200
        application = response.get_json()['applications'][0]
        assert 'tc_no' not in application
        assert 'email' not in application

    def test_lookup_requires_a_parameter(self, client):
        assert client.get('/api/kvkk/applications/lookup').status_code == 400
        assert client.get('/api/kvkk/applications/lookup?email=nobody@example.com').status_code == 404

    def test_admin_only(self, client, company_user, auth_headers):
        response = client.get('/api/kvkk/admin/applications', headers=auth_headers(company_user))
        assert response.status_code == 403

    def test_status_update_sets_processed_at(self, client, db_session, admin_user, auth_headers):
        application = _application(db_session, 'KVKK-T-9', utc_now_naive() - timedelta(days=3))

        response = client.put(f'/api/kvkk/admin/applications/{application.id}/status',
                              headers=auth_headers(admin_user),
                              json={'status': 'COMPLETED', 'response': 'Verileriniz silindi.'})

        assert response.status_code == 200
        data = response.get_json()['application']
        assert data['status'] == 'COMPLETED'
        assert data['processed_at'] is not None

    def test_consent_requires_identity(self, client):
        response = client.post('/api/kvkk/consent', json={'consent_type': 'marketing', 'action': 'granted'})
        assert response.status_code == 400

        response = client.post('/api/kvkk/consent', json={
            'consent_type': 'marketing', 'action': 'granted', 'email': 'zeynep@example.com',
        })
        assert response.status_code == 201
        assert response.get_json()['consent']['consent_version'] == '1.0'
