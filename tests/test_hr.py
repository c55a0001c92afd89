# -*- coding: utf-8 -*-
"""
Tests for HR: leave rules, leave requests and time tracking
"""
from datetime import date, datetime
from types import SimpleNamespace

from enerjios.models import LeaveStatus, LeaveType
from enerjios.services import leave as leave_service
from enerjios.services import time_tracking


def _leave(id, leave_type, status, days=0, start=None, end=None):
    return SimpleNamespace(id=id, leave_type=leave_type, status=status, days=days,
                           start_date=start, end_date=end)


class TestLeaveRules:
    """Pure leave calculations"""

    def test_business_days_skip_weekend(self):
        # Monday to Sunday
        assert leave_service.calculate_leave_days(date(2024, 1, 1), date(2024, 1, 7)) == 5

    def test_business_days_friday_to_monday(self):
        assert leave_service.calculate_leave_days(date(2024, 1, 5), date(2024, 1, 8)) == 2

    def test_business_days_weekend_only(self):
        assert leave_service.calculate_leave_days(date(2024, 1, 6), date(2024, 1, 7)) == 0

    def test_business_days_reversed_range(self):
        assert leave_service.calculate_leave_days(date(2024, 1, 8), date(2024, 1, 1)) == 0

    def test_entitlement_steps(self):
        assert leave_service.get_vacation_entitlement(0) == 20
        assert leave_service.get_vacation_entitlement(1) == 25
        assert leave_service.get_vacation_entitlement(2) == 25
        assert leave_service.get_vacation_entitlement(3) == 30
        assert leave_service.get_vacation_entitlement(5) == 35
        assert leave_service.get_vacation_entitlement(12) == 35

    def test_years_of_service_never_negative(self):
        assert leave_service.calculate_years_of_service(date(2025, 1, 1), date(2024, 1, 1)) == 0
        assert leave_service.calculate_years_of_service(date(2019, 1, 15), date(2024, 6, 1)) == 5

    def test_summary_counts_only_vacation_against_balance(self):
        requests = [
            _leave(1, LeaveType.VACATION, LeaveStatus.APPROVED, 5),
            _leave(2, LeaveType.VACATION, LeaveStatus.PENDING, 3),
            _leave(3, LeaveType.VACATION, LeaveStatus.REJECTED, 10),
            _leave(4, LeaveType.SICK, LeaveStatus.APPROVED, 2),
            _leave(5, LeaveType.PERSONAL, LeaveStatus.PENDING, 1),
        ]
        summary = leave_service.summarize_leave(requests, 20)

        assert summary['vacation'] == {'total': 20, 'used': 5, 'pending': 3, 'remaining': 12}
        assert summary['sick']['used'] == 2
        assert summary['personal']['pending'] == 1

    def test_remaining_never_negative(self):
        requests = [_leave(1, LeaveType.VACATION, LeaveStatus.APPROVED, 30)]
        assert leave_service.summarize_leave(requests, 20)['vacation']['remaining'] == 0

    def test_conflict_ignores_rejected_requests(self):
        existing = [
            _leave(1, LeaveType.VACATION, LeaveStatus.REJECTED, start=date(2024, 3, 4), end=date(2024, 3, 8)),
            _leave(2, LeaveType.VACATION, LeaveStatus.PENDING, start=date(2024, 3, 11), end=date(2024, 3, 12)),
        ]
        assert leave_service.find_conflicting_leave(existing, date(2024, 3, 5), date(2024, 3, 6)) is None
        conflict = leave_service.find_conflicting_leave(existing, date(2024, 3, 12), date(2024, 3, 14))
        assert conflict.id == 2

    def test_carryover_rules(self):
        rules = leave_service.carryover_rules(2024)
        assert rules == {'vacation_carryover_max_days': 5, 'carryover_deadline': '2025-03-31'}


class TestTimeRules:
    """Worked hours and overtime"""

    def test_hours_with_break(self):
        hours = time_tracking.calculate_hours(datetime(2024, 1, 2, 9, 0), datetime(2024, 1, 2, 18, 30), 60)
        assert hours == 8.5

    def test_hours_floor_at_zero(self):
        hours = time_tracking.calculate_hours(datetime(2024, 1, 2, 9, 0), datetime(2024, 1, 2, 9, 20), 60)
        assert hours == 0.0

    def test_overtime_over_eight_hours(self):
        assert time_tracking.detect_overtime(8.5) == (True, 0.5)
        assert time_tracking.detect_overtime(8) == (False, 0.0)


class TestLeaveRequestAPI:
    """Leave request endpoint validation"""

    # 2030-03-04 is a Monday
    def _post(self, client, headers, leave_type, start, end):
        return client.post('/api/hr/leave-requests', headers=headers, json={
            'leave_type': leave_type,
            'start_date': start,
            'end_date': end,
        })

    def test_create_vacation_request(self, client, employee_user, auth_headers):
        response = self._post(client, auth_headers(employee_user), 'VACATION', '2030-03-04', '2030-03-08')
        assert response.status_code == 201
        data = response.get_json()['leave_request']
        assert data['days'] == 5
        assert data['status'] == 'PENDING'

    def test_overlapping_request_rejected(self, client, employee_user, auth_headers):
        headers = auth_headers(employee_user)
        self._post(client, headers, 'VACATION', '2030-03-04', '2030-03-08')
        response = self._post(client, headers, 'PERSONAL', '2030-03-07', '2030-03-11')

        assert response.status_code == 400
        assert 'conflicting_request' in response.get_json()['details']

    def test_weekend_only_request_rejected(self, client, employee_user, auth_headers):
        response = self._post(client, auth_headers(employee_user), 'PERSONAL', '2030-03-09', '2030-03-10')
        assert response.status_code == 400

    def test_end_before_start_rejected(self, client, employee_user, auth_headers):
        response = self._post(client, auth_headers(employee_user), 'SICK', '2030-03-08', '2030-03-04')
        assert response.status_code == 400

    def test_vacation_over_balance_rejected(self, client, employee_user, auth_headers):
        response = self._post(client, auth_headers(employee_user), 'VACATION', '2030-01-01', '2030-03-29')
        assert response.status_code == 400
        details = response.get_json()['details']
        assert details['requested_days'] > details['remaining_days']

    def test_manager_approves_request(self, client, employee_user, company_user, auth_headers):
        created = self._post(client, auth_headers(employee_user), 'VACATION', '2030-03-04', '2030-03-08')
        leave_id = created.get_json()['leave_request']['id']

        response = client.put(f'/api/hr/leave-requests/{leave_id}/review',
                              headers=auth_headers(company_user), json={'status': 'APPROVED'})
        assert response.status_code == 200

        again = client.put(f'/api/hr/leave-requests/{leave_id}/review',
                           headers=auth_headers(company_user), json={'status': 'REJECTED'})
        assert again.status_code == 400

    def test_leave_balance_for_employee(self, client, employee_user, auth_headers):
        response = client.get('/api/hr/leave-balance?year=2030', headers=auth_headers(employee_user))
        assert response.status_code == 200
        data = response.get_json()
        assert data['year'] == 2030
        assert len(data['balances']) == 1
        assert data['balances'][0]['vacation']['total'] == 35
        assert data['carryover_rules']['carryover_deadline'] == '2031-03-31'


class TestTimeTrackingAPI:
    """Clock-in / clock-out endpoints"""

    def test_clock_in_twice_rejected(self, client, employee_user, auth_headers):
        headers = auth_headers(employee_user)
        first = client.post('/api/hr/time/clock-in', headers=headers, json={'location': 'Saha'})
        assert first.status_code == 201
        assert first.get_json()['entry']['status'] == 'IN'

        second = client.post('/api/hr/time/clock-in', headers=headers)
        assert second.status_code == 400

    def test_clock_out_without_clock_in(self, client, employee_user, auth_headers):
        response = client.post('/api/hr/time/clock-out', headers=auth_headers(employee_user))
        assert response.status_code == 400

    def test_clock_out_closes_entry(self, client, employee_user, auth_headers):
        headers = auth_headers(employee_user)
        client.post('/api/hr/time/clock-in', headers=headers)
        response = client.post('/api/hr/time/clock-out', headers=headers, json={'break_minutes': 0})

        assert response.status_code == 200
        entry = response.get_json()['entry']
        assert entry['status'] == 'OUT'
        assert entry['total_hours'] is not None

    def test_invalid_date_filter(self, client, employee_user, auth_headers):
        response = client.get('/api/hr/time/entries?start_date=01-02-2024', headers=auth_headers(employee_user))
        assert response.status_code == 400
