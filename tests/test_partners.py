# -*- coding: utf-8 -*-
"""
Tests for the partner network: registration, reviews, lead routing and commissions
"""
import pytest

from enerjios.models import Partner, ProjectRequest, QuoteStatus, User, UserRole
from enerjios.services.lead_routing import find_matching_partners, match_score

REGISTER = {
    'partner_type': 'INSTALLER',
    'service_areas': ['İzmir', 'Manisa'],
    'specialties': ['Çatı GES'],
    'min_project_size': 5,
    'max_project_size': 500,
    'response_time_hours': 12,
}


def _partner(id, areas, rating=0, response=24, min_size=0, max_size=1000, active=True):
    partner = Partner(id=id, rating=rating, response_time_hours=response,
                      min_project_size=min_size, max_project_size=max_size, is_active=active)
    partner.service_areas = areas
    return partner


@pytest.fixture
def partner(db_session, other_company):
    record = Partner(company_id=other_company.id, partner_type='EPC',
                     min_project_size=0, max_project_size=1000, response_time_hours=6)
    record.service_areas = ['İzmir']
    db_session.add(record)
    db_session.commit()
    return record


class TestLeadMatching:
    """City and size filter, then rating and response time"""

    def test_filters_by_city_and_size(self):
        partners = [
            _partner(1, ['İzmir'], rating=4),
            _partner(2, ['Ankara'], rating=5),
            _partner(3, ['izmir'], rating=3, max_size=10),
            _partner(4, ['Tüm Türkiye'], rating=2),
            _partner(5, ['İzmir'], rating=5, active=False),
        ]
        matches = find_matching_partners(partners, 'İzmir', 50)
        assert [p.id for p in matches] == [1, 4]

    def test_order_and_limit(self):
        partners = [
            _partner(1, ['Konya'], rating=4, response=48),
            _partner(2, ['Konya'], rating=4, response=4),
            _partner(3, ['Konya'], rating=5, response=72),
            _partner(4, ['Konya'], rating=1),
        ]
        matches = find_matching_partners(partners, 'Konya', None, limit=3)
        assert [p.id for p in matches] == [3, 2, 1]

    def test_instant_response_ranks_first(self):
        slow = _partner(2, ['Konya'], rating=4, response=100)
        instant = _partner(1, ['Konya'], rating=4, response=0)
        unknown = _partner(3, ['Konya'], rating=4, response=None)

        matches = find_matching_partners([unknown, slow, instant], 'Konya', None)
        assert [p.id for p in matches] == [1, 2, 3]

    def test_match_score(self):
        assert match_score(_partner(1, [], rating=5, response=0)) == 110
        assert match_score(_partner(2, [], rating=0, response=168)) == 0


class TestPartnerRegistration:
    """Company owners register their own company once"""

    def test_register(self, client, company, company_user, auth_headers):
        response = client.post('/api/partners/register', headers=auth_headers(company_user),
                               json=dict(REGISTER, company_id=company.id))

        assert response.status_code == 201
        data = response.get_json()['partner']
        assert data['service_areas'] == ['İzmir', 'Manisa']
        assert data['company_name'] == company.name

        again = client.post('/api/partners/register', headers=auth_headers(company_user),
                            json=dict(REGISTER, company_id=company.id))
        assert again.status_code == 409

    def test_cannot_register_other_company(self, client, company_user, other_company, auth_headers):
        response = client.post('/api/partners/register', headers=auth_headers(company_user),
                               json=dict(REGISTER, company_id=other_company.id))
        assert response.status_code == 403

    def test_size_range_validated(self, client, company, company_user, auth_headers):
        response = client.post('/api/partners/register', headers=auth_headers(company_user),
                               json=dict(REGISTER, company_id=company.id, min_project_size=500))
        assert response.status_code == 400

    def test_employees_cannot_register(self, client, company, employee_user, auth_headers):
        response = client.post('/api/partners/register', headers=auth_headers(employee_user),
                               json=dict(REGISTER, company_id=company.id))
        assert response.status_code == 403

    def test_directory_filters(self, client, partner, company_user, auth_headers):
        headers = auth_headers(company_user)
        assert client.get('/api/partners', headers=headers, query_string={'city': 'İzmir'}).get_json()['total'] == 1
        assert client.get('/api/partners?city=Bursa', headers=headers).get_json()['total'] == 0
        assert client.get('/api/partners?capacity_kw=2000', headers=headers).get_json()['total'] == 0


class TestPartnerReviews:
    """One review per reviewer; own company cannot review"""

    def test_rating_is_average(self, client, db_session, partner, company_user, admin_user, auth_headers):
        first = client.post(f'/api/partners/{partner.id}/reviews', headers=auth_headers(company_user),
                            json={'rating': 5, 'comment': 'Hızlı kurulum'})
        assert first.status_code == 201

        second = client.post(f'/api/partners/{partner.id}/reviews', headers=auth_headers(admin_user),
                             json={'rating': 4})
        assert second.get_json()['rating'] == 4.5
        assert second.get_json()['review_count'] == 2

    def test_duplicate_review(self, client, partner, company_user, auth_headers):
        headers = auth_headers(company_user)
        client.post(f'/api/partners/{partner.id}/reviews', headers=headers, json={'rating': 3})
        response = client.post(f'/api/partners/{partner.id}/reviews', headers=headers, json={'rating': 4})
        assert response.status_code == 409

    def test_own_company_cannot_review(self, client, db_session, partner, other_company, auth_headers):
        insider = User(email='owner@rakip.com', name='Rakip', role=UserRole.COMPANY,
                       company_id=other_company.id)
        insider.set_password('TestPassword123!')
        db_session.add(insider)
        db_session.commit()

        response = client.post(f'/api/partners/{partner.id}/reviews', headers=auth_headers(insider),
                               json={'rating': 5})
        assert response.status_code == 403

    def test_rating_bounds(self, client, partner, company_user, auth_headers):
        response = client.post(f'/api/partners/{partner.id}/reviews', headers=auth_headers(company_user),
                               json={'rating': 6})
        assert response.status_code == 400


class TestRoutingAndCommissions:
    """Routing a lead to partners and commissions on approved quotes"""

    def test_route_request_once(self, client, db_session, company, company_user, partner, auth_headers):
        lead = ProjectRequest(request_number='PRJ-TEST-1', company_id=company.id,
                              customer_name='Hasan Çelik', city='İzmir', estimated_capacity=20)
        db_session.add(lead)
        db_session.commit()

        url = f'/api/project-requests/{lead.id}/route-partners'
        first = client.post(url, headers=auth_headers(company_user))
        assert first.status_code == 200
        assert first.get_json()['routed'] == 1

        second = client.post(url, headers=auth_headers(company_user))
        assert second.get_json()['routed'] == 0

    def test_commission_on_approved_quote(self, client, partner, company, company_user, admin_user,
                                          make_quote, auth_headers):
        quote = make_quote(company, company_user, status=QuoteStatus.APPROVED)
        url = f'/api/partners/{partner.id}/commissions'

        response = client.post(url, headers=auth_headers(admin_user), json={'quote_id': quote.id})
        assert response.status_code == 201
        assert response.get_json()['commission']['amount'] == 5400

        assert client.post(url, headers=auth_headers(admin_user), json={'quote_id': quote.id}).status_code == 409

    def test_commission_requires_approval(self, client, partner, company, company_user, admin_user,
                                          make_quote, auth_headers):
        quote = make_quote(company, company_user)
        response = client.post(f'/api/partners/{partner.id}/commissions', headers=auth_headers(admin_user),
                               json={'quote_id': quote.id})
        assert response.status_code == 400

    def test_commissions_visible_to_owner_only(self, client, partner, company_user, auth_headers):
        response = client.get(f'/api/partners/{partner.id}/commissions', headers=auth_headers(company_user))
        assert response.status_code == 403
