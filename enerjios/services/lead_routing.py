# -*- coding: utf-8 -*-
"""
Lead Routing
Matches a project request to partners that serve its city and accept
its size, best-rated and fastest-responding first.
"""
import logging

from enerjios.extensions import db
from enerjios.models import Partner, PartnerQuoteRequest

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARTNERS = 3

# Partners without a stated response time count as answering within a week
DEFAULT_RESPONSE_HOURS = 168


def response_hours(partner):
    if partner.response_time_hours is None:
        return DEFAULT_RESPONSE_HOURS
    return partner.response_time_hours


def match_score(partner):
    """Higher is better: rating dominates, response time breaks ties"""
    bonus = max(0, DEFAULT_RESPONSE_HOURS - response_hours(partner)) / DEFAULT_RESPONSE_HOURS * 10
    return round((partner.rating or 0) * 20 + bonus, 2)


def find_matching_partners(partners, city, capacity_kw, limit=DEFAULT_MAX_PARTNERS):
    candidates = [
        p for p in partners
        if p.is_active and p.serves(city) and p.accepts_size(capacity_kw)
    ]
    candidates.sort(key=lambda p: (-(p.rating or 0), response_hours(p), p.id))
    return candidates[:limit]


def route_project_request(project_request, limit=DEFAULT_MAX_PARTNERS):
    """
    Create PartnerQuoteRequests for the best matching partners.

    Partners that already received this request are skipped.
    """
    partners = Partner.query.filter_by(is_active=True).all()
    matches = find_matching_partners(
        partners, project_request.city, project_request.estimated_capacity, limit
    )

    existing = {
        row.partner_id for row in PartnerQuoteRequest.query.filter_by(
            project_request_id=project_request.id
        )
    }

    routed = []
    for partner in matches:
        if partner.id in existing:
            continue
        routed.append(PartnerQuoteRequest(
            partner_id=partner.id,
            project_request_id=project_request.id,
            match_score=match_score(partner),
        ))
    db.session.add_all(routed)
    db.session.commit()

    logger.info(f"Project request {project_request.request_number} routed to {len(routed)} partners")
    return routed
