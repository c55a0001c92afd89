# -*- coding: utf-8 -*-
"""
Partner Models - Installer partner network, lead routing and commissions
"""
import json

from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive


class PartnerType:
    INSTALLER = 'INSTALLER'
    EPC = 'EPC'
    DISTRIBUTOR = 'DISTRIBUTOR'
    CONSULTANT = 'CONSULTANT'

    ALL = (INSTALLER, EPC, DISTRIBUTOR, CONSULTANT)


class Partner(db.Model):
    __tablename__ = 'partners'

    id = db.Column(db.Integer, primary_key=True)
    # One partner profile per company
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), unique=True, nullable=False)
    partner_type = db.Column(db.String(20), default=PartnerType.INSTALLER, nullable=False)

    _service_areas = db.Column('service_areas', db.Text, default='[]')
    _specialties = db.Column('specialties', db.Text, default='[]')
    min_project_size = db.Column(db.Float, default=0)
    max_project_size = db.Column(db.Float)
    response_time_hours = db.Column(db.Integer, default=24)
    description = db.Column(db.Text)
    preferred_contact = db.Column(db.String(20), default='EMAIL')
    commission_rate = db.Column(db.Float, default=5.0)

    rating = db.Column(db.Float, default=0)
    review_count = db.Column(db.Integer, default=0)
    is_verified = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utc_now_naive)

    company = db.relationship('Company', backref=db.backref('partner', uselist=False))

    @property
    def service_areas(self):
        return json.loads(self._service_areas or '[]')

    @service_areas.setter
    def service_areas(self, value):
        self._service_areas = json.dumps(list(value or []), ensure_ascii=False)

    @property
    def specialties(self):
        return json.loads(self._specialties or '[]')

    @specialties.setter
    def specialties(self, value):
        self._specialties = json.dumps(list(value or []), ensure_ascii=False)

    def serves(self, city):
        if not city:
            return False
        areas = {area.casefold() for area in self.service_areas}
        return city.casefold() in areas or 'tüm türkiye' in areas

    def accepts_size(self, capacity_kw):
        if capacity_kw is None:
            return True
        if self.min_project_size is not None and capacity_kw < self.min_project_size:
            return False
        if self.max_project_size is not None and capacity_kw > self.max_project_size:
            return False
        return True

    def recalculate_rating(self):
        ratings = [review.rating for review in self.reviews]
        self.review_count = len(ratings)
        self.rating = round(sum(ratings) / len(ratings), 2) if ratings else 0

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'company_name': self.company.name if self.company else None,
            'partner_type': self.partner_type,
            'service_areas': self.service_areas,
            'specialties': self.specialties,
            'min_project_size': self.min_project_size,
            'max_project_size': self.max_project_size,
            'response_time_hours': self.response_time_hours,
            'description': self.description,
            'preferred_contact': self.preferred_contact,
            'commission_rate': self.commission_rate,
            'rating': self.rating,
            'review_count': self.review_count,
            'is_verified': self.is_verified,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Partner company={self.company_id}>'


class PartnerQuoteRequest(db.Model):
    """A project request routed to a partner"""
    __tablename__ = 'partner_quote_requests'

    id = db.Column(db.Integer, primary_key=True)
    partner_id = db.Column(db.Integer, db.ForeignKey('partners.id'), nullable=False, index=True)
    project_request_id = db.Column(db.Integer, db.ForeignKey('project_requests.id'), nullable=False, index=True)
    status = db.Column(db.String(20), default='PENDING')  # PENDING, ACCEPTED, DECLINED, QUOTED
    match_score = db.Column(db.Float)
    created_at = db.Column(db.DateTime, default=utc_now_naive)
    responded_at = db.Column(db.DateTime)

    partner = db.relationship('Partner', backref=db.backref('quote_requests', lazy='dynamic'))
    project_request = db.relationship('ProjectRequest')

    __table_args__ = (
        db.UniqueConstraint('partner_id', 'project_request_id', name='uq_partner_request'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'partner_id': self.partner_id,
            'project_request_id': self.project_request_id,
            'status': self.status,
            'match_score': self.match_score,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Commission(db.Model):
    __tablename__ = 'commissions'

    id = db.Column(db.Integer, primary_key=True)
    partner_id = db.Column(db.Integer, db.ForeignKey('partners.id'), nullable=False, index=True)
    quote_id = db.Column(db.Integer, db.ForeignKey('quotes.id'))
    amount = db.Column(db.Float, nullable=False)
    rate = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), default='PENDING')  # PENDING, PAID, CANCELLED
    created_at = db.Column(db.DateTime, default=utc_now_naive)
    paid_at = db.Column(db.DateTime)

    partner = db.relationship('Partner', backref=db.backref('commissions', lazy='dynamic'))

    def to_dict(self):
        return {
            'id': self.id,
            'partner_id': self.partner_id,
            'quote_id': self.quote_id,
            'amount': self.amount,
            'rate': self.rate,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'paid_at': self.paid_at.isoformat() if self.paid_at else None,
        }


class PartnerReview(db.Model):
    __tablename__ = 'partner_reviews'

    id = db.Column(db.Integer, primary_key=True)
    partner_id = db.Column(db.Integer, db.ForeignKey('partners.id'), nullable=False, index=True)
    reviewer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utc_now_naive)

    partner = db.relationship('Partner', backref='reviews')

    __table_args__ = (
        db.UniqueConstraint('partner_id', 'reviewer_id', name='uq_partner_review_reviewer'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'partner_id': self.partner_id,
            'reviewer_id': self.reviewer_id,
            'rating': self.rating,
            'comment': self.comment,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
