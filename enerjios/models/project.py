# -*- coding: utf-8 -*-
"""
Project Models - Solar installation projects and incoming project requests
"""
from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive


class ProjectStatus:
    DRAFT = 'DRAFT'
    DESIGN = 'DESIGN'
    QUOTED = 'QUOTED'
    IN_PROGRESS = 'IN_PROGRESS'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'


class ProjectRequestStatus:
    OPEN = 'OPEN'
    CONTACTED = 'CONTACTED'
    ASSIGNED = 'ASSIGNED'
    SITE_VISIT = 'SITE_VISIT'
    CONVERTED_TO_PROJECT = 'CONVERTED_TO_PROJECT'
    LOST = 'LOST'

    ALL = (OPEN, CONTACTED, ASSIGNED, SITE_VISIT, CONVERTED_TO_PROJECT, LOST)


class Project(db.Model):
    __tablename__ = 'projects'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), index=True)

    name = db.Column(db.String(255), nullable=False)
    project_type = db.Column(db.String(50), default='RESIDENTIAL')
    capacity_kw = db.Column(db.Float)
    city = db.Column(db.String(100))
    address = db.Column(db.Text)
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    status = db.Column(db.String(30), default=ProjectStatus.DRAFT, nullable=False)

    created_at = db.Column(db.DateTime, default=utc_now_naive)
    updated_at = db.Column(db.DateTime, default=utc_now_naive, onupdate=utc_now_naive)

    company = db.relationship('Company', backref=db.backref('projects', lazy='dynamic'))
    customer = db.relationship('Customer', backref=db.backref('projects', lazy='dynamic'))

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'customer_id': self.customer_id,
            'name': self.name,
            'project_type': self.project_type,
            'capacity_kw': self.capacity_kw,
            'city': self.city,
            'address': self.address,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Project {self.name}>'


class ProjectRequest(db.Model):
    """Incoming lead that a company works through until it becomes a project"""
    __tablename__ = 'project_requests'

    id = db.Column(db.Integer, primary_key=True)
    request_number = db.Column(db.String(30), unique=True, nullable=False, index=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), index=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'))

    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255))
    customer_phone = db.Column(db.String(20))
    city = db.Column(db.String(100))
    district = db.Column(db.String(100))
    address = db.Column(db.Text)

    project_type = db.Column(db.String(50), default='RESIDENTIAL')
    estimated_capacity = db.Column(db.Float)
    estimated_budget = db.Column(db.Float)
    description = db.Column(db.Text)
    source = db.Column(db.String(50), default='WEBSITE')
    priority = db.Column(db.String(10), default='MEDIUM')
    status = db.Column(db.String(30), default=ProjectRequestStatus.OPEN, nullable=False, index=True)

    assigned_to_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now_naive)
    updated_at = db.Column(db.DateTime, default=utc_now_naive, onupdate=utc_now_naive)

    status_history = db.relationship(
        'ProjectRequestStatusHistory',
        backref='request',
        order_by='ProjectRequestStatusHistory.changed_at',
        cascade='all, delete-orphan'
    )

    def last_status_change(self):
        """
        When the request entered its current status.

        Falls back to the last update time when no history row records
        the current status.
        """
        for entry in reversed(self.status_history):
            if entry.status == self.status:
                return entry.changed_at
        return self.updated_at or self.created_at

    def to_dict(self, include_history=False):
        data = {
            'id': self.id,
            'request_number': self.request_number,
            'company_id': self.company_id,
            'customer_id': self.customer_id,
            'project_id': self.project_id,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'city': self.city,
            'district': self.district,
            'address': self.address,
            'project_type': self.project_type,
            'estimated_capacity': self.estimated_capacity,
            'estimated_budget': self.estimated_budget,
            'description': self.description,
            'source': self.source,
            'priority': self.priority,
            'status': self.status,
            'assigned_to_id': self.assigned_to_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_history:
            data['status_history'] = [h.to_dict() for h in self.status_history]
        return data

    def __repr__(self):
        return f'<ProjectRequest {self.request_number} {self.status}>'


class ProjectRequestStatusHistory(db.Model):
    __tablename__ = 'project_request_status_history'

    id = db.Column(db.Integer, primary_key=True)
    request_id = db.Column(db.Integer, db.ForeignKey('project_requests.id'), nullable=False, index=True)
    status = db.Column(db.String(30), nullable=False)
    previous_status = db.Column(db.String(30))
    changed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    note = db.Column(db.Text)
    changed_at = db.Column(db.DateTime, default=utc_now_naive, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'status': self.status,
            'previous_status': self.previous_status,
            'changed_by_id': self.changed_by_id,
            'note': self.note,
            'changed_at': self.changed_at.isoformat() if self.changed_at else None,
        }
