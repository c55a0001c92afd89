# -*- coding: utf-8 -*-
"""
Photo Request Models
Token-addressed requests asking a customer to upload site photos.
"""
from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive


class PhotoRequestStatus:
    PENDING = 'PENDING'
    UPLOADED = 'UPLOADED'
    COMPLETED = 'COMPLETED'
    EXPIRED = 'EXPIRED'


class PhotoRequest(db.Model):
    __tablename__ = 'photo_requests'

    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)
    project_request_id = db.Column(db.Integer, db.ForeignKey('project_requests.id'))
    requested_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))

    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255))
    customer_phone = db.Column(db.String(20))
    message = db.Column(db.Text)
    guidelines = db.Column(db.Text)
    status = db.Column(db.String(20), default=PhotoRequestStatus.PENDING, nullable=False)

    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now_naive)
    completed_at = db.Column(db.DateTime)

    uploads = db.relationship('PhotoUpload', backref='photo_request',
                              cascade='all, delete-orphan', order_by='PhotoUpload.id')
    company = db.relationship('Company')

    def is_expired(self, now):
        return self.expires_at < now

    def to_dict(self, include_uploads=True):
        data = {
            'id': self.id,
            'token': self.token,
            'company_id': self.company_id,
            'project_request_id': self.project_request_id,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'message': self.message,
            'guidelines': self.guidelines,
            'status': self.status,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }
        if include_uploads:
            data['uploads'] = [upload.to_dict() for upload in self.uploads]
        return data


class PhotoUpload(db.Model):
    __tablename__ = 'photo_uploads'

    id = db.Column(db.Integer, primary_key=True)
    photo_request_id = db.Column(db.Integer, db.ForeignKey('photo_requests.id'), nullable=False, index=True)
    filename = db.Column(db.String(255), nullable=False)
    original_filename = db.Column(db.String(255))
    content_type = db.Column(db.String(100))
    size_bytes = db.Column(db.Integer)
    category = db.Column(db.String(50))  # ROOF, ELECTRICAL_PANEL, SURROUNDINGS, BILL, OTHER
    uploaded_at = db.Column(db.DateTime, default=utc_now_naive)

    def to_dict(self):
        return {
            'id': self.id,
            'filename': self.filename,
            'original_filename': self.original_filename,
            'content_type': self.content_type,
            'size_bytes': self.size_bytes,
            'category': self.category,
            'uploaded_at': self.uploaded_at.isoformat() if self.uploaded_at else None,
        }
