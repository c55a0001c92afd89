# -*- coding: utf-8 -*-
"""
KVKK Models
Turkish Personal Data Protection Law (KVKK) data-subject applications,
their audit trail and consent records.
"""
import json

from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive


class KVKKStatus:
    PENDING = 'PENDING'
    IN_PROGRESS = 'IN_PROGRESS'
    COMPLETED = 'COMPLETED'
    REJECTED = 'REJECTED'

    ALL = (PENDING, IN_PROGRESS, COMPLETED, REJECTED)
    # Applications that still owe the applicant an answer
    OPEN = (PENDING, IN_PROGRESS)


class KVKKRequestType:
    DATA_ACCESS = 'DATA_ACCESS'
    DATA_CORRECTION = 'DATA_CORRECTION'
    DATA_DELETION = 'DATA_DELETION'
    DATA_PORTABILITY = 'DATA_PORTABILITY'
    DATA_OBJECTION = 'DATA_OBJECTION'
    OTHER = 'OTHER'


class KVKKAuditAction:
    APPLICATION_SUBMITTED = 'APPLICATION_SUBMITTED'
    STATUS_UPDATED = 'STATUS_UPDATED'
    OVERDUE_NOTIFICATION_SENT = 'OVERDUE_NOTIFICATION_SENT'
    REMINDER_NOTIFICATION_SENT = 'REMINDER_NOTIFICATION_SENT'
    COMPLIANCE_REPORT_SENT = 'COMPLIANCE_REPORT_SENT'
    COMPLIANCE_METRICS_CALCULATED = 'COMPLIANCE_METRICS_CALCULATED'
    AUTOMATED_MONITORING_EXECUTED = 'AUTOMATED_MONITORING_EXECUTED'


# Legal response window for data-subject applications
KVKK_RESPONSE_DAYS = 30


class KVKKApplication(db.Model):
    __tablename__ = 'kvkk_applications'

    id = db.Column(db.Integer, primary_key=True)
    application_no = db.Column(db.String(30), unique=True, nullable=False, index=True)
    request_type = db.Column(db.String(30), nullable=False)
    status = db.Column(db.String(20), default=KVKKStatus.PENDING, nullable=False, index=True)

    # Applicant
    full_name = db.Column(db.String(255), nullable=False)
    tc_no = db.Column(db.String(11), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(20))
    address = db.Column(db.Text)
    city = db.Column(db.String(100))
    district = db.Column(db.String(100))
    postal_code = db.Column(db.String(10))

    details = db.Column(db.Text, nullable=False)
    previous_application = db.Column(db.Boolean, default=False)
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(500))

    submitted_at = db.Column(db.DateTime, default=utc_now_naive, nullable=False)
    response_deadline = db.Column(db.DateTime, nullable=False, index=True)
    processed_at = db.Column(db.DateTime)
    response = db.Column(db.Text)
    processed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))

    audit_logs = db.relationship('KVKKAuditLog', backref='application', lazy='dynamic',
                                 order_by='KVKKAuditLog.performed_at')

    def days_until_deadline(self, now):
        """Whole days left; negative once the deadline has passed"""
        return (self.response_deadline - now).days

    def to_dict(self, include_personal=True):
        data = {
            'id': self.id,
            'application_no': self.application_no,
            'request_type': self.request_type,
            'status': self.status,
            'full_name': self.full_name,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
            'response_deadline': self.response_deadline.isoformat() if self.response_deadline else None,
            'processed_at': self.processed_at.isoformat() if self.processed_at else None,
            'response': self.response,
        }
        if include_personal:
            data.update({
                'tc_no': self.tc_no,
                'email': self.email,
                'phone': self.phone,
                'address': self.address,
                'city': self.city,
                'district': self.district,
                'postal_code': self.postal_code,
                'details': self.details,
                'previous_application': self.previous_application,
            })
        return data

    def __repr__(self):
        return f'<KVKKApplication {self.application_no} {self.status}>'


class KVKKAuditLog(db.Model):
    """
    Immutable trail of everything done to or about KVKK applications.

    Notification de-duplication reads this table, so every outgoing
    KVKK notification must be recorded here.
    """
    __tablename__ = 'kvkk_audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    application_id = db.Column(db.Integer, db.ForeignKey('kvkk_applications.id'), index=True)
    action = db.Column(db.String(50), nullable=False, index=True)
    performed_by = db.Column(db.String(255), default='system')
    details = db.Column(db.Text)
    ip_address = db.Column(db.String(45))
    performed_at = db.Column(db.DateTime, default=utc_now_naive, nullable=False, index=True)

    @property
    def details_data(self):
        return json.loads(self.details) if self.details else {}

    @classmethod
    def log(cls, action, application_id=None, performed_by='system',
            details=None, ip_address=None, performed_at=None):
        entry = cls(
            application_id=application_id,
            action=action,
            performed_by=performed_by,
            details=json.dumps(details, default=str) if details else None,
            ip_address=ip_address,
            performed_at=performed_at or utc_now_naive(),
        )
        db.session.add(entry)
        return entry

    def to_dict(self):
        return {
            'id': self.id,
            'application_id': self.application_id,
            'action': self.action,
            'performed_by': self.performed_by,
            'details': self.details_data,
            'performed_at': self.performed_at.isoformat() if self.performed_at else None,
        }


# Consent texts shown to the data subject (versioned)
KVKK_CONSENT_TEXTS = {
    'registration': {
        'version': '1.0',
        'text': 'Kişisel verilerimin üyelik işlemleri kapsamında işlenmesini kabul ediyorum.'
    },
    'marketing': {
        'version': '1.0',
        'text': 'Kampanya ve bilgilendirme amaçlı ticari elektronik ileti almayı kabul ediyorum.'
    },
    'analytics': {
        'version': '1.0',
        'text': 'Hizmet kalitesinin ölçülmesi amacıyla kullanım verilerimin analiz edilmesini kabul ediyorum.'
    },
    'installation': {
        'version': '1.0',
        'text': 'Keşif ve kurulum için adres ve çatı fotoğraflarımın işlenmesini kabul ediyorum.'
    },
}


class ConsentLog(db.Model):
    """
    Immutable log of all consent actions.
    Required by KVKK for audit purposes.
    """
    __tablename__ = 'consent_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), index=True)
    email = db.Column(db.String(255), index=True)
    consent_type = db.Column(db.String(30), nullable=False)
    action = db.Column(db.String(10), nullable=False)  # granted, revoked
    consent_version = db.Column(db.String(10))
    consent_text = db.Column(db.Text)
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=utc_now_naive, nullable=False)

    @classmethod
    def log_consent(cls, consent_type, action, user_id=None, email=None,
                    ip_address=None, user_agent=None):
        """Create a consent log entry using the current consent text."""
        text_info = KVKK_CONSENT_TEXTS.get(consent_type, {})
        entry = cls(
            user_id=user_id,
            email=email,
            consent_type=consent_type,
            action=action,
            consent_version=text_info.get('version'),
            consent_text=text_info.get('text'),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.session.add(entry)
        return entry

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'email': self.email,
            'consent_type': self.consent_type,
            'action': self.action,
            'consent_version': self.consent_version,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
