# -*- coding: utf-8 -*-
"""
Audit Log Model
Tracks admin and sensitive operations for compliance
"""
import json

from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive


class AuditLog(db.Model):
    """
    Immutable audit log for tracking admin actions.

    Logs:
    - Who did what
    - When it happened
    - What data changed (before/after)
    """
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)

    # Who
    user_id = db.Column(db.Integer, index=True)
    user_email = db.Column(db.String(255))
    user_role = db.Column(db.String(20))

    # What
    action = db.Column(db.String(50))  # create, update, delete, data_export, bulk_update
    table_name = db.Column(db.String(100))
    record_id = db.Column(db.Integer)

    # Details
    old_values = db.Column(db.Text)
    new_values = db.Column(db.Text)
    description = db.Column(db.String(500))

    # Context
    ip_address = db.Column(db.String(45))
    endpoint = db.Column(db.String(200))

    created_at = db.Column(db.DateTime, default=utc_now_naive, index=True)

    def __repr__(self):
        return f'<AuditLog {self.action} {self.table_name}:{self.record_id}>'

    @property
    def old_data(self):
        if self.old_values:
            return json.loads(self.old_values)
        return {}

    @property
    def new_data(self):
        if self.new_values:
            return json.loads(self.new_values)
        return {}

    @classmethod
    def log(cls, action, user=None, table_name=None, record_id=None,
            old_values=None, new_values=None, description=None,
            ip_address=None, endpoint=None):
        """
        Create an audit log entry.

        Args:
            action: Action type (create, update, delete, data_export, ...)
            user: Acting User, None for system jobs
            table_name: Database table affected
            record_id: ID of affected record
            old_values: Previous values (for updates)
            new_values: New values
            description: Human-readable description

        Returns:
            AuditLog instance (added to the session, not committed)
        """
        entry = cls(
            user_id=user.id if user else 0,
            user_email=user.email if user else 'system',
            user_role=user.role if user else None,
            action=action,
            table_name=table_name,
            record_id=record_id,
            old_values=json.dumps(old_values, default=str) if old_values else None,
            new_values=json.dumps(new_values, default=str) if new_values else None,
            description=description,
            ip_address=ip_address,
            endpoint=endpoint
        )
        db.session.add(entry)
        return entry

    @classmethod
    def log_data_export(cls, user, exported_table, record_count, ip_address=None):
        """Log data export (KVKK requirement)."""
        return cls.log(
            action='data_export',
            user=user,
            table_name=exported_table,
            description=f"Exported {record_count} records from {exported_table}",
            ip_address=ip_address
        )

    @classmethod
    def log_data_deletion(cls, user, table_name, record_id,
                          description=None, ip_address=None):
        """Log data deletion (KVKK requirement)."""
        return cls.log(
            action='delete',
            user=user,
            table_name=table_name,
            record_id=record_id,
            description=description or f"Deleted record from {table_name}",
            ip_address=ip_address
        )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_email': self.user_email,
            'action': self.action,
            'table_name': self.table_name,
            'record_id': self.record_id,
            'old_values': self.old_data,
            'new_values': self.new_data,
            'description': self.description,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
