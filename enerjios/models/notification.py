# -*- coding: utf-8 -*-
"""
Notification Model - In-app notifications
"""
from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive


class Notification(db.Model):
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    type = db.Column(db.String(50), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text)
    action_url = db.Column(db.String(500))
    read = db.Column(db.Boolean, default=False, index=True)
    read_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utc_now_naive, index=True)

    @classmethod
    def create(cls, user_id, type, title, message=None, action_url=None):
        """Add a notification to the session (caller commits)"""
        notification = cls(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            action_url=action_url,
        )
        db.session.add(notification)
        return notification

    def mark_read(self, now):
        if not self.read:
            self.read = True
            self.read_at = now

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'message': self.message,
            'action_url': self.action_url,
            'read': self.read,
            'read_at': self.read_at.isoformat() if self.read_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
