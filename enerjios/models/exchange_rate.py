# -*- coding: utf-8 -*-
"""
Manual Exchange Rate Model
Admin-maintained currency rates used when pricing imported equipment.
"""
from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive


class ManualExchangeRate(db.Model):
    __tablename__ = 'manual_exchange_rates'

    id = db.Column(db.Integer, primary_key=True)
    currency = db.Column(db.String(3), nullable=False, index=True)
    rate = db.Column(db.Float, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    note = db.Column(db.String(255))
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now_naive)
    updated_at = db.Column(db.DateTime, default=utc_now_naive, onupdate=utc_now_naive)

    # At most one active rate per currency
    __table_args__ = (
        db.Index(
            'uq_manual_rate_active_currency',
            'currency',
            unique=True,
            sqlite_where=db.text('is_active = 1'),
            postgresql_where=db.text('is_active'),
        ),
    )

    @classmethod
    def active_for(cls, currency):
        return cls.query.filter_by(currency=currency.upper(), is_active=True).first()

    def to_dict(self):
        return {
            'id': self.id,
            'currency': self.currency,
            'rate': self.rate,
            'is_active': self.is_active,
            'note': self.note,
            'created_by_id': self.created_by_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<ManualExchangeRate {self.currency}={self.rate}>'
