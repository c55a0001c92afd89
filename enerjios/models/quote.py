# -*- coding: utf-8 -*-
"""
Quote Models - Products, quotes and quote line items
"""
from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive


class QuoteStatus:
    DRAFT = 'DRAFT'
    SENT = 'SENT'
    VIEWED = 'VIEWED'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'
    EXPIRED = 'EXPIRED'

    # Statuses a customer can still act on and that can still expire
    OPEN = (SENT, VIEWED)


class Product(db.Model):
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), index=True)
    name = db.Column(db.String(255), nullable=False)
    brand = db.Column(db.String(100))
    model = db.Column(db.String(100))
    category = db.Column(db.String(50), default='PANEL')  # PANEL, INVERTER, BATTERY, MOUNTING, CABLE, OTHER
    unit = db.Column(db.String(20), default='adet')
    unit_price = db.Column(db.Float, nullable=False, default=0)
    currency = db.Column(db.String(3), default='TRY')
    power_watt = db.Column(db.Float)
    warranty_years = db.Column(db.Integer)
    stock = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utc_now_naive)

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'name': self.name,
            'brand': self.brand,
            'model': self.model,
            'category': self.category,
            'unit': self.unit,
            'unit_price': self.unit_price,
            'currency': self.currency,
            'power_watt': self.power_watt,
            'warranty_years': self.warranty_years,
            'stock': self.stock,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<Product {self.name}>'


class Quote(db.Model):
    __tablename__ = 'quotes'

    id = db.Column(db.Integer, primary_key=True)
    quote_number = db.Column(db.String(30), unique=True, nullable=False, index=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), index=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), index=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    title = db.Column(db.String(255))
    notes = db.Column(db.Text)
    terms = db.Column(db.Text)
    status = db.Column(db.String(20), default=QuoteStatus.DRAFT, nullable=False, index=True)

    # Totals
    currency = db.Column(db.String(3), default='TRY')
    subtotal = db.Column(db.Float, default=0)
    discount = db.Column(db.Float, default=0)
    tax_rate = db.Column(db.Float, default=20)
    tax = db.Column(db.Float, default=0)
    total = db.Column(db.Float, default=0)
    system_size_kw = db.Column(db.Float)
    estimated_annual_production = db.Column(db.Float)

    valid_until = db.Column(db.DateTime, index=True)

    # Delivery
    delivery_token = db.Column(db.String(64), unique=True, index=True)
    delivery_channel = db.Column(db.String(50))
    delivery_email = db.Column(db.String(255))
    delivery_phone = db.Column(db.String(20))

    # Customer response
    customer_comments = db.Column(db.Text)
    customer_signature = db.Column(db.Text)
    approved_by_name = db.Column(db.String(255))
    response_ip = db.Column(db.String(45))
    response_user_agent = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=utc_now_naive)
    updated_at = db.Column(db.DateTime, default=utc_now_naive, onupdate=utc_now_naive)
    sent_at = db.Column(db.DateTime)
    viewed_at = db.Column(db.DateTime)
    approved_at = db.Column(db.DateTime)
    rejected_at = db.Column(db.DateTime)
    expired_at = db.Column(db.DateTime)

    items = db.relationship('QuoteItem', backref='quote', cascade='all, delete-orphan',
                            order_by='QuoteItem.id')
    company = db.relationship('Company')
    customer = db.relationship('Customer', backref=db.backref('quotes', lazy='dynamic'))
    project = db.relationship('Project', backref=db.backref('quotes', lazy='dynamic'))
    created_by = db.relationship('User')

    def recalculate_totals(self):
        """Recompute subtotal, tax and total from the line items"""
        subtotal = 0.0
        for item in self.items:
            item.total = round((item.quantity or 0) * (item.unit_price or 0), 2)
            subtotal += item.total
        self.subtotal = round(subtotal, 2)
        taxable = max(0.0, self.subtotal - (self.discount or 0))
        self.tax = round(taxable * (self.tax_rate or 0) / 100, 2)
        self.total = round(taxable + self.tax, 2)
        return self.total

    def is_past_validity(self, now):
        return self.valid_until is not None and self.valid_until < now

    def to_dict(self, include_items=True):
        data = {
            'id': self.id,
            'quote_number': self.quote_number,
            'company_id': self.company_id,
            'customer_id': self.customer_id,
            'project_id': self.project_id,
            'created_by_id': self.created_by_id,
            'title': self.title,
            'notes': self.notes,
            'terms': self.terms,
            'status': self.status,
            'currency': self.currency,
            'subtotal': self.subtotal,
            'discount': self.discount,
            'tax_rate': self.tax_rate,
            'tax': self.tax,
            'total': self.total,
            'system_size_kw': self.system_size_kw,
            'estimated_annual_production': self.estimated_annual_production,
            'valid_until': self.valid_until.isoformat() if self.valid_until else None,
            'delivery_channel': self.delivery_channel,
            'delivery_email': self.delivery_email,
            'delivery_phone': self.delivery_phone,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
            'viewed_at': self.viewed_at.isoformat() if self.viewed_at else None,
            'approved_at': self.approved_at.isoformat() if self.approved_at else None,
            'rejected_at': self.rejected_at.isoformat() if self.rejected_at else None,
            'expired_at': self.expired_at.isoformat() if self.expired_at else None,
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data

    def to_public_dict(self):
        """Customer-facing view without internal delivery fields"""
        data = self.to_dict()
        for key in ('created_by_id', 'delivery_channel', 'delivery_email', 'delivery_phone'):
            data.pop(key, None)
        data['company'] = self.company.to_dict() if self.company else None
        data['customer'] = self.customer.to_dict() if self.customer else None
        return data

    def __repr__(self):
        return f'<Quote {self.quote_number} {self.status}>'


class QuoteItem(db.Model):
    __tablename__ = 'quote_items'

    id = db.Column(db.Integer, primary_key=True)
    quote_id = db.Column(db.Integer, db.ForeignKey('quotes.id'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'))
    description = db.Column(db.String(500), nullable=False)
    quantity = db.Column(db.Float, nullable=False, default=1)
    unit_price = db.Column(db.Float, nullable=False, default=0)
    total = db.Column(db.Float, default=0)

    product = db.relationship('Product')

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'description': self.description,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'total': self.total,
        }
