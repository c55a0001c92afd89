# -*- coding: utf-8 -*-
"""
User Model - Platform accounts for every tenant role
"""
from enerjios.extensions import db
from enerjios.utils.timezone import utc_now_naive
import bcrypt


class UserRole:
    ADMIN = 'ADMIN'
    COMPANY = 'COMPANY'
    CUSTOMER = 'CUSTOMER'
    EMPLOYEE = 'EMPLOYEE'
    FARMER = 'FARMER'

    ALL = (ADMIN, COMPANY, CUSTOMER, EMPLOYEE, FARMER)


class User(db.Model):
    """User account; role decides which tenant data is visible"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255))
    phone = db.Column(db.String(20))
    role = db.Column(db.String(20), default=UserRole.CUSTOMER, nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), index=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utc_now_naive)
    last_login = db.Column(db.DateTime)

    company = db.relationship('Company', backref='users')

    # ══════════════════════════════════════════════════════════════
    # ROLE HELPERS
    # ══════════════════════════════════════════════════════════════

    def is_admin(self):
        return self.role == UserRole.ADMIN

    def is_company(self):
        return self.role == UserRole.COMPANY

    def owns_company(self, company_id):
        """Company accounts own the company they belong to"""
        return self.is_admin() or (self.is_company() and self.company_id == company_id)

    def can_access_company(self, company_id):
        """Tenant check used by every company-scoped query"""
        return self.is_admin() or (company_id is not None and self.company_id == company_id)

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.hashpw(
            password.encode('utf-8'),
            bcrypt.gensalt()
        ).decode('utf-8')

    def check_password(self, password):
        """Verify password"""
        if not self.password_hash:
            return False
        return bcrypt.checkpw(
            password.encode('utf-8'),
            self.password_hash.encode('utf-8')
        )

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'phone': self.phone,
            'role': self.role,
            'company_id': self.company_id,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_login': self.last_login.isoformat() if self.last_login else None,
        }

    def __repr__(self):
        return f'<User {self.email}>'
