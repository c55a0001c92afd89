# -*- coding: utf-8 -*-
"""
Authentication Routes - Register, Login, Current user
"""
import logging

from flask import Blueprint, jsonify, g, current_app

from enerjios.extensions import db, limiter
from enerjios.models import Company, Customer, User, UserRole
from enerjios.schemas.auth import LoginIn, RegisterIn
from enerjios.utils.decorators import login_required
from enerjios.utils.errors import AuthenticationError, ConflictError, ValidationError
from enerjios.utils.helpers import client_ip, parse_body
from enerjios.utils.security import create_access_token
from enerjios.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _split_name(name):
    parts = name.strip().split(' ', 1)
    return parts[0], parts[1] if len(parts) > 1 else ''


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Register a new account
    ---
    tags:
      - Auth
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [email, password, name]
          properties:
            email:
              type: string
            password:
              type: string
              minLength: 8
            name:
              type: string
            role:
              type: string
              enum: [COMPANY, CUSTOMER, FARMER]
            company_name:
              type: string
              description: Required for COMPANY accounts
            tax_number:
              type: string
    responses:
      201:
        description: Account created, token returned
      400:
        description: Validation error
      409:
        description: Email or tax number already registered
    """
    data = parse_body(RegisterIn)
    email = data.email.strip().lower()

    if User.query.filter_by(email=email).first():
        raise ConflictError('Bu e-posta adresi zaten kayıtlı')

    user = User(email=email, name=data.name, phone=data.phone, role=data.role)
    user.set_password(data.password)

    if data.role == UserRole.COMPANY:
        if not data.company_name or not data.tax_number:
            raise ValidationError('Firma hesabı için firma adı ve vergi numarası gerekli')
        if Company.query.filter_by(tax_number=data.tax_number).first():
            raise ConflictError('Bu vergi numarası ile kayıtlı bir firma var')
        company = Company(name=data.company_name, tax_number=data.tax_number,
                          email=email, phone=data.phone, city=data.city)
        db.session.add(company)
        db.session.flush()
        user.company_id = company.id

    db.session.add(user)
    db.session.flush()

    if data.role == UserRole.CUSTOMER and user.company_id:
        first_name, last_name = _split_name(data.name)
        db.session.add(Customer(company_id=user.company_id, user_id=user.id,
                                first_name=first_name, last_name=last_name,
                                email=email, phone=data.phone, city=data.city))

    db.session.commit()
    logger.info(f"New {user.role} account registered: {user.id}")

    return jsonify({
        'user': user.to_dict(),
        'token': create_access_token(user),
    }), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(lambda: current_app.config['LOGIN_RATE_LIMIT'])
def login():
    """
    Log in and receive a bearer token
    ---
    tags:
      - Auth
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [email, password]
          properties:
            email:
              type: string
            password:
              type: string
    responses:
      200:
        description: Token and user
      401:
        description: Invalid credentials
      429:
        description: Too many attempts
    """
    data = parse_body(LoginIn)
    user = User.query.filter_by(email=data.email.strip().lower()).first()

    if not user or not user.check_password(data.password):
        logger.warning(f"Failed login from {client_ip()}")
        raise AuthenticationError('E-posta veya şifre hatalı')
    if not user.is_active:
        raise AuthenticationError('Hesabınız pasif durumda')

    user.last_login = utc_now_naive()
    db.session.commit()

    return jsonify({
        'user': user.to_dict(),
        'token': create_access_token(user),
    })


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    """
    Current user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: The authenticated user
      401:
        description: Missing or invalid token
    """
    return jsonify({'user': g.current_user.to_dict()})
