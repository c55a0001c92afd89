# -*- coding: utf-8 -*-
"""
Manual Exchange Rate Routes (admin)
At most one active rate per currency.
"""
import logging

from flask import Blueprint, jsonify, g, request

from enerjios.extensions import db
from enerjios.models import AuditLog, ManualExchangeRate
from enerjios.schemas.partner import ExchangeRateBulkIn, ExchangeRateIn, ExchangeRateUpdate
from enerjios.utils.decorators import admin_required
from enerjios.utils.errors import ConflictError, NotFoundError
from enerjios.utils.helpers import client_ip, get_or_404, parse_body

logger = logging.getLogger(__name__)

exchange_rates_bp = Blueprint('exchange_rates', __name__, url_prefix='/api/admin/exchange-rates')


def _ensure_no_other_active(currency, exclude_id=None):
    active = ManualExchangeRate.active_for(currency)
    if active is not None and active.id != exclude_id:
        raise ConflictError(
            f'{currency} için zaten aktif bir kur tanımlı',
            details={'active_rate_id': active.id},
        )


@exchange_rates_bp.route('', methods=['GET'])
@admin_required
def list_rates():
    """
    List manual exchange rates
    ---
    tags:
      - Exchange Rates
    security:
      - Bearer: []
    parameters:
      - name: active
        in: query
        type: boolean
    responses:
      200:
        description: Rates
    """
    query = ManualExchangeRate.query
    if request.args.get('active', '').lower() == 'true':
        query = query.filter(ManualExchangeRate.is_active.is_(True))
    rates = query.order_by(ManualExchangeRate.currency, ManualExchangeRate.created_at.desc()).all()
    return jsonify({'rates': [r.to_dict() for r in rates]})


@exchange_rates_bp.route('', methods=['POST'])
@admin_required
def create_rate():
    """
    Create an active manual rate
    ---
    tags:
      - Exchange Rates
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [currency, rate]
          properties:
            currency:
              type: string
              example: USD
            rate:
              type: number
            note:
              type: string
    responses:
      201:
        description: Rate created
      409:
        description: An active rate already exists for the currency
    """
    data = parse_body(ExchangeRateIn)
    currency = data.currency.upper()
    _ensure_no_other_active(currency)

    rate = ManualExchangeRate(currency=currency, rate=data.rate, note=data.note,
                              is_active=True, created_by_id=g.current_user.id)
    db.session.add(rate)
    db.session.flush()
    AuditLog.log(
        action='create',
        user=g.current_user,
        table_name='manual_exchange_rates',
        record_id=rate.id,
        new_values={'currency': currency, 'rate': data.rate},
        ip_address=client_ip(),
        endpoint=request.path,
    )
    db.session.commit()
    logger.info(f"Manual rate {currency}={data.rate} created")
    return jsonify({'rate': rate.to_dict()}), 201


@exchange_rates_bp.route('/<int:rate_id>', methods=['PUT', 'PATCH'])
@admin_required
def update_rate(rate_id):
    """
    Update a manual rate
    ---
    tags:
      - Exchange Rates
    security:
      - Bearer: []
    responses:
      200:
        description: Updated rate
      409:
        description: Activating would create a second active rate
    """
    rate = get_or_404(ManualExchangeRate, rate_id, 'Kur')
    data = parse_body(ExchangeRateUpdate)
    old_values = {'rate': rate.rate, 'is_active': rate.is_active}

    if data.is_active and not rate.is_active:
        _ensure_no_other_active(rate.currency, exclude_id=rate.id)
    if data.rate is not None:
        rate.rate = data.rate
    if data.is_active is not None:
        rate.is_active = data.is_active
    if data.note is not None:
        rate.note = data.note

    AuditLog.log(
        action='update',
        user=g.current_user,
        table_name='manual_exchange_rates',
        record_id=rate.id,
        old_values=old_values,
        new_values={'rate': rate.rate, 'is_active': rate.is_active},
        ip_address=client_ip(),
        endpoint=request.path,
    )
    db.session.commit()
    return jsonify({'rate': rate.to_dict()})


@exchange_rates_bp.route('/<int:rate_id>', methods=['DELETE'])
@admin_required
def deactivate_rate(rate_id):
    """
    Deactivate a manual rate
    ---
    tags:
      - Exchange Rates
    security:
      - Bearer: []
    responses:
      200:
        description: Rate deactivated
    """
    rate = get_or_404(ManualExchangeRate, rate_id, 'Kur')
    rate.is_active = False
    AuditLog.log(
        action='deactivate',
        user=g.current_user,
        table_name='manual_exchange_rates',
        record_id=rate.id,
        ip_address=client_ip(),
        endpoint=request.path,
    )
    db.session.commit()
    return jsonify({'rate': rate.to_dict()})


@exchange_rates_bp.route('/bulk', methods=['PUT'])
@admin_required
def bulk_update_rates():
    """
    Update several rates in one transaction.
    If any rate is missing or would conflict, nothing is changed.
    ---
    tags:
      - Exchange Rates
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [rates]
          properties:
            rates:
              type: array
              items:
                type: object
                properties:
                  id:
                    type: integer
                  rate:
                    type: number
                  is_active:
                    type: boolean
    responses:
      200:
        description: Updated rates
      404:
        description: A rate does not exist
      409:
        description: Two active rates for one currency
    """
    data = parse_body(ExchangeRateBulkIn)

    try:
        updated = []
        for item in data.rates:
            rate = db.session.get(ManualExchangeRate, item.id)
            if rate is None:
                raise NotFoundError('Kur', details={'id': item.id})
            rate.rate = item.rate
            if item.is_active is not None:
                rate.is_active = item.is_active
            updated.append(rate)

        db.session.flush()
        for rate in updated:
            if rate.is_active:
                active = ManualExchangeRate.query.filter_by(currency=rate.currency, is_active=True).count()
                if active > 1:
                    raise ConflictError(f'{rate.currency} için birden fazla aktif kur olamaz')

        AuditLog.log(
            action='bulk_update',
            user=g.current_user,
            table_name='manual_exchange_rates',
            new_values=[{'id': r.id, 'rate': r.rate, 'is_active': r.is_active} for r in updated],
            description=f"Bulk updated {len(updated)} exchange rates",
            ip_address=client_ip(),
            endpoint=request.path,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Bulk updated {len(updated)} manual exchange rates")
    return jsonify({'updated': len(updated), 'rates': [r.to_dict() for r in updated]})
