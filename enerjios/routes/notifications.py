# -*- coding: utf-8 -*-
"""
Notification Routes
"""
from flask import Blueprint, jsonify, g, request, current_app

from enerjios.extensions import db, limiter
from enerjios.models import Notification
from enerjios.utils.decorators import current_user_rate_key, login_required
from enerjios.utils.errors import NotFoundError
from enerjios.utils.helpers import get_pagination_args
from enerjios.utils.timezone import utc_now_naive

notifications_bp = Blueprint('notifications', __name__, url_prefix='/api/notifications')


def _notifications_limit():
    return current_app.config['NOTIFICATIONS_RATE_LIMIT']


@notifications_bp.route('', methods=['GET'])
@limiter.limit(_notifications_limit, key_func=current_user_rate_key)
@login_required
def list_notifications():
    """
    Notifications of the current user.
    Limited per user with a fixed window.
    ---
    tags:
      - Notifications
    security:
      - Bearer: []
    parameters:
      - name: unread
        in: query
        type: boolean
    responses:
      200:
        description: Notifications and unread count
      429:
        description: Too many requests
    """
    user = g.current_user
    query = Notification.query.filter_by(user_id=user.id)
    if request.args.get('unread', '').lower() == 'true':
        query = query.filter(Notification.read.is_(False))

    page, per_page = get_pagination_args()
    pagination = query.order_by(Notification.created_at.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    unread = Notification.query.filter_by(user_id=user.id, read=False).count()

    return jsonify({
        'notifications': [n.to_dict() for n in pagination.items],
        'unread_count': unread,
        'total': pagination.total,
        'page': pagination.page,
    })


@notifications_bp.route('/<int:notification_id>/read', methods=['POST', 'PUT'])
@login_required
def mark_read(notification_id):
    """
    Mark one notification read
    ---
    tags:
      - Notifications
    security:
      - Bearer: []
    responses:
      200:
        description: Notification
      404:
        description: Not found
    """
    notification = Notification.query.filter_by(
        id=notification_id, user_id=g.current_user.id
    ).first()
    if notification is None:
        raise NotFoundError('Bildirim')

    notification.mark_read(utc_now_naive())
    db.session.commit()
    return jsonify({'notification': notification.to_dict()})


@notifications_bp.route('/read-all', methods=['POST', 'PUT'])
@login_required
def mark_all_read():
    """
    Mark every notification read
    ---
    tags:
      - Notifications
    security:
      - Bearer: []
    responses:
      200:
        description: Number of notifications updated
    """
    updated = Notification.query.filter_by(user_id=g.current_user.id, read=False).update(
        {'read': True, 'read_at': utc_now_naive()}, synchronize_session=False
    )
    db.session.commit()
    return jsonify({'success': True, 'updated': updated})
