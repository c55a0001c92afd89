# -*- coding: utf-8 -*-
"""
KVKK Routes
Public data-subject applications and consent records, and the admin
side: application handling, compliance reports and scheduler actions.
"""
import logging
import random
from datetime import timedelta

from flask import Blueprint, jsonify, g, request

from enerjios.extensions import db, limiter
from enerjios.models import (
    ConsentLog, KVKKApplication, KVKKAuditAction, KVKKAuditLog, KVKKStatus,
    KVKK_CONSENT_TEXTS, KVKK_RESPONSE_DAYS, User,
)
from enerjios.schemas.kvkk import (
    KVKK_REQUEST_TYPE_MAP, ConsentIn, KVKKApplicationIn, KVKKSchedulerAction, KVKKStatusUpdate,
)
from enerjios.services.email_service import EmailService
from enerjios.services.kvkk_compliance import (
    calculate_compliance_score, generate_automated_report, get_compliance_trend,
)
from enerjios.services.kvkk_scheduler import is_overdue, run_action
from enerjios.utils.decorators import admin_required
from enerjios.utils.errors import NotFoundError, ValidationError
from enerjios.utils.helpers import client_ip, get_or_404, get_pagination_args, parse_body
from enerjios.utils.security import decode_access_token, get_bearer_token
from enerjios.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)

kvkk_bp = Blueprint('kvkk', __name__, url_prefix='/api/kvkk')


def generate_application_no(now):
    """KVKK-2025-1234567890 style: last 6 timestamp digits + 3 random digits"""
    stamp = str(int(now.timestamp() * 1000))[-6:]
    return f"KVKK-{now.year}-{stamp}{random.randint(0, 999):03d}"


def _optional_user():
    token = get_bearer_token(request)
    payload = decode_access_token(token) if token else None
    if not payload:
        return None
    return db.session.get(User, int(payload['sub']))


def _send_application_received(application):
    """Confirmation to the applicant; failures are only logged"""
    try:
        success, error = EmailService().send_kvkk_application_received(application)
        if not success:
            logger.warning(f"KVKK confirmation email for {application.application_no} failed: {error}")
    except Exception as e:
        logger.exception(f"KVKK confirmation email for {application.application_no} raised: {e}")


# ══════════════════════════════════════════════════════════════════
# PUBLIC
# ══════════════════════════════════════════════════════════════════

@kvkk_bp.route('/applications', methods=['POST'])
@limiter.limit('10 per hour')
def submit_application():
    """
    Submit a KVKK data-subject application.
    The legal response deadline is 30 days after submission.
    ---
    tags:
      - KVKK
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [request_type, full_name, tc_no, email, phone, address, city, district, details, consent_to_process, accept_terms]
          properties:
            request_type:
              type: string
              enum: [info, access, correction, deletion, portability, objection, other]
            full_name:
              type: string
            tc_no:
              type: string
              description: 11-digit national id
            email:
              type: string
            details:
              type: string
            consent_to_process:
              type: boolean
            accept_terms:
              type: boolean
    responses:
      201:
        description: Application received
      400:
        description: Validation error
    """
    data = parse_body(KVKKApplicationIn)
    now = utc_now_naive()
    ip_address = client_ip()

    application = KVKKApplication(
        application_no=generate_application_no(now),
        request_type=KVKK_REQUEST_TYPE_MAP[data.request_type],
        status=KVKKStatus.PENDING,
        full_name=data.full_name,
        tc_no=data.tc_no,
        email=data.email.lower(),
        phone=data.phone,
        address=data.address,
        city=data.city,
        district=data.district,
        postal_code=data.postal_code,
        details=data.details,
        previous_application=data.previous_application,
        ip_address=ip_address,
        user_agent=(request.headers.get('User-Agent') or '')[:500],
        submitted_at=now,
        response_deadline=now + timedelta(days=KVKK_RESPONSE_DAYS),
    )
    db.session.add(application)
    db.session.flush()

    KVKKAuditLog.log(
        KVKKAuditAction.APPLICATION_SUBMITTED,
        application_id=application.id,
        performed_by=application.email,
        details={'request_type': application.request_type},
        ip_address=ip_address,
        performed_at=now,
    )
    db.session.commit()
    logger.info(f"KVKK application {application.application_no} submitted")

    _send_application_received(application)

    return jsonify({
        'success': True,
        'application_no': application.application_no,
        'response_deadline': application.response_deadline.isoformat(),
        'message': f'Başvurunuz alındı. En geç {KVKK_RESPONSE_DAYS} gün içinde yanıtlanacaktır.',
    }), 201


@kvkk_bp.route('/applications/lookup', methods=['GET'])
@limiter.limit('30 per hour')
def lookup_application():
    """
    Look up applications by application number or email
    ---
    tags:
      - KVKK
    parameters:
      - name: application_no
        in: query
        type: string
      - name: email
        in: query
        type: string
    responses:
      200:
        description: Matching applications without personal details
      400:
        description: Neither parameter given
      404:
        description: Nothing found
    """
    application_no = request.args.get('application_no', '').strip()
    email = request.args.get('email', '').strip().lower()
    if not application_no and not email:
        raise ValidationError('Başvuru numarası veya e-posta adresi gerekli')

    query = KVKKApplication.query
    if application_no:
        query = query.filter(KVKKApplication.application_no == application_no)
    if email:
        query = query.filter(KVKKApplication.email == email)

    applications = query.order_by(KVKKApplication.submitted_at.desc()).limit(20).all()
    if not applications:
        raise NotFoundError('Başvuru')

    return jsonify({'applications': [a.to_dict(include_personal=False) for a in applications]})


@kvkk_bp.route('/consent-texts', methods=['GET'])
def consent_texts():
    """Current consent texts and versions"""
    return jsonify({'consents': KVKK_CONSENT_TEXTS})


@kvkk_bp.route('/consent', methods=['POST'])
def record_consent():
    """
    Record a consent grant or revocation
    ---
    tags:
      - KVKK
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [consent_type, action]
          properties:
            consent_type:
              type: string
              enum: [registration, marketing, analytics, installation]
            action:
              type: string
              enum: [granted, revoked]
            email:
              type: string
    responses:
      201:
        description: Consent recorded
      400:
        description: Neither a login nor an email identifies the person
    """
    data = parse_body(ConsentIn)
    user = _optional_user()
    email = (data.email or (user.email if user else '')).lower() or None
    if user is None and not email:
        raise ValidationError('Oturum açın veya e-posta adresi girin')

    entry = ConsentLog.log_consent(
        consent_type=data.consent_type,
        action=data.action,
        user_id=user.id if user else None,
        email=email,
        ip_address=client_ip(),
        user_agent=(request.headers.get('User-Agent') or '')[:500],
    )
    db.session.commit()
    return jsonify({'success': True, 'consent': entry.to_dict()}), 201


# ══════════════════════════════════════════════════════════════════
# ADMIN
# ══════════════════════════════════════════════════════════════════

@kvkk_bp.route('/admin/applications', methods=['GET'])
@admin_required
def admin_list_applications():
    """
    List KVKK applications
    ---
    tags:
      - KVKK Admin
    security:
      - Bearer: []
    parameters:
      - name: status
        in: query
        type: string
        enum: [PENDING, IN_PROGRESS, COMPLETED, REJECTED]
      - name: overdue
        in: query
        type: boolean
    responses:
      200:
        description: Applications with days left until the deadline
    """
    now = utc_now_naive()
    query = KVKKApplication.query
    status = request.args.get('status')
    if status:
        query = query.filter(KVKKApplication.status == status)
    if request.args.get('overdue', '').lower() == 'true':
        query = query.filter(KVKKApplication.status.in_(KVKKStatus.OPEN),
                             KVKKApplication.response_deadline < now)

    page, per_page = get_pagination_args()
    pagination = query.order_by(KVKKApplication.response_deadline.asc()).paginate(
        page=page, per_page=per_page, error_out=False
    )

    applications = []
    for application in pagination.items:
        data = application.to_dict()
        data['days_until_deadline'] = application.days_until_deadline(now)
        data['is_overdue'] = is_overdue(application, now)
        applications.append(data)

    return jsonify({
        'applications': applications,
        'total': pagination.total,
        'page': pagination.page,
        'pages': pagination.pages,
    })


@kvkk_bp.route('/admin/applications/<int:application_id>', methods=['GET'])
@admin_required
def admin_get_application(application_id):
    """Application with its audit trail"""
    application = get_or_404(KVKKApplication, application_id, 'Başvuru')
    data = application.to_dict()
    data['audit_logs'] = [log.to_dict() for log in application.audit_logs]
    return jsonify({'application': data})


@kvkk_bp.route('/admin/applications/<int:application_id>/status', methods=['PUT', 'PATCH'])
@admin_required
def admin_update_status(application_id):
    """
    Update an application's status
    ---
    tags:
      - KVKK Admin
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [status]
          properties:
            status:
              type: string
              enum: [PENDING, IN_PROGRESS, COMPLETED, REJECTED]
            response:
              type: string
    responses:
      200:
        description: Updated application
    """
    application = get_or_404(KVKKApplication, application_id, 'Başvuru')
    data = parse_body(KVKKStatusUpdate)
    now = utc_now_naive()
    user = g.current_user

    previous = application.status
    application.status = data.status
    if data.response is not None:
        application.response = data.response
    if data.status in (KVKKStatus.COMPLETED, KVKKStatus.REJECTED):
        application.processed_at = now
        application.processed_by_id = user.id
    else:
        application.processed_at = None

    KVKKAuditLog.log(
        KVKKAuditAction.STATUS_UPDATED,
        application_id=application.id,
        performed_by=user.email,
        details={'old_status': previous, 'new_status': data.status, 'response': data.response},
        ip_address=client_ip(),
        performed_at=now,
    )
    db.session.commit()
    logger.info(f"KVKK application {application.application_no}: {previous} -> {data.status}")
    return jsonify({'application': application.to_dict()})


@kvkk_bp.route('/admin/scheduler', methods=['GET'])
@admin_required
def admin_scheduler_status():
    """Last runs of the automated KVKK jobs"""
    latest = {}
    for action in (KVKKAuditAction.AUTOMATED_MONITORING_EXECUTED,
                   KVKKAuditAction.OVERDUE_NOTIFICATION_SENT,
                   KVKKAuditAction.REMINDER_NOTIFICATION_SENT,
                   KVKKAuditAction.COMPLIANCE_REPORT_SENT):
        entry = (KVKKAuditLog.query.filter_by(action=action)
                 .order_by(KVKKAuditLog.performed_at.desc()).first())
        latest[action] = entry.performed_at.isoformat() if entry else None
    return jsonify({'last_runs': latest})


@kvkk_bp.route('/admin/scheduler', methods=['POST'])
@admin_required
def admin_run_scheduler():
    """
    Run a KVKK scheduler action now
    ---
    tags:
      - KVKK Admin
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [action]
          properties:
            action:
              type: string
              enum: [check_overdue_applications, check_reminder_applications, send_daily_report, automated_monitoring]
    responses:
      200:
        description: Action result
      400:
        description: Unknown action
    """
    data = parse_body(KVKKSchedulerAction)
    result = run_action(data.action)
    return jsonify({'success': True, 'action': data.action, 'result': result})


@kvkk_bp.route('/admin/compliance', methods=['GET'])
@admin_required
def admin_compliance():
    """
    Compliance score, risk level and recommendations
    ---
    tags:
      - KVKK Admin
    security:
      - Bearer: []
    parameters:
      - name: period_days
        in: query
        type: integer
    responses:
      200:
        description: Compliance metrics
    """
    period_days = min(max(request.args.get('period_days', 30, type=int), 1), 365)
    return jsonify(calculate_compliance_score(period_days))


@kvkk_bp.route('/admin/compliance/trend', methods=['GET'])
@admin_required
def admin_compliance_trend():
    """Daily compliance trend"""
    days = min(max(request.args.get('days', 30, type=int), 1), 365)
    return jsonify({'days': days, 'trend': get_compliance_trend(days)})


@kvkk_bp.route('/admin/compliance/report', methods=['GET'])
@admin_required
def admin_compliance_report():
    """Full automated compliance report"""
    return jsonify(generate_automated_report())
