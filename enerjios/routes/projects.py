# -*- coding: utf-8 -*-
"""
Project Request Routes
Lead intake, status workflow with history, next-step suggestions and
partner routing.
"""
import logging

from flask import Blueprint, jsonify, g, request

from enerjios.extensions import db
from enerjios.models import (
    Project, ProjectRequest, ProjectRequestStatus, ProjectRequestStatusHistory, ProjectStatus,
)
from enerjios.schemas.crm import ProjectRequestCreate, ProjectRequestStatusUpdate
from enerjios.services.lead_routing import route_project_request
from enerjios.services.next_steps import (
    calculate_next_steps, format_next_step, get_next_step_stats,
)
from enerjios.utils.decorators import login_required, roles_required
from enerjios.utils.errors import ValidationError
from enerjios.utils.helpers import (
    ensure_company_access, generate_number, get_or_404, get_pagination_args,
    paginated_response, parse_body, resolve_company_id, scope_to_company,
)
from enerjios.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)

projects_bp = Blueprint('projects', __name__, url_prefix='/api')

STAFF_ROLES = ('ADMIN', 'COMPANY', 'EMPLOYEE')


def _get_request(request_id):
    project_request = get_or_404(ProjectRequest, request_id, 'Proje talebi')
    ensure_company_access(g.current_user, project_request.company_id)
    return project_request


@projects_bp.route('/projects', methods=['GET'])
@roles_required(*STAFF_ROLES)
def list_projects():
    """
    List projects
    ---
    tags:
      - Projects
    security:
      - Bearer: []
    parameters:
      - name: status
        in: query
        type: string
    responses:
      200:
        description: Paginated projects
    """
    query = scope_to_company(Project.query, Project, g.current_user)
    status = request.args.get('status')
    if status:
        query = query.filter(Project.status == status)

    page, per_page = get_pagination_args()
    pagination = query.order_by(Project.created_at.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    return jsonify(paginated_response(pagination, 'projects'))


@projects_bp.route('/project-requests', methods=['GET'])
@roles_required(*STAFF_ROLES)
def list_project_requests():
    """
    List project requests
    ---
    tags:
      - Project Requests
    security:
      - Bearer: []
    parameters:
      - name: status
        in: query
        type: string
        enum: [OPEN, CONTACTED, ASSIGNED, SITE_VISIT, CONVERTED_TO_PROJECT, LOST]
      - name: priority
        in: query
        type: string
      - name: city
        in: query
        type: string
    responses:
      200:
        description: Paginated project requests
    """
    query = scope_to_company(ProjectRequest.query, ProjectRequest, g.current_user)

    for field in ('status', 'priority', 'city'):
        value = request.args.get(field)
        if value:
            query = query.filter(getattr(ProjectRequest, field) == value)

    page, per_page = get_pagination_args()
    pagination = query.order_by(ProjectRequest.created_at.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    return jsonify(paginated_response(pagination, 'requests'))


@projects_bp.route('/project-requests', methods=['POST'])
@login_required
def create_project_request():
    """
    Create a project request (lead)
    ---
    tags:
      - Project Requests
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [customer_name]
          properties:
            customer_name:
              type: string
            customer_email:
              type: string
            customer_phone:
              type: string
            city:
              type: string
            estimated_capacity:
              type: number
              description: kWp
            priority:
              type: string
              enum: [HIGH, MEDIUM, LOW]
    responses:
      201:
        description: Request created
    """
    data = parse_body(ProjectRequestCreate)
    user = g.current_user
    now = utc_now_naive()

    if user.role in STAFF_ROLES:
        company_id = resolve_company_id(user, data.company_id)
    else:
        company_id = user.company_id

    project_request = ProjectRequest(
        request_number=generate_number('PRJ', now),
        company_id=company_id,
        status=ProjectRequestStatus.OPEN,
        **data.model_dump(exclude={'company_id'}),
    )
    project_request.status_history.append(ProjectRequestStatusHistory(
        status=ProjectRequestStatus.OPEN,
        changed_by_id=user.id,
        changed_at=now,
        note='Talep oluşturuldu',
    ))
    db.session.add(project_request)
    db.session.commit()

    logger.info(f"Project request {project_request.request_number} created")
    return jsonify({'request': project_request.to_dict()}), 201


@projects_bp.route('/project-requests/<int:request_id>', methods=['GET'])
@roles_required(*STAFF_ROLES)
def get_project_request(request_id):
    """
    Project request with status history
    ---
    tags:
      - Project Requests
    security:
      - Bearer: []
    responses:
      200:
        description: Request
      404:
        description: Not found
    """
    project_request = _get_request(request_id)
    return jsonify({'request': project_request.to_dict(include_history=True)})


@projects_bp.route('/project-requests/<int:request_id>/status', methods=['PUT', 'PATCH'])
@roles_required(*STAFF_ROLES)
def update_project_request_status(request_id):
    """
    Move a project request to a new status.
    Every change is recorded in the status history; converting a
    request creates its project.
    ---
    tags:
      - Project Requests
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
            note:
              type: string
            assigned_to_id:
              type: integer
    responses:
      200:
        description: Updated request
      400:
        description: Same status or closed request
    """
    project_request = _get_request(request_id)
    data = parse_body(ProjectRequestStatusUpdate)
    now = utc_now_naive()

    if data.status == project_request.status:
        raise ValidationError('Talep zaten bu durumda')
    if project_request.status == ProjectRequestStatus.CONVERTED_TO_PROJECT:
        raise ValidationError('Projeye dönüştürülmüş talep güncellenemez')

    previous = project_request.status
    project_request.status = data.status
    project_request.updated_at = now
    if data.assigned_to_id is not None:
        project_request.assigned_to_id = data.assigned_to_id

    project_request.status_history.append(ProjectRequestStatusHistory(
        status=data.status,
        previous_status=previous,
        changed_by_id=g.current_user.id,
        note=data.note,
        changed_at=now,
    ))

    if data.status == ProjectRequestStatus.CONVERTED_TO_PROJECT and project_request.project_id is None:
        if not project_request.company_id:
            raise ValidationError('Firma atanmamış talep projeye dönüştürülemez')
        project = Project(
            company_id=project_request.company_id,
            customer_id=project_request.customer_id,
            name=f"{project_request.customer_name} - {project_request.project_type}",
            project_type=project_request.project_type,
            capacity_kw=project_request.estimated_capacity,
            city=project_request.city,
            address=project_request.address,
            status=ProjectStatus.DRAFT,
        )
        db.session.add(project)
        db.session.flush()
        project_request.project_id = project.id

    db.session.commit()
    logger.info(f"Project request {project_request.request_number}: {previous} -> {data.status}")
    return jsonify({'request': project_request.to_dict(include_history=True)})


@projects_bp.route('/project-requests/<int:request_id>/next-steps', methods=['GET'])
@roles_required(*STAFF_ROLES)
def get_next_steps(request_id):
    """
    Suggested follow-up steps for a request
    ---
    tags:
      - Project Requests
    security:
      - Bearer: []
    responses:
      200:
        description: Steps sorted by priority then due date
    """
    project_request = _get_request(request_id)
    now = utc_now_naive()
    steps = [format_next_step(step, now) for step in calculate_next_steps(project_request, now)]
    return jsonify({'request_id': project_request.id, 'status': project_request.status, 'steps': steps})


@projects_bp.route('/project-requests/next-steps/overview', methods=['GET'])
@roles_required(*STAFF_ROLES)
def next_steps_overview():
    """
    Next-step statistics and the most urgent steps across active requests
    ---
    tags:
      - Project Requests
    security:
      - Bearer: []
    parameters:
      - name: limit
        in: query
        type: integer
        description: Number of urgent steps to return (default 10)
    responses:
      200:
        description: Stats and urgent steps
    """
    now = utc_now_naive()
    limit = min(max(request.args.get('limit', 10, type=int), 1), 100)

    query = scope_to_company(ProjectRequest.query, ProjectRequest, g.current_user)
    requests_ = query.filter(ProjectRequest.status.notin_((
        ProjectRequestStatus.CONVERTED_TO_PROJECT, ProjectRequestStatus.LOST,
    ))).all()

    steps = [step for r in requests_ for step in calculate_next_steps(r, now)]
    steps.sort(key=lambda s: (not s['is_overdue'], s['due_date']))

    return jsonify({
        'stats': get_next_step_stats(requests_, now),
        'urgent_steps': [format_next_step(step, now) for step in steps[:limit]],
    })


@projects_bp.route('/project-requests/<int:request_id>/route-partners', methods=['POST'])
@roles_required('ADMIN', 'COMPANY')
def route_to_partners(request_id):
    """
    Send a request to the best matching partners
    ---
    tags:
      - Project Requests
    security:
      - Bearer: []
    parameters:
      - name: limit
        in: query
        type: integer
        description: Maximum partners (default 3)
    responses:
      200:
        description: Created partner quote requests
    """
    project_request = _get_request(request_id)
    limit = min(max(request.args.get('limit', 3, type=int), 1), 10)
    routed = route_project_request(project_request, limit)
    return jsonify({
        'routed': len(routed),
        'partner_requests': [r.to_dict() for r in routed],
    })
