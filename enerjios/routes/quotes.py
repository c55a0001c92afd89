# -*- coding: utf-8 -*-
"""
Quote Routes
Company-side quote management, the public customer view reached via
the delivery link, and the cron trigger for quote housekeeping.
"""
import logging

from flask import Blueprint, jsonify, g, request, Response, current_app

from enerjios.extensions import db
from enerjios.models import Customer, Project, Quote, QuoteStatus
from enerjios.schemas.crm import (
    QuoteApproveIn, QuoteCreate, QuoteRejectIn, QuoteSendIn, QuoteUpdate,
)
from enerjios.services.quote_delivery import deliver_quote, public_quote_url
from enerjios.services.quote_scheduler import SCHEDULED_TASKS, expire_if_needed, run_scheduled_tasks
from enerjios.services.quotes import (
    approve_quote, build_items, create_quote, get_quote_by_token, reject_quote, view_public_quote,
)
from enerjios.utils.decorators import cron_secret_required, roles_required
from enerjios.utils.errors import GoneError, NotFoundError, ValidationError
from enerjios.utils.helpers import (
    client_ip, ensure_company_access, get_or_404, get_pagination_args,
    parse_body, resolve_company_id, scope_to_company,
)
from enerjios.utils.quote_pdf import QuotePDFGenerator
from enerjios.utils.timezone import to_naive_utc, utc_now_naive

logger = logging.getLogger(__name__)

quotes_bp = Blueprint('quotes', __name__, url_prefix='/api/quotes')
public_quotes_bp = Blueprint('public_quotes', __name__, url_prefix='/api/public/quotes')
cron_bp = Blueprint('cron', __name__, url_prefix='/api/cron')

STAFF_ROLES = ('ADMIN', 'COMPANY', 'EMPLOYEE')


def _get_quote(quote_id):
    quote = get_or_404(Quote, quote_id, 'Teklif')
    ensure_company_access(g.current_user, quote.company_id)
    return quote


def _ensure_draft(quote):
    if quote.status != QuoteStatus.DRAFT:
        raise ValidationError('Sadece taslak teklifler değiştirilebilir')


def _check_references(company_id, customer_id, project_id):
    """Customer and project must belong to the quoting company"""
    if customer_id:
        customer = db.session.get(Customer, customer_id)
        if customer is None or customer.company_id != company_id:
            raise NotFoundError('Müşteri')
    if project_id:
        project = db.session.get(Project, project_id)
        if project is None or project.company_id != company_id:
            raise NotFoundError('Proje')


def _pdf_response(quote, public_url=None):
    pdf = QuotePDFGenerator().create_quote_pdf(quote, public_url)
    return Response(
        pdf,
        mimetype='application/pdf',
        headers={'Content-Disposition': f'inline; filename="{quote.quote_number}.pdf"'},
    )


# ══════════════════════════════════════════════════════════════════
# COMPANY SIDE
# ══════════════════════════════════════════════════════════════════

@quotes_bp.route('', methods=['GET'])
@roles_required(*STAFF_ROLES)
def list_quotes():
    """
    List quotes
    ---
    tags:
      - Quotes
    security:
      - Bearer: []
    parameters:
      - name: status
        in: query
        type: string
        enum: [DRAFT, SENT, VIEWED, APPROVED, REJECTED, EXPIRED]
      - name: customer_id
        in: query
        type: integer
    responses:
      200:
        description: Paginated quotes
    """
    query = scope_to_company(Quote.query, Quote, g.current_user)

    status = request.args.get('status')
    if status:
        query = query.filter(Quote.status == status)
    customer_id = request.args.get('customer_id', type=int)
    if customer_id:
        query = query.filter(Quote.customer_id == customer_id)

    page, per_page = get_pagination_args()
    pagination = query.order_by(Quote.created_at.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    return jsonify({
        'quotes': [q.to_dict(include_items=False) for q in pagination.items],
        'total': pagination.total,
        'page': pagination.page,
        'pages': pagination.pages,
        'per_page': pagination.per_page,
    })


@quotes_bp.route('', methods=['POST'])
@roles_required(*STAFF_ROLES)
def create_quote_route():
    """
    Create a draft quote
    ---
    tags:
      - Quotes
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [items]
          properties:
            customer_id:
              type: integer
            project_id:
              type: integer
            title:
              type: string
            discount:
              type: number
            tax_rate:
              type: number
            valid_until:
              type: string
              format: date-time
            items:
              type: array
              items:
                type: object
                properties:
                  product_id:
                    type: integer
                  description:
                    type: string
                  quantity:
                    type: number
                  unit_price:
                    type: number
    responses:
      201:
        description: Quote created
      400:
        description: Validation error
    """
    data = parse_body(QuoteCreate)
    company_id = resolve_company_id(g.current_user, data.company_id)
    _check_references(company_id, data.customer_id, data.project_id)

    quote = create_quote(data, company_id, g.current_user)
    return jsonify({'quote': quote.to_dict()}), 201


@quotes_bp.route('/<int:quote_id>', methods=['GET'])
@roles_required(*STAFF_ROLES)
def get_quote(quote_id):
    """
    Quote details
    ---
    tags:
      - Quotes
    security:
      - Bearer: []
    responses:
      200:
        description: Quote with items
      404:
        description: Not found
    """
    quote = _get_quote(quote_id)
    if expire_if_needed(quote):
        db.session.commit()
    data = quote.to_dict()
    data['public_url'] = public_quote_url(quote.delivery_token) if quote.delivery_token else None
    return jsonify({'quote': data})


@quotes_bp.route('/<int:quote_id>', methods=['PUT', 'PATCH'])
@roles_required(*STAFF_ROLES)
def update_quote(quote_id):
    """
    Update a draft quote
    ---
    tags:
      - Quotes
    security:
      - Bearer: []
    responses:
      200:
        description: Updated quote
      400:
        description: Quote is not a draft
    """
    quote = _get_quote(quote_id)
    _ensure_draft(quote)
    data = parse_body(QuoteUpdate)

    for field in ('title', 'notes', 'terms', 'discount', 'tax_rate'):
        value = getattr(data, field)
        if value is not None:
            setattr(quote, field, value)
    if data.valid_until is not None:
        quote.valid_until = to_naive_utc(data.valid_until)

    if data.items is not None:
        build_items(quote, data.items, quote.company_id)
    else:
        quote.recalculate_totals()

    db.session.commit()
    return jsonify({'quote': quote.to_dict()})


@quotes_bp.route('/<int:quote_id>', methods=['DELETE'])
@roles_required(*STAFF_ROLES)
def delete_quote(quote_id):
    """
    Delete a draft quote
    ---
    tags:
      - Quotes
    security:
      - Bearer: []
    responses:
      200:
        description: Deleted
      400:
        description: Quote is not a draft
    """
    quote = _get_quote(quote_id)
    _ensure_draft(quote)
    db.session.delete(quote)
    db.session.commit()
    logger.info(f"Quote {quote.quote_number} deleted by user {g.current_user.id}")
    return jsonify({'success': True})


@quotes_bp.route('/<int:quote_id>/send', methods=['POST'])
@roles_required(*STAFF_ROLES)
def send_quote(quote_id):
    """
    Send a draft quote to the customer over one or more channels.
    The quote becomes SENT when at least one channel succeeds.
    ---
    tags:
      - Quotes
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [channels]
          properties:
            channels:
              type: array
              items:
                type: string
                enum: [EMAIL, WHATSAPP, SMS]
            email:
              type: string
            phone:
              type: string
            message:
              type: string
    responses:
      200:
        description: Per-channel results
      403:
        description: Only the creator can send the quote
    """
    quote = _get_quote(quote_id)
    data = parse_body(QuoteSendIn)

    report = deliver_quote(
        quote, data.channels, g.current_user,
        email=data.email, phone=data.phone, name=data.name, message=data.message,
    )
    return jsonify({
        'success': report.success,
        'results': report.results,
        'quote': quote.to_dict(include_items=False),
        'public_url': public_quote_url(quote.delivery_token) if quote.delivery_token else None,
    })


@quotes_bp.route('/<int:quote_id>/pdf', methods=['GET'])
@roles_required(*STAFF_ROLES)
def quote_pdf(quote_id):
    """
    Download the quote as PDF
    ---
    tags:
      - Quotes
    security:
      - Bearer: []
    produces:
      - application/pdf
    responses:
      200:
        description: PDF file
    """
    quote = _get_quote(quote_id)
    public_url = public_quote_url(quote.delivery_token) if quote.delivery_token else None
    return _pdf_response(quote, public_url)


# ══════════════════════════════════════════════════════════════════
# PUBLIC (token) SIDE
# ══════════════════════════════════════════════════════════════════

@public_quotes_bp.route('/<token>', methods=['GET'])
def public_view(token):
    """
    Customer view of a quote via the delivery link.
    ---
    tags:
      - Public Quotes
    parameters:
      - name: token
        in: path
        type: string
        required: true
    responses:
      200:
        description: Quote
      404:
        description: Unknown token
      410:
        description: Quote expired
    """
    quote = view_public_quote(token)
    return jsonify({'quote': quote.to_public_dict()})


@public_quotes_bp.route('/<token>/approve', methods=['POST'])
def public_approve(token):
    """
    Customer approves the quote
    ---
    tags:
      - Public Quotes
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [customer_name, accepted_terms]
          properties:
            customer_name:
              type: string
            accepted_terms:
              type: boolean
            comments:
              type: string
            signature:
              type: string
    responses:
      200:
        description: Quote approved
      400:
        description: Quote can no longer be answered
      410:
        description: Quote expired
    """
    data = parse_body(QuoteApproveIn)
    quote = approve_quote(token, data, client_ip(), request.headers.get('User-Agent'))
    return jsonify({'success': True, 'quote': quote.to_public_dict()})


@public_quotes_bp.route('/<token>/reject', methods=['POST'])
def public_reject(token):
    """
    Customer rejects the quote
    ---
    tags:
      - Public Quotes
    parameters:
      - name: body
        in: body
        schema:
          type: object
          properties:
            reason:
              type: string
    responses:
      200:
        description: Quote rejected
      410:
        description: Quote expired
    """
    data = QuoteRejectIn.model_validate(request.get_json(silent=True) or {})
    quote = reject_quote(token, data, client_ip(), request.headers.get('User-Agent'))
    return jsonify({'success': True, 'quote': quote.to_public_dict()})


@public_quotes_bp.route('/<token>/pdf', methods=['GET'])
def public_pdf(token):
    """
    Customer downloads the quote PDF
    ---
    tags:
      - Public Quotes
    produces:
      - application/pdf
    responses:
      200:
        description: PDF file
      410:
        description: Quote expired
    """
    quote = get_quote_by_token(token)
    if expire_if_needed(quote):
        db.session.commit()
    if quote.status == QuoteStatus.EXPIRED:
        raise GoneError('Bu teklifin geçerlilik süresi dolmuş')
    return _pdf_response(quote, public_quote_url(token))


# ══════════════════════════════════════════════════════════════════
# CRON
# ══════════════════════════════════════════════════════════════════

@cron_bp.route('/quotes', methods=['GET', 'POST'])
@cron_secret_required
def quote_cron():
    """
    Run quote housekeeping.
    GET runs every task; POST {"task": name} runs one.
    ---
    tags:
      - Cron
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        schema:
          type: object
          properties:
            task:
              type: string
              enum: [expired, warnings, reminders, cleanup, analytics]
    responses:
      200:
        description: Task results
      400:
        description: Unknown task
      401:
        description: Missing or wrong cron secret
    """
    now = utc_now_naive()
    if request.method == 'GET':
        results = run_scheduled_tasks(now)
        return jsonify({'success': True, 'results': results, 'timestamp': now.isoformat()})

    task = (request.get_json(silent=True) or {}).get('task')
    if task not in SCHEDULED_TASKS:
        raise ValidationError('Geçersiz görev', details={'valid_tasks': list(SCHEDULED_TASKS)})

    result = SCHEDULED_TASKS[task](now)
    current_app.logger.info(f"Cron quote task '{task}' completed")
    return jsonify({'success': True, 'task': task, 'result': result, 'timestamp': now.isoformat()})
