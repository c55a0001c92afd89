# -*- coding: utf-8 -*-
"""
Partner Network Routes - Registration, directory, reviews and commissions
"""
import logging

from flask import Blueprint, jsonify, g, request

from enerjios.extensions import db
from enerjios.models import Commission, Company, Partner, PartnerReview, Quote, QuoteStatus
from enerjios.schemas.partner import CommissionCreate, PartnerRegisterIn, PartnerReviewIn
from enerjios.utils.decorators import admin_required, login_required, roles_required
from enerjios.utils.errors import AuthorizationError, ConflictError, ValidationError
from enerjios.utils.helpers import get_or_404, get_pagination_args, paginated_response, parse_body

logger = logging.getLogger(__name__)

partners_bp = Blueprint('partners', __name__, url_prefix='/api/partners')


@partners_bp.route('/register', methods=['POST'])
@roles_required('ADMIN', 'COMPANY')
def register_partner():
    """
    Register a company as a partner
    ---
    tags:
      - Partners
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [company_id, service_areas, max_project_size]
          properties:
            company_id:
              type: integer
            partner_type:
              type: string
              enum: [INSTALLER, EPC, DISTRIBUTOR, CONSULTANT]
            service_areas:
              type: array
              items:
                type: string
            min_project_size:
              type: number
            max_project_size:
              type: number
            response_time_hours:
              type: integer
    responses:
      201:
        description: Partner registered
      400:
        description: Invalid project size range
      403:
        description: User does not own the company
      409:
        description: Company already registered as a partner
    """
    data = parse_body(PartnerRegisterIn)
    user = g.current_user

    company = get_or_404(Company, data.company_id, 'Firma')
    if not user.owns_company(company.id):
        raise AuthorizationError('Bu firma adına işlem yapma yetkiniz yok')
    if data.min_project_size >= data.max_project_size:
        raise ValidationError('Minimum proje büyüklüğü maksimumdan küçük olmalıdır')
    if Partner.query.filter_by(company_id=company.id).first():
        raise ConflictError('Bu firma zaten partner olarak kayıtlı')

    partner = Partner(
        company_id=company.id,
        partner_type=data.partner_type,
        min_project_size=data.min_project_size,
        max_project_size=data.max_project_size,
        response_time_hours=data.response_time_hours,
        description=data.description,
        preferred_contact=data.preferred_contact,
    )
    partner.service_areas = data.service_areas
    partner.specialties = data.specialties
    db.session.add(partner)
    db.session.commit()

    logger.info(f"Company {company.id} registered as partner {partner.id}")
    return jsonify({'partner': partner.to_dict()}), 201


@partners_bp.route('', methods=['GET'])
@login_required
def list_partners():
    """
    Partner directory
    ---
    tags:
      - Partners
    security:
      - Bearer: []
    parameters:
      - name: city
        in: query
        type: string
      - name: partner_type
        in: query
        type: string
      - name: capacity_kw
        in: query
        type: number
      - name: verified
        in: query
        type: boolean
    responses:
      200:
        description: Partners sorted by rating
    """
    query = Partner.query.filter(Partner.is_active.is_(True))
    partner_type = request.args.get('partner_type')
    if partner_type:
        query = query.filter(Partner.partner_type == partner_type)
    if request.args.get('verified', '').lower() == 'true':
        query = query.filter(Partner.is_verified.is_(True))

    partners = query.order_by(Partner.rating.desc(), Partner.response_time_hours.asc()).all()

    # Service areas are stored as JSON text, so area and size filters run here
    city = request.args.get('city')
    if city:
        partners = [p for p in partners if p.serves(city)]
    capacity_kw = request.args.get('capacity_kw', type=float)
    if capacity_kw is not None:
        partners = [p for p in partners if p.accepts_size(capacity_kw)]

    return jsonify({'partners': [p.to_dict() for p in partners], 'total': len(partners)})


@partners_bp.route('/<int:partner_id>', methods=['GET'])
@login_required
def get_partner(partner_id):
    """Partner profile with its latest reviews"""
    partner = get_or_404(Partner, partner_id, 'Partner')
    data = partner.to_dict()
    data['reviews'] = [r.to_dict() for r in sorted(
        partner.reviews, key=lambda r: r.created_at, reverse=True
    )[:10]]
    return jsonify({'partner': data})


@partners_bp.route('/<int:partner_id>/reviews', methods=['POST'])
@login_required
def review_partner(partner_id):
    """
    Review a partner; the partner rating is recomputed
    ---
    tags:
      - Partners
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [rating]
          properties:
            rating:
              type: integer
              minimum: 1
              maximum: 5
            comment:
              type: string
    responses:
      201:
        description: Review stored
      403:
        description: Partners cannot review themselves
      409:
        description: User already reviewed this partner
    """
    partner = get_or_404(Partner, partner_id, 'Partner')
    data = parse_body(PartnerReviewIn)
    user = g.current_user

    if user.company_id and user.company_id == partner.company_id:
        raise AuthorizationError('Kendi firmanızı değerlendiremezsiniz')
    if PartnerReview.query.filter_by(partner_id=partner.id, reviewer_id=user.id).first():
        raise ConflictError('Bu partneri zaten değerlendirdiniz')

    review = PartnerReview(partner=partner, reviewer_id=user.id,
                           rating=data.rating, comment=data.comment)
    db.session.add(review)
    db.session.flush()
    partner.recalculate_rating()
    db.session.commit()

    return jsonify({
        'review': review.to_dict(),
        'rating': partner.rating,
        'review_count': partner.review_count,
    }), 201


@partners_bp.route('/<int:partner_id>/commissions', methods=['GET'])
@login_required
def list_commissions(partner_id):
    """
    Commissions of a partner
    ---
    tags:
      - Partners
    security:
      - Bearer: []
    responses:
      200:
        description: Commissions and totals
    """
    partner = get_or_404(Partner, partner_id, 'Partner')
    if not g.current_user.owns_company(partner.company_id):
        raise AuthorizationError('Bu partnerin komisyonlarını görme yetkiniz yok')

    page, per_page = get_pagination_args()
    pagination = partner.commissions.order_by(Commission.created_at.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    result = paginated_response(pagination, 'commissions')
    result['total_pending'] = round(sum(
        c.amount for c in partner.commissions.filter_by(status='PENDING')
    ), 2)
    result['total_paid'] = round(sum(
        c.amount for c in partner.commissions.filter_by(status='PAID')
    ), 2)
    return jsonify(result)


@partners_bp.route('/<int:partner_id>/commissions', methods=['POST'])
@admin_required
def create_commission(partner_id):
    """
    Record a commission on an approved quote
    ---
    tags:
      - Partners
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [quote_id]
          properties:
            quote_id:
              type: integer
            rate:
              type: number
              description: Percent; defaults to the partner's rate
    responses:
      201:
        description: Commission created
      400:
        description: Quote is not approved
      409:
        description: Commission already recorded for the quote
    """
    partner = get_or_404(Partner, partner_id, 'Partner')
    data = parse_body(CommissionCreate)
    quote = get_or_404(Quote, data.quote_id, 'Teklif')

    if quote.status != QuoteStatus.APPROVED:
        raise ValidationError('Komisyon sadece onaylanmış teklifler için oluşturulabilir')
    if Commission.query.filter_by(partner_id=partner.id, quote_id=quote.id).first():
        raise ConflictError('Bu teklif için komisyon zaten kayıtlı')

    rate = data.rate if data.rate is not None else partner.commission_rate
    commission = Commission(
        partner_id=partner.id,
        quote_id=quote.id,
        rate=rate,
        amount=round((quote.total or 0) * rate / 100, 2),
    )
    db.session.add(commission)
    db.session.commit()
    return jsonify({'commission': commission.to_dict()}), 201
