# -*- coding: utf-8 -*-
"""
Customer Routes - Company-scoped customer records
"""
import logging

from flask import Blueprint, jsonify, g, request

from enerjios.extensions import db
from enerjios.models import AuditLog, Customer, ProjectRequest
from enerjios.schemas.crm import CustomerCreate, CustomerUpdate
from enerjios.utils.decorators import roles_required
from enerjios.utils.helpers import (
    client_ip, ensure_company_access, get_or_404, get_pagination_args,
    paginated_response, parse_body, resolve_company_id, scope_to_company,
)

logger = logging.getLogger(__name__)

customers_bp = Blueprint('customers', __name__, url_prefix='/api/customers')

STAFF_ROLES = ('ADMIN', 'COMPANY', 'EMPLOYEE')


def _get_customer(customer_id):
    customer = get_or_404(Customer, customer_id, 'Müşteri')
    ensure_company_access(g.current_user, customer.company_id)
    return customer


@customers_bp.route('', methods=['GET'])
@roles_required(*STAFF_ROLES)
def list_customers():
    """
    List customers
    ---
    tags:
      - Customers
    security:
      - Bearer: []
    parameters:
      - name: search
        in: query
        type: string
      - name: city
        in: query
        type: string
      - name: page
        in: query
        type: integer
      - name: per_page
        in: query
        type: integer
    responses:
      200:
        description: Paginated customers
    """
    query = scope_to_company(Customer.query, Customer, g.current_user)

    search = request.args.get('search', '').strip()
    if search:
        like = f'%{search}%'
        query = query.filter(db.or_(
            Customer.first_name.ilike(like),
            Customer.last_name.ilike(like),
            Customer.company_name.ilike(like),
            Customer.email.ilike(like),
            Customer.phone.ilike(like),
        ))
    city = request.args.get('city')
    if city:
        query = query.filter(Customer.city == city)

    page, per_page = get_pagination_args()
    pagination = query.order_by(Customer.created_at.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    return jsonify(paginated_response(pagination, 'customers'))


@customers_bp.route('', methods=['POST'])
@roles_required(*STAFF_ROLES)
def create_customer():
    """
    Create a customer
    ---
    tags:
      - Customers
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [first_name, last_name]
          properties:
            first_name:
              type: string
            last_name:
              type: string
            email:
              type: string
            phone:
              type: string
            city:
              type: string
    responses:
      201:
        description: Customer created
    """
    data = parse_body(CustomerCreate)
    company_id = resolve_company_id(g.current_user, data.company_id)

    customer = Customer(company_id=company_id, **data.model_dump(exclude={'company_id'}))
    db.session.add(customer)
    db.session.commit()
    logger.info(f"Customer {customer.id} created for company {company_id}")
    return jsonify({'customer': customer.to_dict()}), 201


@customers_bp.route('/<int:customer_id>', methods=['GET'])
@roles_required(*STAFF_ROLES)
def get_customer(customer_id):
    """
    Customer details with project and quote counts
    ---
    tags:
      - Customers
    security:
      - Bearer: []
    parameters:
      - name: customer_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Customer
      404:
        description: Not found
    """
    customer = _get_customer(customer_id)
    data = customer.to_dict()
    data['project_count'] = customer.projects.count()
    data['quote_count'] = customer.quotes.count()
    return jsonify({'customer': data})


@customers_bp.route('/<int:customer_id>', methods=['PUT', 'PATCH'])
@roles_required(*STAFF_ROLES)
def update_customer(customer_id):
    """
    Update a customer
    ---
    tags:
      - Customers
    security:
      - Bearer: []
    responses:
      200:
        description: Updated customer
    """
    customer = _get_customer(customer_id)
    data = parse_body(CustomerUpdate)

    changes = data.model_dump(exclude_unset=True)
    old_values = {key: getattr(customer, key) for key in changes}
    for key, value in changes.items():
        setattr(customer, key, value)

    AuditLog.log(
        action='update',
        user=g.current_user,
        table_name='customers',
        record_id=customer.id,
        old_values=old_values,
        new_values=changes,
        ip_address=client_ip(),
        endpoint=request.path,
    )
    db.session.commit()
    return jsonify({'customer': customer.to_dict()})


@customers_bp.route('/<int:customer_id>', methods=['DELETE'])
@roles_required('ADMIN', 'COMPANY')
def delete_customer(customer_id):
    """
    Delete a customer together with their quotes and projects.
    All rows go in a single transaction.
    ---
    tags:
      - Customers
    security:
      - Bearer: []
    responses:
      200:
        description: Deleted
      404:
        description: Not found
    """
    customer = _get_customer(customer_id)

    projects = customer.projects.all()
    quotes = {quote.id: quote for quote in customer.quotes}
    for project in projects:
        quotes.update({quote.id: quote for quote in project.quotes})
    quotes = list(quotes.values())
    try:
        for quote in quotes:
            db.session.delete(quote)
        for project in projects:
            ProjectRequest.query.filter_by(project_id=project.id).update(
                {'project_id': None}, synchronize_session=False
            )
            db.session.delete(project)
        ProjectRequest.query.filter_by(customer_id=customer.id).update(
            {'customer_id': None}, synchronize_session=False
        )

        AuditLog.log_data_deletion(
            user=g.current_user,
            table_name='customers',
            record_id=customer.id,
            description=f"Deleted customer {customer.full_name} with "
                        f"{len(quotes)} quotes and {len(projects)} projects",
            ip_address=client_ip(),
        )
        db.session.delete(customer)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Customer {customer_id} deleted by user {g.current_user.id}")
    return jsonify({
        'success': True,
        'deleted': {'quotes': len(quotes), 'projects': len(projects)},
    })
