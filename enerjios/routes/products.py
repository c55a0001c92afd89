# -*- coding: utf-8 -*-
"""
Product Catalog Routes
"""
from flask import Blueprint, jsonify, g, request

from enerjios.extensions import db
from enerjios.models import Product
from enerjios.schemas.crm import ProductCreate
from enerjios.utils.decorators import roles_required
from enerjios.utils.helpers import parse_body, resolve_company_id

products_bp = Blueprint('products', __name__, url_prefix='/api/products')


@products_bp.route('', methods=['GET'])
@roles_required('ADMIN', 'COMPANY', 'EMPLOYEE')
def list_products():
    """
    List active products (company catalog plus shared products)
    ---
    tags:
      - Products
    security:
      - Bearer: []
    parameters:
      - name: category
        in: query
        type: string
        enum: [PANEL, INVERTER, BATTERY, MOUNTING, CABLE, OTHER]
    responses:
      200:
        description: Products
    """
    user = g.current_user
    query = Product.query.filter(Product.is_active.is_(True))
    if not user.is_admin():
        query = query.filter(db.or_(Product.company_id == user.company_id,
                                    Product.company_id.is_(None)))

    category = request.args.get('category')
    if category:
        query = query.filter(Product.category == category)

    products = query.order_by(Product.category, Product.name).all()
    return jsonify({'products': [p.to_dict() for p in products]})


@products_bp.route('', methods=['POST'])
@roles_required('ADMIN', 'COMPANY')
def create_product():
    """
    Add a product to the company catalog
    ---
    tags:
      - Products
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [name, unit_price]
          properties:
            name:
              type: string
            category:
              type: string
            unit_price:
              type: number
            power_watt:
              type: number
    responses:
      201:
        description: Product created
    """
    data = parse_body(ProductCreate)
    user = g.current_user
    if user.is_admin():
        # Admin products without a company are shared by every catalog
        company_id = request.args.get('company_id', type=int)
    else:
        company_id = resolve_company_id(user)

    product = Product(company_id=company_id, **data.model_dump())
    product.currency = product.currency.upper()
    db.session.add(product)
    db.session.commit()
    return jsonify({'product': product.to_dict()}), 201
