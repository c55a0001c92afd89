# -*- coding: utf-8 -*-
"""
Photo Request Routes
Companies ask customers for site photos (roof, panel, bill); customers
upload them through a token link without an account.
"""
import os
import logging
from datetime import timedelta

from flask import Blueprint, jsonify, g, request, current_app
from werkzeug.utils import secure_filename

from enerjios.extensions import db
from enerjios.models import PhotoRequest, PhotoRequestStatus, PhotoUpload
from enerjios.schemas.partner import PhotoRequestCreate
from enerjios.services.email_service import EmailService
from enerjios.utils.decorators import roles_required
from enerjios.utils.errors import GoneError, NotFoundError, ValidationError
from enerjios.utils.helpers import ensure_company_access, get_or_404, parse_body, resolve_company_id
from enerjios.utils.security import generate_token
from enerjios.utils.timezone import utc_now_naive

logger = logging.getLogger(__name__)

photos_bp = Blueprint('photos', __name__, url_prefix='/api/photo-requests')
public_photos_bp = Blueprint('public_photos', __name__, url_prefix='/api/public/photo-requests')

PHOTO_CATEGORIES = ('ROOF', 'ELECTRICAL_PANEL', 'SURROUNDINGS', 'BILL', 'OTHER')
MAX_FILES_PER_UPLOAD = 10


def photo_upload_url(token):
    return f"{current_app.config['APP_URL'].rstrip('/')}/photos/upload/{token}"


def allowed_file(filename):
    return '.' in filename and \
        filename.rsplit('.', 1)[1].lower() in current_app.config['ALLOWED_PHOTO_EXTENSIONS']


def _get_open_request(token, now):
    photo_request = PhotoRequest.query.filter_by(token=token).first()
    if photo_request is None:
        raise NotFoundError('Fotoğraf talebi')
    if photo_request.is_expired(now):
        if photo_request.status == PhotoRequestStatus.PENDING:
            photo_request.status = PhotoRequestStatus.EXPIRED
            db.session.commit()
        raise GoneError('Bu fotoğraf talebinin süresi dolmuş')
    return photo_request


def _notify_customer(photo_request, company_name):
    """Best effort: the request exists even if the email fails"""
    if not photo_request.customer_email:
        return False
    try:
        success, error = EmailService().send_photo_request(
            photo_request, photo_upload_url(photo_request.token), company_name
        )
        if not success:
            logger.warning(f"Photo request email {photo_request.id} failed: {error}")
        return success
    except Exception as e:
        logger.exception(f"Photo request email {photo_request.id} raised: {e}")
        return False


@photos_bp.route('', methods=['POST'])
@roles_required('ADMIN', 'COMPANY', 'EMPLOYEE')
def create_photo_request():
    """
    Ask a customer for site photos
    ---
    tags:
      - Photos
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
            message:
              type: string
            expires_in_days:
              type: integer
    responses:
      201:
        description: Request created with its upload link
    """
    data = parse_body(PhotoRequestCreate)
    user = g.current_user
    company_id = resolve_company_id(user, data.company_id)
    now = utc_now_naive()

    photo_request = PhotoRequest(
        token=generate_token(),
        company_id=company_id,
        project_request_id=data.project_request_id,
        requested_by_id=user.id,
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
        message=data.message,
        guidelines=data.guidelines,
        status=PhotoRequestStatus.PENDING,
        expires_at=now + timedelta(days=data.expires_in_days),
    )
    db.session.add(photo_request)
    db.session.commit()

    company_name = user.company.name if user.company else current_app.config['COMPANY_NAME']
    email_sent = _notify_customer(photo_request, company_name)

    return jsonify({
        'photo_request': photo_request.to_dict(),
        'upload_url': photo_upload_url(photo_request.token),
        'email_sent': email_sent,
    }), 201


@photos_bp.route('/<int:request_id>', methods=['GET'])
@roles_required('ADMIN', 'COMPANY', 'EMPLOYEE')
def get_photo_request(request_id):
    """Photo request with its uploads"""
    photo_request = get_or_404(PhotoRequest, request_id, 'Fotoğraf talebi')
    ensure_company_access(g.current_user, photo_request.company_id)
    return jsonify({'photo_request': photo_request.to_dict()})


@photos_bp.route('/<int:request_id>/complete', methods=['POST'])
@roles_required('ADMIN', 'COMPANY', 'EMPLOYEE')
def complete_photo_request(request_id):
    """
    Close a photo request
    ---
    tags:
      - Photos
    security:
      - Bearer: []
    responses:
      200:
        description: Request completed
    """
    photo_request = get_or_404(PhotoRequest, request_id, 'Fotoğraf talebi')
    ensure_company_access(g.current_user, photo_request.company_id)

    photo_request.status = PhotoRequestStatus.COMPLETED
    photo_request.completed_at = utc_now_naive()
    db.session.commit()
    return jsonify({'photo_request': photo_request.to_dict()})


@public_photos_bp.route('/<token>', methods=['GET'])
def public_photo_request(token):
    """
    Photo request as seen by the customer
    ---
    tags:
      - Photos
    responses:
      200:
        description: Request details
      404:
        description: Unknown token
      410:
        description: Request expired
    """
    photo_request = _get_open_request(token, utc_now_naive())
    data = photo_request.to_dict(include_uploads=False)
    data['upload_count'] = len(photo_request.uploads)
    data['company_name'] = photo_request.company.name if photo_request.company else None
    data.pop('token', None)
    return jsonify({'photo_request': data})


@public_photos_bp.route('/<token>/upload', methods=['POST'])
def upload_photos(token):
    """
    Upload photos (multipart/form-data)
    ---
    tags:
      - Photos
    consumes:
      - multipart/form-data
    parameters:
      - name: photos
        in: formData
        type: file
        required: true
      - name: category
        in: formData
        type: string
        enum: [ROOF, ELECTRICAL_PANEL, SURROUNDINGS, BILL, OTHER]
    responses:
      201:
        description: Stored uploads
      400:
        description: No file or unsupported file type
      410:
        description: Request expired
    """
    now = utc_now_naive()
    photo_request = _get_open_request(token, now)
    if photo_request.status == PhotoRequestStatus.COMPLETED:
        raise ValidationError('Bu fotoğraf talebi tamamlanmış')

    files = [f for f in request.files.getlist('photos') if f and f.filename]
    if not files:
        raise ValidationError('En az bir fotoğraf yüklenmelidir')
    if len(files) > MAX_FILES_PER_UPLOAD:
        raise ValidationError(f'Tek seferde en fazla {MAX_FILES_PER_UPLOAD} fotoğraf yüklenebilir')
    rejected = [f.filename for f in files if not allowed_file(f.filename)]
    if rejected:
        raise ValidationError('Desteklenmeyen dosya türü', details={'files': rejected})

    category = request.form.get('category', 'OTHER').upper()
    if category not in PHOTO_CATEGORIES:
        category = 'OTHER'

    folder = os.path.join(current_app.config['UPLOAD_FOLDER'], 'photo_requests', str(photo_request.id))
    os.makedirs(folder, exist_ok=True)

    uploads = []
    for file in files:
        original = secure_filename(file.filename) or 'photo'
        stored_name = f"{generate_token(8)}_{original}"
        path = os.path.join(folder, stored_name)
        file.save(path)
        upload = PhotoUpload(
            photo_request_id=photo_request.id,
            filename=stored_name,
            original_filename=file.filename[:255],
            content_type=file.mimetype,
            size_bytes=os.path.getsize(path),
            category=category,
            uploaded_at=now,
        )
        db.session.add(upload)
        uploads.append(upload)

    photo_request.status = PhotoRequestStatus.UPLOADED
    db.session.commit()
    logger.info(f"{len(uploads)} photos uploaded for photo request {photo_request.id}")
    return jsonify({'uploaded': len(uploads), 'uploads': [u.to_dict() for u in uploads]}), 201
