"""
Uploads Routes - Image upload and removal through the configured storage backend
"""

import os
from flask import request, jsonify, current_app, send_from_directory, abort
from utils.decorators import admin_required
from utils.errors import ValidationError, StorageError
from utils.helpers import get_payload, error_response
from utils.storage import get_image_storage, validate_image_url, LocalImageStorage
from . import uploads_bp


@uploads_bp.route('/api/upload', methods=['POST'])
@admin_required
def upload_image():
    """Store an image under a section, replacing oldImage when given"""
    file = request.files.get('file')
    section = request.form.get('section', '').strip()
    old_image = request.form.get('oldImage') or request.form.get('previousImageReference') or None

    if not file or not file.filename:
        return error_response('No file provided', 400)

    storage = get_image_storage()
    try:
        stored = storage.store(
            file.read(),
            file.filename,
            section,
            previous_reference=old_image,
            content_type=file.mimetype,
        )
    except ValidationError as e:
        return error_response(e.message, 400)
    except StorageError as e:
        return error_response(e.message, 500)
    except Exception as e:
        current_app.logger.error(f"Upload API error: {str(e)}")
        return error_response('Internal server error', 500)

    return jsonify({'success': True, 'url': stored.url, 'publicId': stored.storage_id})


@uploads_bp.route('/api/upload', methods=['DELETE'])
@admin_required
def delete_image():
    image_url = request.args.get('url')
    public_id = request.args.get('publicId') or None

    if not image_url:
        return error_response('No image URL provided', 400)

    if get_image_storage().remove(image_url, public_id):
        return jsonify({'success': True})
    return error_response('Failed to delete image', 500)


@uploads_bp.route('/api/upload/validate-url', methods=['POST'])
@admin_required
def check_image_url():
    """Confirm that an external image URL resolves to an image"""
    payload = get_payload() or {}
    check = validate_image_url(payload.get('url'), current_app.config.get('IMAGE_URL_TIMEOUT', 5))
    body = {'valid': check.valid}
    if check.reason:
        body['reason'] = check.reason
    if check.content_type:
        body['contentType'] = check.content_type
    return jsonify(body)


def serve_image(section, filename):
    """Serve files written by the local backend"""
    storage = get_image_storage()
    if not isinstance(storage, LocalImageStorage) or section not in storage.sections:
        abort(404)
    return send_from_directory(os.path.join(storage.root, section), filename)


def register_image_route(app):
    """Mount serve_image under the configured UPLOAD_URL_PREFIX"""
    prefix = '/' + app.config.get('UPLOAD_URL_PREFIX', '/images').strip('/')
    app.add_url_rule(f"{prefix}/<section>/<path:filename>", 'serve_image', serve_image)
