"""
Helpers Module - Request parsing and response shaping shared by blueprints
"""

from flask import request, jsonify
from .errors import ValidationError


def get_payload():
    """JSON object body if present, otherwise the submitted form fields"""
    payload = request.get_json(silent=True)
    if payload is None:
        return request.form.to_dict()
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


def serialize(records):
    return [record.to_dict() for record in records]


def success_response(status_code=200, **data):
    body = {'success': True}
    body.update(data)
    return jsonify(body), status_code


def error_response(message, status_code):
    return jsonify({'success': False, 'error': message}), status_code


def is_truthy(value):
    return str(value or '').strip().lower() in ('1', 'true', 'yes', 'on')


__all__ = [
    'get_payload',
    'serialize',
    'success_response',
    'error_response',
    'is_truthy'
]
