"""
Decorators Module - Authentication decorators
"""

from functools import wraps
from flask import jsonify, current_app
from flask_login import current_user


def admin_required(f):
    """Decorator to require an admin session; answers 401 JSON otherwise"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_app.config.get('LOGIN_DISABLED'):
            return f(*args, **kwargs)
        if not current_user.is_authenticated:
            return jsonify({'success': False, 'error': 'Unauthorized'}), 401
        return f(*args, **kwargs)
    return decorated_function
