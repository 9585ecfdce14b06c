"""
Security Module - Admin identity, client IP lookup and contact rate limiting
"""

import time
from flask import request, current_app
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from extensions import login_manager


# Rate Limiting
RATE_LIMIT_REQUESTS = {}  # {ip: [(timestamp, endpoint), ...]}


class AdminUser(UserMixin):
    """The single site owner, identified by ADMIN_USERNAME"""

    def __init__(self, username):
        self.id = username
        self.username = username


def get_admin_credentials():
    """Load admin credentials from the app configuration"""
    username = current_app.config.get('ADMIN_USERNAME')
    password = current_app.config.get('ADMIN_PASSWORD')
    if not username or not password:
        return {'username': None, 'password_hash': None}
    return {
        'username': username,
        'password_hash': generate_password_hash(password)
    }


def authenticate_admin(username, password):
    """Return an AdminUser when the credentials match, otherwise None"""
    credentials = get_admin_credentials()
    if not credentials['username'] or not username or not password:
        return None
    if username != credentials['username']:
        return None
    if not check_password_hash(credentials['password_hash'], password):
        return None
    return AdminUser(username)


@login_manager.user_loader
def load_admin(user_id):
    if user_id and user_id == current_app.config.get('ADMIN_USERNAME'):
        return AdminUser(user_id)
    return None


def get_client_ip():
    """Get real client IP address"""
    forwarded = request.environ.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.environ.get('REMOTE_ADDR', 'unknown')


def check_rate_limit(endpoint='contact'):
    """Check if IP is within rate limit"""
    max_requests = current_app.config.get('CONTACT_RATE_LIMIT', 10)
    window = current_app.config.get('CONTACT_RATE_WINDOW', 60)
    client_ip = get_client_ip()
    current_time = time.time()

    # Clean old requests outside the window
    RATE_LIMIT_REQUESTS[client_ip] = [
        (ts, ep) for ts, ep in RATE_LIMIT_REQUESTS.get(client_ip, [])
        if current_time - ts < window
    ]

    endpoint_requests = [
        ep for ts, ep in RATE_LIMIT_REQUESTS[client_ip] if ep == endpoint
    ]
    if len(endpoint_requests) >= max_requests:
        return False

    RATE_LIMIT_REQUESTS[client_ip].append((current_time, endpoint))
    return True


__all__ = [
    'AdminUser',
    'get_admin_credentials',
    'authenticate_admin',
    'load_admin',
    'get_client_ip',
    'check_rate_limit',
    'RATE_LIMIT_REQUESTS'
]
