"""
Auth Routes - Admin login and logout
"""

from flask import jsonify, current_app
from flask_login import login_user, logout_user, current_user
from utils.helpers import get_payload
from utils.security import authenticate_admin, get_client_ip
from . import auth_bp


@auth_bp.route('/login', methods=['POST'])
def login():
    """Admin login"""
    payload = get_payload() or {}
    username = (payload.get('username') or '').strip()
    admin = authenticate_admin(username, payload.get('password'))

    if admin is None:
        current_app.logger.warning(f"Failed admin login for '{username}' from {get_client_ip()}")
        return jsonify({'success': False, 'error': 'Invalid credentials. Please try again.'}), 401

    login_user(admin, remember=bool(payload.get('remember')))
    current_app.logger.info(f"Admin login: {username} from {get_client_ip()}")
    return jsonify({'success': True, 'username': admin.username})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Logout current admin"""
    if current_user.is_authenticated:
        logout_user()
    return jsonify({'success': True})


@auth_bp.route('/me')
def me():
    if current_user.is_authenticated:
        return jsonify({'authenticated': True, 'username': current_user.username})
    return jsonify({'authenticated': False})
