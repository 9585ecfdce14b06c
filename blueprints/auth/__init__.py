"""
Auth Blueprint - Admin session management
Handles: Login, Logout, session status
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

from . import routes
