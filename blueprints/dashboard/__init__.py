"""
Dashboard Blueprint - Admin content management API
Handles: Projects, skills, experience, settings, social links, message inbox
"""

from flask import Blueprint

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/admin/api')

from . import routes
