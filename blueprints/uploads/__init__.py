"""
Uploads Blueprint - Image storage endpoints
Handles: Image upload/replace, delete, remote URL checks, local file serving
"""

from flask import Blueprint

uploads_bp = Blueprint('uploads', __name__, url_prefix='')

from . import routes
