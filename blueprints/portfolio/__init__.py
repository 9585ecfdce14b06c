"""
Portfolio Blueprint - Public read API for the marketing site
Handles: Projects, skills, experience, settings, social links, contact form
"""

from flask import Blueprint

portfolio_bp = Blueprint('portfolio', __name__, url_prefix='/api')

from . import routes
