"""
Extensions Module - Flask extensions shared across the portfolio backend
Created unbound here and attached to the app in create_app().
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager

db = SQLAlchemy()

# JSON API only: unauthenticated admin calls get a 401 body, never a redirect
login_manager = LoginManager()
login_manager.session_protection = 'strong'

__all__ = ['db', 'login_manager']
