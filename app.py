"""
Portfolio Site - Main Application Entry Point
Application Factory Pattern for a modular architecture

This module initializes the Flask application with all necessary extensions,
configurations, services and middleware. All route handling is delegated to blueprints.
"""

import os
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from config import get_config, UPLOAD_ENVELOPE_BYTES
from extensions import db, login_manager
from utils.errors import PortfolioError
from utils.notifications import init_mailer
from utils.storage import init_image_storage

# Import all blueprints
from blueprints.auth import auth_bp
from blueprints.dashboard import dashboard_bp
from blueprints.portfolio import portfolio_bp
from blueprints.uploads import uploads_bp
from blueprints.uploads.routes import register_image_route
from migrations.seed_content import seed_content_command


def create_app(config_name=None, config_overrides=None):
    """
    Application Factory Pattern
    Creates and configures Flask application instance

    Args:
        config_name (str): Configuration environment name (optional)
        config_overrides (dict): Values applied on top of the configuration class (optional)

    Returns:
        Flask: Configured Flask application instance
    """

    app = Flask(__name__)

    # Load configuration
    conf = get_config(config_name)
    app.config.from_object(conf)
    if config_overrides:
        app.config.update(config_overrides)
        if 'MAX_CONTENT_LENGTH' not in config_overrides:
            app.config['MAX_CONTENT_LENGTH'] = app.config['MAX_FILE_SIZE'] + UPLOAD_ENVELOPE_BYTES

    # Initialize extensions with app
    initialize_extensions(app)

    # Services built once from configuration
    initialize_services(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register request/response hooks
    register_hooks(app)

    app.cli.add_command(seed_content_command)

    # Health check route
    @app.route('/health')
    def health_check():
        return {'status': 'ok', 'message': 'Portfolio application is running'}, 200

    return app


def initialize_extensions(app):
    """Initialize Flask extensions with the app instance"""
    db.init_app(app)
    login_manager.init_app(app)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Unauthorized'}), 401

    # Create tables if they don't exist
    with app.app_context():
        try:
            from sqlalchemy import text
            import models  # noqa: F401
            db.create_all()
            # Verify connection
            db.session.execute(text('SELECT 1'))
            app.logger.info("✓ Database initialized successfully")
        except Exception as e:
            app.logger.error(f"✗ Database initialization failed: {str(e)}")


def initialize_services(app):
    """Build the mailer and the image storage backend from configuration"""
    init_mailer(app)
    init_image_storage(app)


def register_blueprints(app):
    """Register all application blueprints"""
    app.register_blueprint(auth_bp)
    app.register_blueprint(portfolio_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(uploads_bp)
    register_image_route(app)


def register_error_handlers(app):
    """Register JSON error handlers"""

    @app.errorhandler(PortfolioError)
    def portfolio_error(e):
        if e.status_code >= 500:
            db.session.rollback()
            app.logger.error(f"{e.__class__.__name__}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({'success': False, 'error': e.description or e.name}), e.code

    @app.errorhandler(413)
    def file_too_large(e):
        max_mb = round(app.config.get('MAX_FILE_SIZE', 0) / 1024 / 1024)
        return jsonify({'success': False, 'error': f'File size must be less than {max_mb}MB'}), 413

    @app.errorhandler(Exception)
    def internal_server_error(e):
        db.session.rollback()
        app.logger.error(f"Server Error on {request.path}: {str(e)}")
        return jsonify({'success': False, 'error': 'Internal server error'}), 500


def register_hooks(app):
    """Register request/response hooks"""

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response


if __name__ == '__main__':
    # Get environment
    env = os.environ.get('FLASK_ENV', 'development')

    # Create app
    app = create_app(env)

    # Run development server
    app.run(
        host='0.0.0.0',
        port=int(os.environ.get('PORT', 5000)),
        debug=(env == 'development')
    )
