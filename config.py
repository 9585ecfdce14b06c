import os
from datetime import timedelta


# Headroom for the multipart envelope around an uploaded file
UPLOAD_ENVELOPE_BYTES = 1024 * 1024


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SESSION_SECRET', 'CHANGE-THIS-SECRET-KEY-IN-PRODUCTION')
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Database Settings
    _database_url = os.environ.get('DATABASE_URL')
    if not _database_url:
        pg_user = os.environ.get('PGUSER')
        pg_pass = os.environ.get('PGPASSWORD')
        pg_host = os.environ.get('PGHOST')
        pg_port = os.environ.get('PGPORT')
        pg_db = os.environ.get('PGDATABASE')
        if all([pg_user, pg_pass, pg_host, pg_port, pg_db]):
            _database_url = f"postgresql://{pg_user}:{pg_pass}@{pg_host}:{pg_port}/{pg_db}"

    if _database_url and _database_url.startswith("postgres://"):
        _database_url = _database_url.replace("postgres://", "postgresql://", 1)

    SQLALCHEMY_DATABASE_URI = _database_url or 'sqlite:///portfolio.db'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    } if _database_url else {}
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload Settings
    UPLOAD_STRATEGY = os.environ.get('UPLOAD_STRATEGY', 'local')  # local, s3
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'static/images')
    UPLOAD_URL_PREFIX = os.environ.get('UPLOAD_URL_PREFIX', '/images')
    MAX_FILE_SIZE = int(os.environ.get('MAX_FILE_SIZE', 5 * 1024 * 1024))  # 5MB
    MAX_CONTENT_LENGTH = MAX_FILE_SIZE + UPLOAD_ENVELOPE_BYTES
    ALLOW_GIF_UPLOADS = _env_bool('ALLOW_GIF_UPLOADS')
    IMAGE_SECTIONS = ('profile', 'projects', 'general', 'social')
    IMAGE_URL_TIMEOUT = float(os.environ.get('IMAGE_URL_TIMEOUT', 5))

    # Remote storage (S3-compatible bucket behind a CDN)
    S3_BUCKET = os.environ.get('S3_BUCKET')
    S3_REGION = os.environ.get('S3_REGION', os.environ.get('AWS_REGION', 'us-east-1'))
    S3_KEY_PREFIX = os.environ.get('S3_KEY_PREFIX', 'portfolio')
    S3_PUBLIC_BASE_URL = os.environ.get('S3_PUBLIC_BASE_URL')
    S3_ENDPOINT_URL = os.environ.get('S3_ENDPOINT_URL')
    AWS_ACCESS_KEY_ID = os.environ.get('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = os.environ.get('AWS_SECRET_ACCESS_KEY')

    # Admin Settings
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL')

    # Mail Settings
    SMTP_HOST = os.environ.get('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', '587'))
    SMTP_USER = os.environ.get('SMTP_USER')
    SMTP_PASS = os.environ.get('SMTP_PASS')
    SMTP_USE_TLS = _env_bool('SMTP_USE_TLS', True)
    SMTP_TIMEOUT = float(os.environ.get('SMTP_TIMEOUT', 15))
    EMAIL_FROM = os.environ.get('EMAIL_FROM') or os.environ.get('SMTP_USER')
    REPLY_EMAIL_NAME = os.environ.get('REPLY_EMAIL_NAME', 'Admin of portfolio')

    # Contact form
    CONTACT_RATE_LIMIT = int(os.environ.get('CONTACT_RATE_LIMIT', 10))
    CONTACT_RATE_WINDOW = 60


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    # For in-memory SQLite during tests, keep engine options empty to avoid
    # passing invalid pool settings like pool_size to SQLite's StaticPool.
    SQLALCHEMY_ENGINE_OPTIONS = {}
    UPLOAD_STRATEGY = 'local'
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'test-password'
    ADMIN_EMAIL = 'owner@example.com'
    EMAIL_FROM = 'noreply@example.com'
    SMTP_USER = None
    SMTP_PASS = None


# Select configuration based on environment
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

def get_config(name=None):
    """Get configuration by name, falling back to FLASK_ENV"""
    env = name or os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
