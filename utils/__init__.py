"""
Utils Package - Centralized utility modules initialization
"""

from .errors import (
    PortfolioError,
    ValidationError,
    NoValidIdentifiersError,
    NotFoundError,
    UpstreamError,
    StorageError
)
from .decorators import admin_required
from .security import (
    AdminUser,
    authenticate_admin,
    get_client_ip,
    check_rate_limit
)
from .notifications import (
    Mailer,
    SendResult,
    init_mailer,
    get_mailer,
    send_admin_notification
)
from .storage import (
    StoredImage,
    LocalImageStorage,
    S3ImageStorage,
    init_image_storage,
    get_image_storage,
    validate_image,
    validate_image_url
)
from .helpers import (
    get_payload,
    serialize,
    success_response,
    error_response
)

__all__ = [
    # Errors
    'PortfolioError',
    'ValidationError',
    'NoValidIdentifiersError',
    'NotFoundError',
    'UpstreamError',
    'StorageError',

    # Decorators
    'admin_required',

    # Security
    'AdminUser',
    'authenticate_admin',
    'get_client_ip',
    'check_rate_limit',

    # Notifications
    'Mailer',
    'SendResult',
    'init_mailer',
    'get_mailer',
    'send_admin_notification',

    # Storage
    'StoredImage',
    'LocalImageStorage',
    'S3ImageStorage',
    'init_image_storage',
    'get_image_storage',
    'validate_image',
    'validate_image_url',

    # Helpers
    'get_payload',
    'serialize',
    'success_response',
    'error_response'
]
