"""
Errors Module - Exception taxonomy shared by services and routes
"""


class PortfolioError(Exception):
    """Base error carrying the HTTP status used when it reaches a route"""
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'success': False, 'error': self.message}


class ValidationError(PortfolioError):
    status_code = 400


class NoValidIdentifiersError(ValidationError):
    def __init__(self, message='No valid message identifiers supplied'):
        super().__init__(message)


class NotFoundError(PortfolioError):
    status_code = 404


class UpstreamError(PortfolioError):
    """Email provider or remote storage failed"""
    status_code = 502


class StorageError(PortfolioError):
    status_code = 500


__all__ = [
    'PortfolioError',
    'ValidationError',
    'NoValidIdentifiersError',
    'NotFoundError',
    'UpstreamError',
    'StorageError'
]
