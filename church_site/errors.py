"""
Error taxonomy shared by the services and blueprints.
"""


class SiteError(Exception):
    """Base class for errors surfaced to site users."""

    def __init__(self, message=''):
        super().__init__(message)
        self.message = message


class StoreError(SiteError):
    """Any record store failure."""


class StorageError(SiteError):
    """Object storage upload or delete failure."""


class ValidationError(SiteError):
    """Input rejected by a form schema, reported field by field."""

    def __init__(self, errors):
        self.errors = dict(errors)
        super().__init__('; '.join(f'{k}: {v}' for k, v in self.errors.items()))


class AuthError(SiteError):
    """Admin sign-in rejected.

    `reason` is one of 'credentials', 'role' or 'inactive'.
    """

    def __init__(self, reason, message):
        super().__init__(message)
        self.reason = reason


class RateLimitError(SiteError):
    """Too many requests from one client within the window."""

    def __init__(self, retry_after, message='Too many requests. Please try again in 1 hour.'):
        super().__init__(message)
        self.retry_after = int(retry_after)
