"""Custom exceptions for the TenantBoard application.

Domain services raise these; a single error handler in the app factory turns
them into the JSON response envelope.
"""


class AppError(Exception):
    """Base exception for all application errors."""
    status_code = 500
    default_message = 'Internal server error'
    default_code = 'INTERNAL_ERROR'

    def __init__(self, message=None, code=None, errors=None, payload=None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.errors = errors
        self.payload = payload

    def to_dict(self):
        rv = {'success': False, 'message': self.message, 'code': self.code}
        if self.errors:
            rv['errors'] = self.errors
        if self.payload:
            rv['context'] = dict(self.payload)
        return rv


class BadRequestError(AppError):
    """Request is well-formed but rejected by a business rule (e.g. weak password)."""
    status_code = 400
    default_message = 'Bad request'
    default_code = 'BAD_REQUEST'


class ValidationError(BadRequestError):
    """Request body failed schema validation; carries field-level errors."""
    default_message = 'Validation error'
    default_code = 'VALIDATION_ERROR'

    def __init__(self, errors, message=None):
        super().__init__(message, errors=errors)


class UnauthorizedError(AppError):
    """Missing, malformed, invalid or expired credential."""
    status_code = 401
    default_message = 'Authentication required'
    default_code = 'UNAUTHORIZED'


class ForbiddenError(AppError):
    """Authenticated but not allowed by role or tenant."""
    status_code = 403
    default_message = 'You do not have permission to access this resource'
    default_code = 'FORBIDDEN'


class NotFoundError(AppError):
    """Resource absent, or outside the caller's tenant."""
    status_code = 404
    default_message = 'Resource not found'
    default_code = 'NOT_FOUND'


class ConflictError(AppError):
    """Uniqueness violation, quota exceeded or invariant violation."""
    status_code = 409
    default_message = 'This resource already exists'
    default_code = 'CONFLICT'
