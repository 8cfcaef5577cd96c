from .responses import ok, error, validation_error_response, internal_error_response
from .auth import login_required
from .validation import validate_schema
from .db import transactional

__all__ = [
    'ok',
    'error',
    'validation_error_response',
    'internal_error_response',
    'login_required',
    'validate_schema',
    'transactional',
]
