from functools import wraps
from flask import g
from .responses import error
from medicare.services.storefront import current_storefront


def login_required(message="Please login to continue"):
    """Reject the request with 401 unless the session has a signed-in user."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            session = current_storefront().session
            if not session.is_authenticated:
                return error(message, status=401)
            g.user = session.current_user
            return fn(*args, **kwargs)

        return wrapper

    return decorator
