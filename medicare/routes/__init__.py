from .session import session_bp
from .catalog import catalog_bp
from .cart import cart_bp
from .orders import order_bp
from .reminders import reminder_bp


__all__ = [
    'session_bp',
    'catalog_bp',
    'cart_bp',
    'order_bp',
    'reminder_bp',
]
