from medicare.routes import (
    session_bp,
    catalog_bp,
    cart_bp,
    order_bp,
    reminder_bp,
)


def register_api_v1(app):
    """Register blueprint routes under the API version prefix."""
    app.register_blueprint(session_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(order_bp)
    app.register_blueprint(reminder_bp)
