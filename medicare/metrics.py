from flask import request
from prometheus_client import Counter

CART_MUTATIONS = Counter(
    "storefront_cart_mutations_total",
    "Cart store writes by operation",
    ["operation"],
)

ORDERS_PLACED = Counter(
    "storefront_orders_placed_total",
    "Orders appended to the ledger",
)

REMINDERS_CREATED = Counter(
    "storefront_reminders_created_total",
    "Medication reminders created",
)

REMINDER_ALERTS = Counter(
    "storefront_reminder_alerts_total",
    "Reminder alerts handed to the notification service",
)

# Counter for HTTP errors
ERROR_COUNTER = Counter(
    "flask_error_total",
    "Count of HTTP responses with status >= 400",
    ["endpoint", "method", "code"],
)


def init_app(app):
    """Attach the error counter to the app."""

    @app.after_request
    def track_errors(resp):
        if resp.status_code >= 400:
            endpoint = request.endpoint or "unknown"
            ERROR_COUNTER.labels(endpoint, request.method, resp.status_code).inc()
        return resp
