"""Pure render functions: storefront state in, JSON-ready view dicts out.

Routes call these after dispatching an intent; nothing here mutates state.
"""
from medicare.services.checkout import PAYMENT_METHODS


def _money(value) -> float:
    return round(float(value), 2)


def render_nav(session, cart) -> dict:
    user = session.current_user
    return {
        "logged_in": session.is_authenticated,
        "user": user.to_json() if user else None,
        "greeting": user.first_name if user else None,
        "cart_count": cart.item_count(),
    }


def render_medicine(record) -> dict:
    view = record.to_json()
    view["in_stock"] = record.in_stock
    return view


def render_catalog(records, query=None) -> dict:
    return {
        "query": query,
        "count": len(records),
        "medicines": [render_medicine(r) for r in records],
    }


def render_cart(cart, quote) -> dict:
    lines = []
    for item in cart.items:
        lines.append({
            "medicine_id": item.medicine_id,
            "name": item.name,
            "price": _money(item.unit_price),
            "quantity": item.quantity,
            "line_total": _money(item.line_total),
            "can_decrement": item.quantity > 1,
        })
    return {
        "items": lines,
        "empty": not lines,
        "item_count": quote.unit_count,
        "summary": render_quote(quote),
    }


def render_quote(quote) -> dict:
    return {
        "lines": quote.line_count,
        "subtotal": _money(quote.subtotal),
        "delivery_fee": _money(quote.delivery_fee),
        "total": _money(quote.total),
    }


def render_checkout(cart, quote, prefill) -> dict:
    view = render_cart(cart, quote)
    view["delivery"] = prefill.to_json()
    view["payment_methods"] = [dict(m) for m in PAYMENT_METHODS]
    return view


def render_order(order) -> dict:
    view = order.to_json()
    view["unit_count"] = order.unit_count
    return view


def render_order_history(orders) -> dict:
    return {
        "count": len(orders),
        "orders": [render_order(o) for o in orders],
    }


def render_reminder(reminder, schedule=()) -> dict:
    view = reminder.to_json()
    view["frequency_label"] = reminder.frequency.label
    view["schedule"] = [t.strftime("%H:%M") for t in schedule]
    return view


def render_reminders(scheduler) -> dict:
    reminders = scheduler.list()
    return {
        "count": len(reminders),
        "reminders": [render_reminder(r, scheduler.schedule_for(r)) for r in reminders],
    }
