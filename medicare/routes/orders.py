from flask import Blueprint, current_app, request
from flask_limiter.util import get_remote_address
from extensions import limiter
from medicare.schemas.checkout import CheckoutRequest
from medicare.services.storefront import current_storefront
from medicare.utils import ok, login_required, validate_schema
from medicare.version import API_PREFIX
from medicare.views import render_checkout, render_order, render_order_history

order_bp = Blueprint("orders", __name__, url_prefix=API_PREFIX)


@order_bp.route("/checkout", methods=["GET"])
@login_required("Please login to checkout")
def checkout_form():
    store = current_storefront()
    checkout = store.checkout
    return ok(render_checkout(store.cart, checkout.quote(), checkout.prefill()))


@order_bp.route("/checkout", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["CHECKOUT_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many orders from this IP",
)
@login_required("Please login to checkout")
@validate_schema(CheckoutRequest)
def place_order():
    data = request.validated_data
    order = current_storefront().checkout.checkout(data.customer_info(), data.payment_method)
    return ok(render_order(order), message="Order placed successfully", status=201)


@order_bp.route("/orders", methods=["GET"])
def order_history():
    return ok(render_order_history(current_storefront().ledger.list()))
