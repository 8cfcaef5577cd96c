from flask import Blueprint, request
from medicare.schemas.cart import AddToCartRequest, UpdateQuantityRequest
from medicare.services.errors import ValidationError
from medicare.services.storefront import current_storefront
from medicare.utils import ok, login_required, validate_schema
from medicare.version import API_PREFIX
from medicare.views import render_cart

cart_bp = Blueprint("cart", __name__, url_prefix=f"{API_PREFIX}/cart")


def _cart_view(message="success"):
    store = current_storefront()
    return ok(render_cart(store.cart, store.checkout.quote()), message=message)


@cart_bp.route("", methods=["GET"])
@login_required("Please login to view your cart")
def view_cart():
    return _cart_view()


@cart_bp.route("/items", methods=["POST"])
@validate_schema(AddToCartRequest)
def add_to_cart():
    store = current_storefront()
    medicine = store.catalog.lookup(request.validated_data.medicine_id)
    if not medicine.in_stock:
        raise ValidationError(f"{medicine.name} is out of stock", fields=["medicine_id"])
    store.cart.add_item(medicine.medicine_id, medicine.name, medicine.price)
    return _cart_view(message=f"{medicine.name} added to cart!")


@cart_bp.route("/items/<medicine_id>", methods=["PATCH"])
@validate_schema(UpdateQuantityRequest)
def update_quantity(medicine_id):
    current_storefront().cart.update_quantity(medicine_id, request.validated_data.delta)
    return _cart_view()


@cart_bp.route("/items/<medicine_id>", methods=["DELETE"])
def remove_item(medicine_id):
    current_storefront().cart.remove_item(medicine_id)
    return _cart_view(message="Item removed from cart")


@cart_bp.route("", methods=["DELETE"])
def clear_cart():
    current_storefront().cart.clear()
    return _cart_view(message="Cart cleared")
