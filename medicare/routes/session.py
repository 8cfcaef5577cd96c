import logging
from flask import Blueprint, request
from medicare.schemas.auth import LoginRequest, RegisterRequest
from medicare.services.storefront import current_storefront
from medicare.utils import ok, validate_schema
from medicare.version import API_PREFIX
from medicare.views import render_nav

logger = logging.getLogger(__name__)

session_bp = Blueprint("session", __name__, url_prefix=f"{API_PREFIX}/session")


@session_bp.route("", methods=["GET"])
def view_session():
    store = current_storefront()
    return ok(render_nav(store.session, store.cart))


@session_bp.route("/login", methods=["POST"])
@validate_schema(LoginRequest)
def login():
    data = request.validated_data
    store = current_storefront()
    user = store.session.login(data.email, data.password)
    if user is None:
        return ok(render_nav(store.session, store.cart), message="Login superseded")
    return ok(render_nav(store.session, store.cart), message=f"Login successful! Welcome, {user.first_name}!")


@session_bp.route("/register", methods=["POST"])
@validate_schema(RegisterRequest)
def register():
    data = request.validated_data
    user_id = current_storefront().session.register(data.to_backend())
    logger.info({"event": "registered", "email": data.email})
    return ok({"user_id": user_id}, message="Registration successful! Please login.", status=201)


@session_bp.route("", methods=["DELETE"])
def logout():
    store = current_storefront()
    store.session.logout()
    return ok(render_nav(store.session, store.cart), message="Logged out successfully!")
