import logging
from flask import Blueprint
from werkzeug.exceptions import HTTPException
from medicare.services.errors import ServiceError, ValidationError
from medicare.utils.responses import error, internal_error_response

errors_bp = Blueprint("errors_bp", __name__)


def service_error_status(e: ServiceError) -> int:
    if e.unreachable:
        return 503
    if e.status in (400, 401, 404):
        return 404 if e.status == 404 else 400
    return 502


@errors_bp.app_errorhandler(ValidationError)
def handle_validation_error(e):
    return error(e.message, status=400, fields=e.fields)


@errors_bp.app_errorhandler(ServiceError)
def handle_service_error(e):
    logging.warning("Backend service error (%s): %s", e.status, e.message)
    return error(e.message, status=service_error_status(e))


@errors_bp.app_errorhandler(HTTPException)
def handle_http_exception(e):
    msg = e.description or getattr(e, "name", "HTTP Error")
    return error(msg, status=e.code, code=e.code)


@errors_bp.app_errorhandler(Exception)
def handle_unexpected_exception(e):
    logging.exception("Unhandled exception")
    return internal_error_response()
