from flask import Blueprint, request
from medicare.services.storefront import current_storefront
from medicare.utils import ok
from medicare.version import API_PREFIX
from medicare.views import render_catalog, render_medicine

catalog_bp = Blueprint("catalog", __name__, url_prefix=f"{API_PREFIX}/medicines")


def _catalog_view(query=None):
    browser = current_storefront().catalog
    records = browser.browse(query)
    if records is None:
        # A newer browse replaced this one; show what is current.
        return ok(render_catalog(browser.results, browser.query), message="stale")
    return ok(render_catalog(records, query))


@catalog_bp.route("", methods=["GET"])
def list_medicines():
    return _catalog_view()


@catalog_bp.route("/search", methods=["GET"])
def search_medicines():
    return _catalog_view(request.args.get("query", ""))


@catalog_bp.route("/<medicine_id>", methods=["GET"])
def get_medicine(medicine_id):
    record = current_storefront().catalog.lookup(medicine_id)
    return ok(render_medicine(record))

