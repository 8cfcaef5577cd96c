import logging

from flask import current_app

from .auth import HttpAuthService
from .cart import CartStore
from .catalog import CatalogBrowser, HttpCatalogService
from .checkout import CheckoutOrchestrator
from .generations import GenerationCounter
from .ledger import OrderLedger
from .notifications import CeleryNotificationService
from .reminders import ReminderScheduler
from .session import SessionState
from .storage import Storage, build_storage

logger = logging.getLogger(__name__)

EXTENSION_KEY = "storefront"


class Storefront:
    """All state of one client session, wired together explicitly."""

    def __init__(self, storage: Storage, catalog_service, auth_service, notifier, delivery_fee=None):
        self.storage = storage
        self.generations = GenerationCounter()
        self.session = SessionState(storage, auth_service, self.generations)
        self.catalog = CatalogBrowser(catalog_service, self.generations)
        self.cart = CartStore(storage)
        self.ledger = OrderLedger(storage)
        self.reminders = ReminderScheduler(storage, notifier)
        options = {} if delivery_fee is None else {"delivery_fee": delivery_fee}
        self.checkout = CheckoutOrchestrator(self.cart, self.ledger, self.session, **options)

    def hydrate(self) -> None:
        """Read persisted state once, at session start."""
        self.session.load()
        self.cart.load()
        self.ledger.load()
        self.reminders.load()


def build_storefront(app, storage=None, catalog=None, auth=None, notifier=None) -> Storefront:
    """Create the app's storefront; collaborators not passed in come from config."""
    cfg = app.config
    timeout = float(cfg.get("SERVICE_TIMEOUT_SECONDS", 5))
    base_url = cfg.get("API_BASE_URL")
    storefront = Storefront(
        storage=storage or build_storage(cfg),
        catalog_service=catalog or HttpCatalogService(base_url, timeout=timeout),
        auth_service=auth or HttpAuthService(base_url, timeout=timeout),
        notifier=notifier or CeleryNotificationService(enabled=cfg.get("NOTIFICATIONS_ENABLED", True)),
        delivery_fee=cfg.get("DELIVERY_FEE"),
    )
    with app.app_context():
        storefront.hydrate()
    app.extensions[EXTENSION_KEY] = storefront
    logger.info("Storefront ready: %d cart lines, %d orders", len(storefront.cart), len(storefront.ledger))
    return storefront


def current_storefront() -> Storefront:
    return current_app.extensions[EXTENSION_KEY]
