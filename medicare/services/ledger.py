import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaError

from medicare.metrics import ORDERS_PLACED
from .records import Order
from .storage import ORDERS_KEY, Storage, load_entries

logger = logging.getLogger(__name__)


class OrderLedger:
    """Append-only history of placed orders.

    Orders are kept in placement order and read back most recent first.
    There is no update or delete. Stored entries that fail to parse are kept
    in storage untouched but left out of ``list()``.
    """

    def __init__(self, storage: Storage):
        self._storage = storage
        self._orders: List[Order] = []
        self._index: Dict[str, Order] = {}
        self._stored: List[Any] = []

    def load(self) -> None:
        self._stored = list(load_entries(self._storage, ORDERS_KEY))
        self._orders = []
        for entry in self._stored:
            try:
                self._orders.append(Order.model_validate(entry))
            except (SchemaError, TypeError) as e:
                logger.warning("Skipping unreadable stored order: %s", e)
        self._index = {o.order_id: o for o in self._orders}
        logger.info("Order history loaded: %d orders", len(self._orders))

    def append(self, order: Order) -> None:
        if order.order_id in self._index:
            raise ValueError(f"Order {order.order_id} already recorded")
        stored = self._stored + [order.to_json()]
        self._storage.set(ORDERS_KEY, stored)
        self._stored = stored
        self._orders.append(order)
        self._index[order.order_id] = order
        ORDERS_PLACED.inc()
        logger.info("Order %s recorded, total %s", order.order_id, order.total)

    def list(self) -> List[Order]:
        return list(reversed(self._orders))

    def get(self, order_id: str) -> Optional[Order]:
        return self._index.get(order_id)

    def __contains__(self, order_id) -> bool:
        return order_id in self._index

    def __len__(self) -> int:
        return len(self._orders)
