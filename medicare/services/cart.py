import logging
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError as SchemaError

from medicare.metrics import CART_MUTATIONS
from .records import CartItem, MedicineId
from .storage import CART_KEY, Storage, load_entries

logger = logging.getLogger(__name__)


class CartStore:
    """Line items of the order in progress, persisted after every change."""

    def __init__(self, storage: Storage):
        self._storage = storage
        self._items: List[CartItem] = []
        self._unreadable: List[Any] = []

    def load(self) -> None:
        self._items = []
        self._unreadable = []
        for entry in load_entries(self._storage, CART_KEY):
            try:
                self._items.append(CartItem.model_validate(entry))
            except (SchemaError, TypeError) as e:
                logger.warning("Skipping unreadable stored cart line: %s", e)
                self._unreadable.append(entry)
        logger.info("Cart loaded from storage: %d items", len(self._items))

    @property
    def items(self) -> Tuple[CartItem, ...]:
        return tuple(item.model_copy() for item in self._items)

    def get(self, medicine_id: MedicineId) -> Optional[CartItem]:
        item = self._find(medicine_id)
        return item.model_copy() if item else None

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self._items), Decimal("0.00"))

    def add_item(self, medicine_id: MedicineId, name: str, unit_price) -> CartItem:
        item = self._find(medicine_id)
        if item:
            item.quantity += 1
        else:
            item = CartItem(medicine_id=medicine_id, name=name, unit_price=unit_price)
            self._items.append(item)
        self._persist("add")
        logger.info("Added %s to cart (qty %d)", name, item.quantity)
        return item.model_copy()

    def update_quantity(self, medicine_id: MedicineId, delta: int) -> None:
        item = self._find(medicine_id)
        if not item:
            return
        quantity = item.quantity + int(delta)
        if quantity <= 0:
            self.remove_item(medicine_id)
            return
        item.quantity = quantity
        self._persist("update")

    def remove_item(self, medicine_id: MedicineId) -> None:
        item = self._find(medicine_id)
        if not item:
            return
        self._items.remove(item)
        self._persist("remove")
        logger.info("Removed %s from cart", item.name)

    def clear(self) -> None:
        self._items = []
        self._unreadable = []
        self._persist("clear")

    def _find(self, medicine_id: MedicineId) -> Optional[CartItem]:
        key = str(medicine_id)
        return next((i for i in self._items if str(i.medicine_id) == key), None)

    def _persist(self, operation: str) -> None:
        self._storage.set(CART_KEY, [item.to_json() for item in self._items] + self._unreadable)
        CART_MUTATIONS.labels(operation).inc()
