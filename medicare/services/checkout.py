"""Turns the cart into a placed order.

Checkout validates the delivery details, prices the cart, records the order
in the ledger and then empties the cart. Payment is cash on delivery only;
online payment is listed but not selectable yet.
"""
import logging
from decimal import Decimal
from typing import Callable, NamedTuple, Union

from .cart import CartStore
from .errors import ValidationError
from .ledger import OrderLedger
from .records import (
    ORDER_STATUS_CONFIRMED,
    PAYMENT_CASH_ON_DELIVERY,
    PAYMENT_ONLINE,
    CustomerInfo,
    Order,
    OrderItem,
    new_order_id,
    to_money,
    utcnow,
)
from .session import SessionState

logger = logging.getLogger(__name__)

DELIVERY_FEE = Decimal("50.00")

REQUIRED_CUSTOMER_FIELDS = ("name", "phone", "address", "city", "pincode")

PAYMENT_METHODS = (
    {"method": PAYMENT_CASH_ON_DELIVERY, "enabled": True},
    {"method": PAYMENT_ONLINE, "enabled": False},
)


class CheckoutQuote(NamedTuple):
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    line_count: int
    unit_count: int


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartStore,
        ledger: OrderLedger,
        session: SessionState,
        delivery_fee=DELIVERY_FEE,
        id_factory: Callable[[], str] = new_order_id,
        clock=utcnow,
    ):
        self.cart = cart
        self.ledger = ledger
        self.session = session
        self.delivery_fee = to_money(delivery_fee)
        self._new_id = id_factory
        self._clock = clock

    def quote(self) -> CheckoutQuote:
        subtotal = self.cart.subtotal()
        return CheckoutQuote(
            subtotal=subtotal,
            delivery_fee=self.delivery_fee,
            total=subtotal + self.delivery_fee,
            line_count=len(self.cart),
            unit_count=self.cart.item_count(),
        )

    def prefill(self) -> CustomerInfo:
        """Delivery details suggested from the signed-in user."""
        user = self.session.current_user
        if user is None:
            return CustomerInfo()
        return CustomerInfo(
            name=user.display_name,
            phone=user.phone,
            address=user.address,
            city=user.city,
            pincode=user.pincode,
        )

    def checkout(self, customer_info: Union[CustomerInfo, dict], payment_method: str = PAYMENT_CASH_ON_DELIVERY) -> Order:
        if self.cart.is_empty():
            raise ValidationError("Your cart is empty!")

        if isinstance(customer_info, CustomerInfo):
            customer_info = customer_info.model_dump()
        details = {f: str(customer_info.get(f) or "").strip() for f in REQUIRED_CUSTOMER_FIELDS}
        missing = [f for f in REQUIRED_CUSTOMER_FIELDS if not details[f]]
        if missing:
            raise ValidationError("Please fill all required fields!", fields=missing)

        if payment_method != PAYMENT_CASH_ON_DELIVERY:
            if payment_method == PAYMENT_ONLINE:
                raise ValidationError("Online Payment is coming soon; please choose Cash on Delivery", fields=["payment_method"])
            raise ValidationError(f"Unsupported payment method: {payment_method}", fields=["payment_method"])

        quote = self.quote()
        order_id = self._new_id()
        while order_id in self.ledger:
            order_id = self._new_id()

        order = Order(
            order_id=order_id,
            items=tuple(
                OrderItem(
                    medicine_id=item.medicine_id,
                    name=item.name,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                )
                for item in self.cart.items
            ),
            subtotal=quote.subtotal,
            delivery_fee=quote.delivery_fee,
            total=quote.total,
            customer_info=CustomerInfo(**details),
            order_date=self._clock(),
            status=ORDER_STATUS_CONFIRMED,
            payment_method=PAYMENT_CASH_ON_DELIVERY,
        )

        # Not atomic: a crash between these leaves the order placed and the cart full.
        self.ledger.append(order)
        self.cart.clear()
        logger.info("Order %s placed: %d lines, total %s", order.order_id, len(order.items), order.total)
        return order
