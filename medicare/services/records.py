"""Records held by the storefront engine.

Field aliases match the JSON the storefront has always written to storage
(``medicine_id``/``price`` for cart lines, camelCase for orders, reminders and
the session user), so persisted blobs stay readable across versions.
"""
import datetime as dt
import uuid
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

TWOPLACES = Decimal("0.01")

ORDER_STATUS_CONFIRMED = "Confirmed"
PAYMENT_CASH_ON_DELIVERY = "Cash on Delivery"
PAYMENT_ONLINE = "Online Payment"

MedicineId = Union[int, str]

# Date formats older clients wrote with toLocaleString().
LOCALE_DATE_FORMATS = (
    "%m/%d/%Y, %I:%M:%S %p",
    "%d/%m/%Y, %I:%M:%S %p",
    "%d/%m/%Y, %H:%M:%S",
)


def to_money(value) -> Decimal:
    try:
        d = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"not a monetary amount: {value!r}")
    return d.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def new_order_id() -> str:
    return "ORD" + uuid.uuid4().hex[:16].upper()


def new_reminder_id() -> str:
    return uuid.uuid4().hex


class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> dict:
        """JSON-ready dict using the storage field names."""
        return self.model_dump(mode="json", by_alias=True)


class LineItem(Record):
    medicine_id: MedicineId
    name: str
    unit_price: Decimal = Field(alias="price", ge=0)
    quantity: int = Field(default=1, ge=1)

    @field_validator("unit_price", mode="before")
    @classmethod
    def _money(cls, value):
        return to_money(value)

    @field_serializer("unit_price")
    def _serialize_price(self, value: Decimal):
        return float(value)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class CartItem(LineItem):
    pass


class OrderItem(LineItem):
    model_config = ConfigDict(frozen=True)


class CustomerInfo(Record):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    pincode: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, value):
        return "" if value is None else str(value)


class Order(Record):
    model_config = ConfigDict(frozen=True)

    order_id: str = Field(alias="orderId")
    items: Tuple[OrderItem, ...]
    subtotal: Decimal
    delivery_fee: Decimal = Field(alias="deliveryFee")
    total: Decimal
    customer_info: CustomerInfo = Field(alias="customerInfo")
    order_date: dt.datetime = Field(alias="orderDate")
    status: str = ORDER_STATUS_CONFIRMED
    payment_method: str = Field(default=PAYMENT_CASH_ON_DELIVERY, alias="paymentMethod")

    @model_validator(mode="before")
    @classmethod
    def _fill_legacy_totals(cls, data):
        # Early orders stored only the grand total.
        if isinstance(data, dict) and "subtotal" not in data and "total" in data:
            data = dict(data)
            subtotal = sum(
                (to_money(i.get("price", 0)) * int(i.get("quantity", 1)) for i in data.get("items", [])),
                Decimal("0.00"),
            )
            data["subtotal"] = subtotal
            data.setdefault("deliveryFee", to_money(data["total"]) - subtotal)
        return data

    @field_validator("subtotal", "delivery_fee", "total", mode="before")
    @classmethod
    def _money(cls, value):
        return to_money(value)

    @field_validator("order_date", mode="before")
    @classmethod
    def _locale_date(cls, value):
        if not isinstance(value, str):
            return value
        text = value.replace("\u202f", " ").replace("\xa0", " ").strip()
        for fmt in LOCALE_DATE_FORMATS:
            try:
                return dt.datetime.strptime(text, fmt)
            except ValueError:
                continue
        return value

    @field_serializer("subtotal", "delivery_fee", "total")
    def _serialize_money(self, value: Decimal):
        return float(value)

    @property
    def unit_count(self) -> int:
        return sum(item.quantity for item in self.items)


class Frequency(str, Enum):
    ONCE = "once"
    TWICE = "twice"
    THRICE = "thrice"
    FOUR = "four"

    @property
    def doses_per_day(self) -> int:
        return _DOSES_PER_DAY[self]

    @property
    def label(self) -> str:
        return _FREQUENCY_LABELS[self]


_DOSES_PER_DAY = {
    Frequency.ONCE: 1,
    Frequency.TWICE: 2,
    Frequency.THRICE: 3,
    Frequency.FOUR: 4,
}

_FREQUENCY_LABELS = {
    Frequency.ONCE: "Once daily",
    Frequency.TWICE: "Twice daily",
    Frequency.THRICE: "Three times daily",
    Frequency.FOUR: "Four times daily",
}

DEFAULT_DURATION_DAYS = 7


class Reminder(Record):
    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    medicine_name: str = Field(alias="medicineName")
    dosage: str
    frequency: Frequency
    time: dt.time
    duration_days: int = Field(default=DEFAULT_DURATION_DAYS, alias="duration", ge=1)
    instructions: str = ""
    created_at: dt.datetime = Field(alias="createdAt")
    is_active: bool = Field(default=True, alias="isActive")

    @field_validator("duration_days", mode="before")
    @classmethod
    def _duration(cls, value):
        if value is None or str(value).strip() == "":
            return DEFAULT_DURATION_DAYS
        try:
            days = int(value)
        except (TypeError, ValueError):
            return value
        return days if days > 0 else DEFAULT_DURATION_DAYS

    @field_validator("instructions", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return value or ""

    @field_serializer("time")
    def _serialize_time(self, value: dt.time):
        return value.strftime("%H:%M")


class UserRecord(Record):
    id: Optional[Union[int, str]] = None
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""
    phone: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None

    @field_validator("phone", "city", "address", "pincode", mode="before")
    @classmethod
    def _text(cls, value):
        return None if value is None else str(value)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class MedicineRecord(Record):
    medicine_id: MedicineId = Field(validation_alias=AliasChoices("medicine_id", "id"))
    name: str
    generic_name: Optional[str] = None
    price: Decimal
    stock_quantity: int = 0
    prescription_required: bool = False
    category: Optional[str] = None
    manufacturer: Optional[str] = None
    description: Optional[str] = None
    dosage_form: Optional[str] = None
    strength: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _money(cls, value):
        return to_money(value)

    @field_serializer("price")
    def _serialize_price(self, value: Decimal):
        return float(value)

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0
