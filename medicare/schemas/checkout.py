from typing import Optional
from pydantic import BaseModel, field_validator

from medicare.services.records import PAYMENT_CASH_ON_DELIVERY


class CheckoutRequest(BaseModel):
    # Emptiness is checked by the checkout itself so every missing field is reported together.
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    payment_method: str = PAYMENT_CASH_ON_DELIVERY

    @field_validator("name", "phone", "address", "city", "pincode", mode="before")
    @classmethod
    def _as_text(cls, value):
        # Forms post phone and pincode as numbers.
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def customer_info(self) -> dict:
        return self.model_dump(exclude={"payment_method"})
