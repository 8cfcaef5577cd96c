from typing import Union
from pydantic import BaseModel, StrictInt


class AddToCartRequest(BaseModel):
    medicine_id: Union[int, str]


class UpdateQuantityRequest(BaseModel):
    delta: StrictInt
