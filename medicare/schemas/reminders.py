from typing import Optional, Union
from pydantic import BaseModel


class CreateReminderRequest(BaseModel):
    medicine_name: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    time: Optional[str] = None
    duration_days: Optional[Union[int, str]] = None
    instructions: Optional[str] = None
