from decimal import Decimal
from typing import Optional

from schemas.base import PersistableBase
from schemas.date_time import DateTime


class PastPrice(PersistableBase):
    date_time: DateTime
    price: Decimal
    is_closing: bool = False
    vehicle_id: Optional[int] = None
