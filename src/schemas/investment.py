from decimal import Decimal
from typing import Optional

from schemas.base import PersistableBase
from schemas.date_time import DateTime
from schemas.vehicle import Vehicle


class Investment(PersistableBase):
    date_time: DateTime
    principal: Decimal
    vehicle: Vehicle
    portfolio_id: Optional[int] = None
