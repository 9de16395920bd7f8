from typing import Tuple

from schemas.base import PersistableBase
from schemas.past_price import PastPrice


class Vehicle(PersistableBase):
    """Something with a price that changes over time and can be invested in.

    ``past_prices`` may only hold part of the vehicle's history, depending on
    the interval it was queried with.
    """

    symbol: str
    name: str
    past_prices: Tuple[PastPrice, ...] = ()
