from typing import Tuple

from schemas.base import PersistableBase
from schemas.investment import Investment
from schemas.vehicle import Vehicle


class Portfolio(PersistableBase):
    """A portfolio of investments.

    ``usd_to_base_currency_rate_vehicle`` is the vehicle whose price at a given
    time is the exchange rate from USD to the portfolio's base currency.
    """

    investments: Tuple[Investment, ...] = ()
    usd_to_base_currency_rate_vehicle: Vehicle
