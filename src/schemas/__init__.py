from .base import PersistableBase
from .date_time import DateTime
from .interval import Interval
from .past_price import PastPrice
from .vehicle import Vehicle
from .investment import Investment
from .portfolio import Portfolio
