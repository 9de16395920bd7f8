from sqlmodel import SQLModel
from .vehicles import Vehicle, VehicleBase
from .past_prices import PastPrice, PastPriceBase
from .portfolios import Portfolio
from .investments import Investment, InvestmentBase
