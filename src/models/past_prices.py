from decimal import Decimal
from typing import Optional

from sqlmodel import Field, SQLModel

from core.constants import (
    MONEY_DECIMAL_PLACES,
    MONEY_MAX_DIGITS,
    PAST_PRICES_TABLE,
    TIMESTAMP_LENGTH,
    VEHICLES_TABLE,
)


class PastPriceBase(SQLModel):
    # "YYYY-MM-DD hh:mm:00" in UTC, so string order is chronological order
    date_time: str = Field(max_length=TIMESTAMP_LENGTH, index=True)
    price: Decimal = Field(max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES)
    is_closing: bool = False


class PastPrice(PastPriceBase, table=True):
    __tablename__ = PAST_PRICES_TABLE

    id: Optional[int] = Field(default=None, primary_key=True)
    vehicle_id: int = Field(foreign_key=f"{VEHICLES_TABLE}.id", index=True)
