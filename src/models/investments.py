from decimal import Decimal
from typing import Optional

from sqlmodel import Field, SQLModel

from core.constants import (
    INVESTMENTS_TABLE,
    MONEY_DECIMAL_PLACES,
    MONEY_MAX_DIGITS,
    PORTFOLIOS_TABLE,
    TIMESTAMP_LENGTH,
    VEHICLES_TABLE,
)


class InvestmentBase(SQLModel):
    date_time: str = Field(max_length=TIMESTAMP_LENGTH)
    principal: Decimal = Field(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES
    )


class Investment(InvestmentBase, table=True):
    __tablename__ = INVESTMENTS_TABLE

    id: Optional[int] = Field(default=None, primary_key=True)
    vehicle_id: int = Field(foreign_key=f"{VEHICLES_TABLE}.id")
    portfolio_id: int = Field(foreign_key=f"{PORTFOLIOS_TABLE}.id", index=True)
