from typing import Optional

from sqlmodel import Field, SQLModel

from core.constants import PORTFOLIOS_TABLE, VEHICLES_TABLE


class Portfolio(SQLModel, table=True):
    __tablename__ = PORTFOLIOS_TABLE

    id: Optional[int] = Field(default=None, primary_key=True)
    usd_to_base_currency_rate_vehicle_id: int = Field(foreign_key=f"{VEHICLES_TABLE}.id")
