from typing import Optional

from sqlmodel import Field, SQLModel

from core.constants import VEHICLES_TABLE


class VehicleBase(SQLModel):
    symbol: str = Field(index=True)
    name: str


class Vehicle(VehicleBase, table=True):
    __tablename__ = VEHICLES_TABLE

    id: Optional[int] = Field(default=None, primary_key=True)
