import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlmodel import Session

import schemas
from services.database import Database

logger = logging.getLogger(__name__)


class DataManager:
    """Runs each store, show and destroy operation in its own transaction.

    A failure part way through an operation, for instance a vehicle stored but
    its investment rejected, rolls the whole operation back.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def transaction(self) -> Iterator[Database]:
        with Session(self.engine) as session, session.begin():
            yield Database(session)

    def store_portfolio(self, portfolio: schemas.Portfolio) -> schemas.Portfolio:
        with self.transaction() as database:
            return database.insert(portfolio)

    def store_aggregate(self, portfolio: schemas.Portfolio) -> schemas.Portfolio:
        with self.transaction() as database:
            return database.insert_aggregate(portfolio)

    def store_investments(
        self,
        investments: Sequence[schemas.Investment],
        portfolio_id: Optional[int] = None,
    ) -> List[schemas.Investment]:
        with self.transaction() as database:
            return database.insert_investments(investments, portfolio_id)

    def store_vehicles(self, vehicles: Sequence[schemas.Vehicle]) -> List[schemas.Vehicle]:
        with self.transaction() as database:
            return database.insert_vehicles(vehicles)

    def store_past_prices(
        self, past_prices_by_vehicle_id: Mapping[int, Iterable[schemas.PastPrice]]
    ) -> Dict[int, List[schemas.PastPrice]]:
        with self.transaction() as database:
            return database.insert_past_prices(past_prices_by_vehicle_id)

    def show_portfolio(self, id: int, interval: schemas.Interval) -> schemas.Portfolio:
        with self.transaction() as database:
            return database.query_portfolio(id, interval)

    def show_vehicles(self, search_text: str) -> List[schemas.Vehicle]:
        with self.transaction() as database:
            return database.query_vehicles(search_text)

    def show_vehicle(self, symbol: str) -> Optional[schemas.Vehicle]:
        with self.transaction() as database:
            return database.query_vehicle(symbol)

    def show_past_prices(
        self, vehicle_id: int, interval: schemas.Interval
    ) -> List[schemas.PastPrice]:
        with self.transaction() as database:
            return database.query_past_prices(vehicle_id, interval)

    def show_portfolio_past_prices(
        self, portfolio_id: int, interval: schemas.Interval
    ) -> Dict[int, List[schemas.PastPrice]]:
        with self.transaction() as database:
            return database.query_portfolio_past_prices(portfolio_id, interval)

    def destroy_portfolio(self, id: int) -> int:
        with self.transaction() as database:
            return database.delete_portfolio(id)

    def destroy_investment(self, id: int) -> int:
        with self.transaction() as database:
            return database.delete_investment(id)

    def destroy_vehicle(self, id: int) -> int:
        with self.transaction() as database:
            return database.delete_vehicle(id)

    def destroy_past_prices(self, vehicle_id: int, interval: schemas.Interval) -> int:
        with self.transaction() as database:
            return database.delete_past_prices(vehicle_id, interval)
