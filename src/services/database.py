import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from sqlmodel import Session

import schemas
from core.constants import (
    INVESTMENT_COLUMNS,
    INVESTMENTS_TABLE,
    PAST_PRICE_COLUMNS,
    PAST_PRICES_TABLE,
    PORTFOLIO_COLUMNS,
    PORTFOLIOS_TABLE,
    VEHICLE_COLUMNS,
    VEHICLES_TABLE,
)
from core.exceptions import (
    AlreadyPersistedError,
    MissingPortfolioError,
    MissingVehicleError,
)
from services import delete_executor
from services.batch_insert import insert_batch, insert_one
from services.query_engine import QueryEngine

logger = logging.getLogger(__name__)


def _check_not_persisted(values: Iterable[schemas.PersistableBase], kind: str):
    for value in values:
        if value.is_persisted:
            raise AlreadyPersistedError(f"{kind} {value.id} is already in the database")


class Database:
    """Stores, loads and deletes portfolios, investments, vehicles and past prices.

    Works inside the session it is given and never commits; whoever owns the
    session decides the transaction boundaries.

    Inserts hand back copies of the given values carrying their new ids.
    Vehicles must be stored before the portfolios and investments that refer
    to them.
    """

    def __init__(self, session: Session, query_engine: Optional[QueryEngine] = None):
        self.session = session
        self.query_engine = query_engine or QueryEngine(session)

    # inserts

    def insert(self, portfolio: schemas.Portfolio) -> schemas.Portfolio:
        """Insert the portfolio and its investments, but not their vehicles.

        Raises MissingVehicleError, before anything is written, if the rate
        vehicle or any investment's vehicle has not been stored yet.
        """
        _check_not_persisted([portfolio], "Portfolio")
        _check_not_persisted(portfolio.investments, "Investment")

        rate_vehicle_id = portfolio.usd_to_base_currency_rate_vehicle.id
        if rate_vehicle_id is None:
            raise MissingVehicleError(
                "Portfolio's usd to base currency rate vehicle id is null"
            )
        self._check_vehicles_stored(portfolio.investments)

        portfolio_id = insert_one(
            self.session, PORTFOLIOS_TABLE, PORTFOLIO_COLUMNS, lambda: (rate_vehicle_id,)
        )
        investments = self.insert_investments(portfolio.investments, portfolio_id)

        return portfolio.model_copy(
            update={"id": portfolio_id, "investments": tuple(investments)}
        )

    def insert_aggregate(self, portfolio: schemas.Portfolio) -> schemas.Portfolio:
        """Insert the portfolio along with every vehicle it refers to that has
        not been stored yet. Equal unstored vehicles are stored once."""
        vehicles = [portfolio.usd_to_base_currency_rate_vehicle] + [
            investment.vehicle for investment in portfolio.investments
        ]
        unstored = list(dict.fromkeys(v for v in vehicles if not v.is_persisted))
        stored = dict(zip(unstored, self.insert_vehicles(unstored)))

        portfolio = portfolio.model_copy(
            update={
                "usd_to_base_currency_rate_vehicle": stored.get(
                    portfolio.usd_to_base_currency_rate_vehicle,
                    portfolio.usd_to_base_currency_rate_vehicle,
                ),
                "investments": tuple(
                    investment.model_copy(
                        update={"vehicle": stored.get(investment.vehicle, investment.vehicle)}
                    )
                    for investment in portfolio.investments
                ),
            }
        )
        return self.insert(portfolio)

    def insert_investments(
        self,
        investments: Sequence[schemas.Investment],
        portfolio_id: Optional[int] = None,
    ) -> List[schemas.Investment]:
        """Insert the investments, without their vehicles.

        When ``portfolio_id`` is omitted each investment's own ``portfolio_id``
        is used.
        """
        investments = list(investments)
        _check_not_persisted(investments, "Investment")
        self._check_vehicles_stored(investments)

        portfolio_ids = [
            investment.portfolio_id if portfolio_id is None else portfolio_id
            for investment in investments
        ]
        if any(id is None for id in portfolio_ids):
            raise MissingPortfolioError("An investment's portfolio id is null")

        def values(i: int):
            investment = investments[i]
            return (
                investment.date_time.to_timestamp(),
                investment.principal,
                investment.vehicle.id,
                portfolio_ids[i],
            )

        ids = insert_batch(
            self.session, INVESTMENTS_TABLE, INVESTMENT_COLUMNS, len(investments), values
        )
        return [
            investment.model_copy(update={"id": id, "portfolio_id": portfolio_ids[i]})
            for i, (investment, id) in enumerate(zip(investments, ids))
        ]

    @staticmethod
    def _check_vehicles_stored(investments: Iterable[schemas.Investment]):
        for investment in investments:
            if investment.vehicle.id is None:
                raise MissingVehicleError(
                    f"The vehicle {investment.vehicle.symbol} of an investment has no id"
                )

    def insert_vehicles(
        self, vehicles: Sequence[schemas.Vehicle]
    ) -> List[schemas.Vehicle]:
        """Insert the vehicles, then all of their past prices."""
        vehicles = list(vehicles)
        _check_not_persisted(vehicles, "Vehicle")
        for vehicle in vehicles:
            _check_not_persisted(vehicle.past_prices, "Past price")

        ids = insert_batch(
            self.session,
            VEHICLES_TABLE,
            VEHICLE_COLUMNS,
            len(vehicles),
            lambda i: (vehicles[i].symbol, vehicles[i].name),
        )

        past_prices = self._insert_past_prices(
            [
                past_price.model_copy(update={"vehicle_id": id})
                for vehicle, id in zip(vehicles, ids)
                for past_price in vehicle.past_prices
            ]
        )

        stored = []
        offset = 0
        for vehicle, id in zip(vehicles, ids):
            count = len(vehicle.past_prices)
            stored.append(
                vehicle.model_copy(
                    update={
                        "id": id,
                        "past_prices": tuple(past_prices[offset:offset + count]),
                    }
                )
            )
            offset += count
        return stored

    def insert_past_prices(
        self, past_prices_by_vehicle_id: Mapping[int, Iterable[schemas.PastPrice]]
    ) -> Dict[int, List[schemas.PastPrice]]:
        """Add past prices to vehicles that are already stored."""
        grouped = {
            vehicle_id: [
                past_price.model_copy(update={"vehicle_id": vehicle_id})
                for past_price in past_prices
            ]
            for vehicle_id, past_prices in past_prices_by_vehicle_id.items()
        }
        stored = iter(
            self._insert_past_prices(
                [past_price for past_prices in grouped.values() for past_price in past_prices]
            )
        )
        return {
            vehicle_id: [next(stored) for _ in past_prices]
            for vehicle_id, past_prices in grouped.items()
        }

    def _insert_past_prices(
        self, past_prices: List[schemas.PastPrice]
    ) -> List[schemas.PastPrice]:
        _check_not_persisted(past_prices, "Past price")
        for past_price in past_prices:
            if past_price.vehicle_id is None:
                raise MissingVehicleError("A past price's vehicle id is null")

        ids = insert_batch(
            self.session,
            PAST_PRICES_TABLE,
            PAST_PRICE_COLUMNS,
            len(past_prices),
            lambda i: (
                past_prices[i].date_time.to_timestamp(),
                past_prices[i].price,
                past_prices[i].is_closing,
                past_prices[i].vehicle_id,
            ),
        )
        return [past_price.with_id(id) for past_price, id in zip(past_prices, ids)]

    # queries

    def query_portfolio(
        self, id: int, interval: schemas.Interval
    ) -> schemas.Portfolio:
        return self.query_engine.query_portfolio(id, interval)

    def query_vehicles(self, search_text: str) -> List[schemas.Vehicle]:
        return self.query_engine.query_vehicles(search_text)

    def query_vehicle(self, symbol: str) -> Optional[schemas.Vehicle]:
        return self.query_engine.query_vehicle(symbol)

    def query_past_prices(
        self, vehicle_id: int, interval: schemas.Interval
    ) -> List[schemas.PastPrice]:
        return self.query_engine.query_past_prices(vehicle_id, interval)

    def query_portfolio_past_prices(
        self, portfolio_id: int, interval: schemas.Interval
    ) -> Dict[int, List[schemas.PastPrice]]:
        return self.query_engine.query_portfolio_past_prices(portfolio_id, interval)

    # deletes

    def delete_portfolio(self, id: int) -> int:
        return delete_executor.delete_portfolio(self.session, id)

    def delete_investment(self, id: int) -> int:
        return delete_executor.delete_investment(self.session, id)

    def delete_vehicle(self, id: int) -> int:
        return delete_executor.delete_vehicle(self.session, id)

    def delete_past_prices(self, vehicle_id: int, interval: schemas.Interval) -> int:
        return delete_executor.delete_past_prices(self.session, vehicle_id, interval)
