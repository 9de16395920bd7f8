import logging
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from sqlmodel import Session, select

import models
import schemas
from core.config import VehicleSearchMatch, settings
from core.exceptions import (
    AmbiguousResultError,
    MissingPortfolioError,
    MissingVehicleError,
)
from core.granularity import granularity_clause

logger = logging.getLogger(__name__)

T = TypeVar("T")


def one_or_raise(
    rows: Iterable[T],
    on_missing: Callable[[], Exception],
    on_ambiguous: Callable[[], Exception],
) -> T:
    """Return the only row, raising when there are none or more than one."""
    rows = list(rows)
    if not rows:
        raise on_missing()
    if len(rows) > 1:
        raise on_ambiguous()
    return rows[0]


def past_price_criteria(interval: schemas.Interval):
    return (
        models.PastPrice.date_time.between(
            interval.from_.to_timestamp(), interval.to.to_timestamp()
        ),
        granularity_clause(
            interval.granularity,
            models.PastPrice.date_time,
            models.PastPrice.is_closing,
        ),
    )


def to_past_price(row: models.PastPrice) -> schemas.PastPrice:
    return schemas.PastPrice(
        date_time=schemas.DateTime.from_timestamp(row.date_time),
        price=row.price,
        is_closing=row.is_closing,
        vehicle_id=row.vehicle_id,
        id=row.id,
    )


def to_vehicle(
    row: models.Vehicle, past_prices: Iterable[schemas.PastPrice] = ()
) -> schemas.Vehicle:
    return schemas.Vehicle(
        symbol=row.symbol, name=row.name, past_prices=tuple(past_prices), id=row.id
    )


def to_investment(
    row: models.Investment, vehicle: schemas.Vehicle
) -> schemas.Investment:
    return schemas.Investment(
        date_time=schemas.DateTime.from_timestamp(row.date_time),
        principal=row.principal,
        vehicle=vehicle,
        portfolio_id=row.portfolio_id,
        id=row.id,
    )


class QueryEngine:
    """Reads portfolios, vehicles and past prices back out of the database.

    Portfolios are rebuilt bottom-up: past prices first, then the vehicles that
    own them, then the investments into those vehicles, then the portfolio.
    Every vehicle value is built fresh for the place it is used in, so a
    vehicle backing two investments comes back as two equal values.
    """

    def __init__(
        self,
        session: Session,
        search_case_sensitive: Optional[bool] = None,
        search_match: Optional[VehicleSearchMatch] = None,
    ):
        self.session = session
        self.search_case_sensitive = (
            settings.VEHICLE_SEARCH_CASE_SENSITIVE
            if search_case_sensitive is None
            else search_case_sensitive
        )
        self.search_match = VehicleSearchMatch(
            settings.VEHICLE_SEARCH_MATCH if search_match is None else search_match
        )

    def query_portfolio(
        self, portfolio_id: int, interval: schemas.Interval
    ) -> schemas.Portfolio:
        """The portfolio with the given id, holding only the past prices that
        fall inside ``interval`` and line up with its granularity.

        Raises MissingPortfolioError if there is no such portfolio and
        MissingVehicleError if a vehicle it refers to is not in the database.
        """
        portfolio_row = self._get_portfolio_row(portfolio_id)

        investments_vehicles = self._query_investments_vehicles(portfolio_id, interval)
        rate_vehicle = self._query_rate_vehicle(portfolio_id, interval)

        investment_rows = self.session.exec(
            select(models.Investment)
            .join(
                models.Portfolio,
                models.Investment.portfolio_id == models.Portfolio.id,
            )
            .where(models.Portfolio.id == portfolio_id)
            .order_by(models.Investment.id)
        ).all()

        investments = []
        for row in investment_rows:
            vehicle = investments_vehicles.get(row.id)
            if vehicle is None:
                raise MissingVehicleError(
                    f"Investment {row.id} refers to vehicle {row.vehicle_id} "
                    "which is not in the database"
                )
            investments.append(to_investment(row, vehicle))

        logger.info(
            "Queried portfolio %s with %d investments (%s to %s by %s)",
            portfolio_id,
            len(investments),
            interval.from_,
            interval.to,
            interval.granularity.value,
        )
        return schemas.Portfolio(
            investments=tuple(investments),
            usd_to_base_currency_rate_vehicle=rate_vehicle,
            id=portfolio_row.id,
        )

    def _get_portfolio_row(self, portfolio_id: int) -> models.Portfolio:
        rows = self.session.exec(
            select(models.Portfolio).where(models.Portfolio.id == portfolio_id).limit(2)
        ).all()
        return one_or_raise(
            rows,
            lambda: MissingPortfolioError(
                f"Query for a portfolio with the id {portfolio_id} didn't produce any results"
            ),
            lambda: AmbiguousResultError(
                f"Query for a portfolio with the id {portfolio_id} produced more than one result"
            ),
        )

    def _query_investments_vehicles_past_prices(
        self, portfolio_id: int, interval: schemas.Interval
    ) -> Dict[int, List[schemas.PastPrice]]:
        rows = self.session.exec(
            select(models.PastPrice)
            .join(models.Vehicle, models.PastPrice.vehicle_id == models.Vehicle.id)
            .join(models.Investment, models.Investment.vehicle_id == models.Vehicle.id)
            .join(
                models.Portfolio,
                models.Investment.portfolio_id == models.Portfolio.id,
            )
            .where(models.Portfolio.id == portfolio_id)
            .where(*past_price_criteria(interval))
            # a vehicle backing several investments joins once per investment
            .distinct()
            .order_by(models.PastPrice.date_time, models.PastPrice.id)
        ).all()

        past_prices = defaultdict(list)
        for row in rows:
            past_prices[row.vehicle_id].append(to_past_price(row))
        return dict(past_prices)

    def _query_rate_vehicle_past_prices(
        self, portfolio_id: int, interval: schemas.Interval
    ) -> List[schemas.PastPrice]:
        rows = self.session.exec(
            select(models.PastPrice)
            .join(models.Vehicle, models.PastPrice.vehicle_id == models.Vehicle.id)
            .join(
                models.Portfolio,
                models.Portfolio.usd_to_base_currency_rate_vehicle_id == models.Vehicle.id,
            )
            .where(models.Portfolio.id == portfolio_id)
            .where(*past_price_criteria(interval))
            .order_by(models.PastPrice.date_time, models.PastPrice.id)
        ).all()
        return [to_past_price(row) for row in rows]

    def _query_investments_vehicles(
        self, portfolio_id: int, interval: schemas.Interval
    ) -> Dict[int, schemas.Vehicle]:
        """Vehicles of the portfolio's investments, keyed by investment id."""
        past_prices = self._query_investments_vehicles_past_prices(portfolio_id, interval)

        rows = self.session.exec(
            select(models.Vehicle, models.Investment.id)
            .join(models.Investment, models.Investment.vehicle_id == models.Vehicle.id)
            .join(
                models.Portfolio,
                models.Investment.portfolio_id == models.Portfolio.id,
            )
            .where(models.Portfolio.id == portfolio_id)
        ).all()

        return {
            investment_id: to_vehicle(vehicle_row, past_prices.get(vehicle_row.id, ()))
            for vehicle_row, investment_id in rows
        }

    def _query_rate_vehicle(
        self, portfolio_id: int, interval: schemas.Interval
    ) -> schemas.Vehicle:
        past_prices = self._query_rate_vehicle_past_prices(portfolio_id, interval)

        rows = self.session.exec(
            select(models.Vehicle)
            .join(
                models.Portfolio,
                models.Portfolio.usd_to_base_currency_rate_vehicle_id == models.Vehicle.id,
            )
            .where(models.Portfolio.id == portfolio_id)
            .limit(2)
        ).all()

        row = one_or_raise(
            rows,
            lambda: MissingVehicleError(
                f"Query for portfolio {portfolio_id}'s usd to base currency rate "
                "vehicle didn't produce any results"
            ),
            lambda: AmbiguousResultError(
                f"Query for portfolio {portfolio_id}'s usd to base currency rate "
                "vehicle produced more than one result"
            ),
        )
        return to_vehicle(row, past_prices)

    def query_vehicles(self, search_text: str) -> List[schemas.Vehicle]:
        """Vehicles whose symbol or name contains ``search_text``.

        Wildcards in ``search_text`` are matched literally. Returned vehicles
        carry no past prices.
        """
        symbol, name = models.Vehicle.symbol, models.Vehicle.name

        if self.search_match is VehicleSearchMatch.prefix:
            if self.search_case_sensitive:
                condition = symbol.startswith(search_text, autoescape=True) | name.startswith(
                    search_text, autoescape=True
                )
            else:
                condition = symbol.istartswith(search_text, autoescape=True) | name.istartswith(
                    search_text, autoescape=True
                )
        elif self.search_case_sensitive:
            condition = symbol.contains(search_text, autoescape=True) | name.contains(
                search_text, autoescape=True
            )
        else:
            condition = symbol.icontains(search_text, autoescape=True) | name.icontains(
                search_text, autoescape=True
            )

        rows = self.session.exec(
            select(models.Vehicle).where(condition).order_by(models.Vehicle.id)
        ).all()

        if self.search_case_sensitive:
            # LIKE ignores case on some backends (SQLite), so check again here
            rows = [
                row
                for row in rows
                if self._matches_search(row.symbol, search_text)
                or self._matches_search(row.name, search_text)
            ]

        return [to_vehicle(row) for row in rows]

    def _matches_search(self, value: str, search_text: str) -> bool:
        if self.search_match is VehicleSearchMatch.prefix:
            return value.startswith(search_text)
        return search_text in value

    def query_vehicle(self, symbol: str) -> Optional[schemas.Vehicle]:
        """The vehicle with exactly this symbol, or None."""
        rows = self.session.exec(
            select(models.Vehicle).where(models.Vehicle.symbol == symbol).limit(2)
        ).all()
        if not rows:
            return None
        row = one_or_raise(
            rows,
            lambda: MissingVehicleError(f"No vehicle with the symbol {symbol}"),
            lambda: AmbiguousResultError(
                f"Query for the vehicle with the symbol {symbol} produced more than one result"
            ),
        )
        return to_vehicle(row)

    def query_past_prices(
        self, vehicle_id: int, interval: schemas.Interval
    ) -> List[schemas.PastPrice]:
        rows = self.session.exec(
            select(models.PastPrice)
            .where(models.PastPrice.vehicle_id == vehicle_id)
            .where(*past_price_criteria(interval))
            .order_by(models.PastPrice.date_time, models.PastPrice.id)
        ).all()
        return [to_past_price(row) for row in rows]

    def query_portfolio_past_prices(
        self, portfolio_id: int, interval: schemas.Interval
    ) -> Dict[int, List[schemas.PastPrice]]:
        """Every filtered price series the portfolio depends on, keyed by
        vehicle id: its investments' vehicles and its rate vehicle."""
        portfolio_row = self._get_portfolio_row(portfolio_id)

        past_prices = self._query_investments_vehicles_past_prices(portfolio_id, interval)
        past_prices[portfolio_row.usd_to_base_currency_rate_vehicle_id] = (
            self._query_rate_vehicle_past_prices(portfolio_id, interval)
        )
        return past_prices
