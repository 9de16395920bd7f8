from decimal import Decimal

import pendulum
import pytest
from sqlmodel import Session

from core.db import create_db_engine, init_db
from schemas import DateTime, Investment, PastPrice, Portfolio, Vehicle
from services.database import Database


@pytest.fixture
def engine():
    db_engine = create_db_engine("sqlite://")
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def database(db_session: Session):
    return Database(db_session)


def minute_prices(start: pendulum.DateTime, minutes: int, closing_hour: int = 16):
    """One past price per minute; the ``closing_hour``:00 price of each day is
    the closing price."""
    past_prices = []
    for i in range(minutes):
        dt = start.add(minutes=i)
        past_prices.append(
            PastPrice(
                date_time=DateTime.from_pendulum(dt),
                price=Decimal(100 + i),
                is_closing=(dt.hour == closing_hour and dt.minute == 0),
            )
        )
    return tuple(past_prices)


@pytest.fixture
def two_days_of_minutes():
    return minute_prices(pendulum.datetime(2024, 3, 4, tz=pendulum.UTC), 2 * 24 * 60)


@pytest.fixture
def sample_portfolio():
    usd_cad = Vehicle(
        symbol="USDCAD",
        name="US Dollar to Canadian Dollar",
        past_prices=(
            PastPrice(date_time=DateTime(year=2024, month=1, day=2), price=Decimal("1.3250"), is_closing=True),
            PastPrice(date_time=DateTime(year=2024, month=1, day=3), price=Decimal("1.3375"), is_closing=True),
        ),
    )
    vehicles = [
        Vehicle(
            symbol=symbol,
            name=name,
            past_prices=tuple(
                PastPrice(
                    date_time=DateTime(year=2024, month=1, day=2, hour=14, minute=30 + m),
                    price=Decimal(base) + Decimal(m) / 4,
                )
                for m in range(4)
            ),
        )
        for symbol, name, base in [
            ("VTI", "Vanguard Total Stock Market ETF", 235),
            ("BND", "Vanguard Total Bond Market ETF", 72),
            ("AAPL", "Apple Inc.", 185),
        ]
    ]
    return Portfolio(
        investments=tuple(
            Investment(
                date_time=DateTime(year=2024, month=1, day=2, hour=15),
                principal=Decimal(1000 * (i + 1)),
                vehicle=vehicle,
            )
            for i, vehicle in enumerate(vehicles)
        ),
        usd_to_base_currency_rate_vehicle=usd_cad,
    )


@pytest.fixture
def make_minute_prices():
    return minute_prices
