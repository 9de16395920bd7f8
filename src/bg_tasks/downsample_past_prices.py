import logging
from typing import Dict, Optional

import click
import pendulum
import seqlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import settings
from core.constants import EPOCH_TIMESTAMP
from core.db import engine
from core.granularity import TimeGranularity
from log import setup_logging_to_console, setup_logging_to_file
from schemas import DateTime, Interval
from services.data_manager import DataManager

logger = logging.getLogger("downsample_past_prices")
logger.setLevel(logging.INFO)


def downsample(
    db_engine: Engine,
    granularity: TimeGranularity,
    older_than_days: int,
    symbol: Optional[str] = None,
) -> Dict[str, int]:
    """Prune past prices older than ``older_than_days`` down to ``granularity``.

    Each vehicle is pruned in its own transaction. Returns the number of rows
    removed per vehicle symbol.
    """
    data_manager = DataManager(db_engine)

    cutoff = pendulum.now(tz=pendulum.UTC).subtract(days=older_than_days)
    interval = Interval(
        from_=DateTime.from_timestamp(EPOCH_TIMESTAMP),
        to=DateTime.from_pendulum(cutoff),
        granularity=granularity,
    )

    if symbol:
        vehicle = data_manager.show_vehicle(symbol)
        if vehicle is None:
            logger.warning("No vehicle with the symbol %s, nothing to downsample", symbol)
            return {}
        vehicles = [vehicle]
    else:
        vehicles = data_manager.show_vehicles("")

    pruned = {}
    for vehicle in vehicles:
        try:
            count = data_manager.destroy_past_prices(vehicle.id, interval)
            logger.info(
                "Pruned %d past prices of %s before %s to %s",
                count,
                vehicle.symbol,
                interval.to,
                granularity.value,
            )
            pruned[vehicle.symbol] = count
        except SQLAlchemyError as e:
            logger.error(
                "An error occurred while downsampling past prices of %s: %s",
                vehicle.symbol,
                e,
                exc_info=True,
            )

    return pruned


@click.command()
@click.option("--symbol", default=None, help="Only downsample the vehicle with this symbol")
@click.option(
    "--older-than-days",
    default=settings.DOWNSAMPLE_OLDER_THAN_DAYS,
    type=int,
    show_default=True,
    help="Only prune past prices older than this many days",
)
@click.option(
    "--granularity",
    default=settings.DOWNSAMPLE_GRANULARITY,
    type=click.Choice([g.value for g in TimeGranularity]),
    show_default=True,
    help="Granularity to keep",
)
def main(symbol: Optional[str], older_than_days: int, granularity: str):
    pruned = downsample(
        engine, TimeGranularity.parse(granularity), older_than_days, symbol
    )
    logger.info(
        "Downsampled %d vehicles, %d past prices removed",
        len(pruned),
        sum(pruned.values()),
    )


def setup_logging():
    setup_logging_to_file(app="downsample_past_prices", level=logging.INFO, logger=logger)
    setup_logging_to_console(level=logging.INFO, logger=logger)

    if settings.SEQ_SERVER_URL:
        seqlog.log_to_seq(
            server_url=settings.SEQ_SERVER_URL,
            api_key=settings.SEQ_SERVER_API_KEY,
            level=logging.INFO,
            batch_size=10,
            auto_flush_timeout=2,
            override_root_logger=True,
        )


if __name__ == "__main__":
    setup_logging()
    main()
