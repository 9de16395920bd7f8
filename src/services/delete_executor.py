import logging

from sqlalchemy import delete, not_
from sqlmodel import Session, SQLModel

import models
import schemas
from core.granularity import granularity_clause

logger = logging.getLogger(__name__)

# TODO: decide whether deleting portfolios and vehicles should cascade to their
# investments and past prices; until then the foreign keys reject such deletes


def _delete_by_id(session: Session, model: type[SQLModel], id: int) -> int:
    result = session.exec(
        delete(model)
        .where(model.id == id)
        .execution_options(synchronize_session=False)
    )
    logger.info("Deleted %d rows from %s with id %s", result.rowcount, model.__tablename__, id)
    return result.rowcount


def delete_portfolio(session: Session, id: int) -> int:
    return _delete_by_id(session, models.Portfolio, id)


def delete_investment(session: Session, id: int) -> int:
    return _delete_by_id(session, models.Investment, id)


def delete_vehicle(session: Session, id: int) -> int:
    return _delete_by_id(session, models.Vehicle, id)


def delete_past_prices(
    session: Session, vehicle_id: int, interval: schemas.Interval
) -> int:
    """Downsample a vehicle's past prices in place.

    Every past price of the vehicle inside ``interval`` that does not line up
    with the interval's granularity is deleted; the ones that do are kept.
    """
    statement = (
        delete(models.PastPrice)
        .where(models.PastPrice.vehicle_id == vehicle_id)
        .where(
            models.PastPrice.date_time.between(
                interval.from_.to_timestamp(), interval.to.to_timestamp()
            )
        )
        .where(
            not_(
                granularity_clause(
                    interval.granularity,
                    models.PastPrice.date_time,
                    models.PastPrice.is_closing,
                )
            )
        )
        .execution_options(synchronize_session=False)
    )
    result = session.exec(statement)
    logger.info(
        "Pruned %d past prices of vehicle %s finer than %s between %s and %s",
        result.rowcount,
        vehicle_id,
        interval.granularity.value,
        interval.from_,
        interval.to,
    )
    return result.rowcount
