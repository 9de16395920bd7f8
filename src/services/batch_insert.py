import logging
from typing import Any, Callable, List, Sequence

from sqlalchemy import Table, insert
from sqlmodel import Session, SQLModel

from core.constants import ID_COLUMN

logger = logging.getLogger(__name__)


def _get_table(relation: str, columns: Sequence[str]) -> Table:
    table = SQLModel.metadata.tables.get(relation)
    if table is None:
        raise ValueError(f"Unknown relation: {relation}")

    unknown = [c for c in columns if c not in table.c]
    if unknown:
        raise ValueError(f"Unknown columns for {relation}: {unknown}")
    return table


def _build_row(
    relation: str, columns: Sequence[str], values: Sequence[Any]
) -> dict:
    values = tuple(values)
    if len(values) != len(columns):
        raise ValueError(
            f"Expected {len(columns)} values for {relation} {tuple(columns)}, "
            f"got {len(values)}"
        )
    return dict(zip(columns, values))


def insert_batch(
    session: Session,
    relation: str,
    columns: Sequence[str],
    row_count: int,
    value_setter: Callable[[int], Sequence[Any]],
) -> List[int]:
    """Insert ``row_count`` rows into ``relation`` in a single round trip.

    ``value_setter(i)`` supplies the values of row ``i``, in ``columns`` order.
    The generated ids come back in input order, so ``ids[i]`` is the id of the
    row supplied for index ``i``.

    Nothing is committed here; the caller owns the transaction.
    """
    table = _get_table(relation, columns)
    if row_count == 0:
        return []

    # rows are fully built before anything reaches the database
    rows = [_build_row(relation, columns, value_setter(i)) for i in range(row_count)]

    statement = insert(table).returning(
        table.c[ID_COLUMN], sort_by_parameter_order=True
    )
    ids = list(session.exec(statement, params=rows).scalars())

    if len(ids) != row_count:
        raise RuntimeError(
            f"Inserted {row_count} rows into {relation} but got {len(ids)} ids back"
        )

    logger.info("Inserted %d rows into %s", row_count, relation)
    return ids


def insert_one(
    session: Session,
    relation: str,
    columns: Sequence[str],
    value_setter: Callable[[], Sequence[Any]],
) -> int:
    table = _get_table(relation, columns)
    row = _build_row(relation, columns, value_setter())

    id = session.exec(
        insert(table).values(**row).returning(table.c[ID_COLUMN])
    ).scalar_one()

    logger.info("Inserted row %s into %s", id, relation)
    return id
