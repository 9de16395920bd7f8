"""Time granularity filtering for past prices.

A past price "belongs" to a granularity when it lines up with that sampling
resolution. From a day upwards only closing observations qualify, and only those
on the first day of the month or year where relevant. Below a day there is no
closing flag to rely on, so rows qualify by exact time-of-day alignment.

``TimeGranularity.matches`` evaluates this in Python and ``granularity_clause``
produces the same predicate as a SQL expression. Queries and deletes both go
through ``granularity_clause`` so that what a query returns and what a delete
keeps never disagree.
"""
import enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, true
from sqlalchemy.sql.elements import ColumnElement

from core.exceptions import InvalidGranularityError

if TYPE_CHECKING:
    from schemas.date_time import DateTime


class TimeGranularity(str, enum.Enum):
    year = "year"
    month = "month"
    day = "day"
    hour = "hour"
    minute = "minute"

    @classmethod
    def parse(cls, value: Any) -> "TimeGranularity":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidGranularityError(
                f"invalid time granularity: {value!r}, "
                f"expected one of {[g.value for g in cls]}"
            ) from None

    @property
    def requires_closing(self) -> bool:
        return self in (TimeGranularity.year, TimeGranularity.month, TimeGranularity.day)

    def matches(self, date_time: "DateTime", is_closing: bool) -> bool:
        if self is TimeGranularity.year:
            return is_closing and date_time.month == 1 and date_time.day == 1
        if self is TimeGranularity.month:
            return is_closing and date_time.day == 1
        if self is TimeGranularity.day:
            return is_closing
        if self is TimeGranularity.hour:
            return date_time.minute == 0
        return True


def matches(
    time_granularity: TimeGranularity, date_time: "DateTime", is_closing: bool
) -> bool:
    return time_granularity.matches(date_time, is_closing)


def granularity_clause(
    time_granularity: TimeGranularity, date_time_column, is_closing_column
) -> ColumnElement[bool]:
    # date_time is stored as a fixed width "YYYY-MM-DD hh:mm:00" string
    is_closing = is_closing_column.is_(True)

    if time_granularity is TimeGranularity.year:
        return and_(is_closing, date_time_column.like("____-01-01 %"))
    if time_granularity is TimeGranularity.month:
        return and_(is_closing, date_time_column.like("____-__-01 %"))
    if time_granularity is TimeGranularity.day:
        return is_closing
    if time_granularity is TimeGranularity.hour:
        return date_time_column.like("%:00:00")
    return true()
