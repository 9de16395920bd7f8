import pendulum
from pydantic import BaseModel, ConfigDict, model_validator

from core.constants import TIMESTAMP_FORMAT


class DateTime(BaseModel):
    """A UTC date and time, precise to the minute."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0

    @model_validator(mode="after")
    def check_calendar(self) -> "DateTime":
        # pendulum raises ValueError for e.g. February 30th or hour 24
        self.to_pendulum()
        return self

    @classmethod
    def from_timestamp(cls, timestamp: str) -> "DateTime":
        return cls.from_pendulum(
            pendulum.from_format(timestamp, TIMESTAMP_FORMAT, tz=pendulum.UTC)
        )

    @classmethod
    def from_pendulum(cls, dt: pendulum.DateTime) -> "DateTime":
        dt = dt.in_timezone(pendulum.UTC)
        return cls(
            year=dt.year, month=dt.month, day=dt.day, hour=dt.hour, minute=dt.minute
        )

    def to_pendulum(self) -> pendulum.DateTime:
        return pendulum.datetime(
            self.year, self.month, self.day, self.hour, self.minute, tz=pendulum.UTC
        )

    def to_timestamp(self) -> str:
        return (
            f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
            f"{self.hour:02d}:{self.minute:02d}:00"
        )

    def _key(self):
        return (self.year, self.month, self.day, self.hour, self.minute)

    def __lt__(self, other: "DateTime") -> bool:
        return self._key() < other._key()

    def __le__(self, other: "DateTime") -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: "DateTime") -> bool:
        return self._key() > other._key()

    def __ge__(self, other: "DateTime") -> bool:
        return self._key() >= other._key()

    def __str__(self) -> str:
        return self.to_timestamp()
