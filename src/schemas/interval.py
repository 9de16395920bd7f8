from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.granularity import TimeGranularity
from schemas.date_time import DateTime


class Interval(BaseModel):
    """An inclusive range of date times sampled at a time granularity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: DateTime = Field(alias="from")
    to: DateTime
    granularity: TimeGranularity

    @field_validator("granularity", mode="before")
    def parse_granularity(cls, v):
        return TimeGranularity.parse(v)

    @classmethod
    def parse(cls, from_: str, to: str, granularity: str) -> "Interval":
        """Build an interval from external string input.

        Raises InvalidGranularityError for an unknown granularity, and
        ValueError for a malformed timestamp.
        """
        return cls(
            from_=DateTime.from_timestamp(from_),
            to=DateTime.from_timestamp(to),
            granularity=TimeGranularity.parse(granularity),
        )

    def includes(self, date_time: DateTime) -> bool:
        return self.from_ <= date_time <= self.to

    def admits(self, date_time: DateTime, is_closing: bool) -> bool:
        return self.includes(date_time) and self.granularity.matches(
            date_time, is_closing
        )
