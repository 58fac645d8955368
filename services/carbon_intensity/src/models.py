import re
from datetime import datetime, timezone
from enum import Enum

import pandas as pd
from pydantic import BaseModel, Field, field_validator, model_validator

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%MZ"
_TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:(00|30)Z$")


class EndpointKind(str, Enum):
    """Carbon Intensity API endpoint families."""

    INTENSITY = "intensity"
    GENERATION = "generation"
    REGIONAL = "regional"


class WideSource(str, Enum):
    """Datasets that can take part in the wide join, in join precedence order."""

    INTENSITY = "intensity"
    GENERATION = "generation"
    REGIONAL_WIDE = "regional_wide"


class OutputShape(str, Enum):
    """Which datasets an Output carries."""

    WIDE = "wide"
    LONG = "long"
    BOTH = "both"


class OrderedLevel(str, Enum):
    """String enum ordered by declaration rather than alphabetically."""

    @classmethod
    def levels(cls) -> list[str]:
        """Member values in declaration order."""
        return [member.value for member in sorted(cls)]

    @property
    def rank(self) -> int:
        """Position in declaration order, lowest first."""
        return list(type(self)).index(self)

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank >= other.rank


class SeverityIndex(OrderedLevel):
    """Carbon intensity index, most severe first."""

    VERY_HIGH = "very high"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    VERY_LOW = "very low"


class Season(OrderedLevel):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


class TimeWindow(BaseModel):
    """Half-hour aligned request window in the API's YYYY-MM-DDTHH:MMZ form."""

    start: str = Field(description="Window start, the API's 'from'")
    end: str = Field(description="Window end, the API's 'to'")

    model_config = {"frozen": True}

    @field_validator("start", "end")
    @classmethod
    def _check_format(cls, value: str) -> str:
        if not _TIMESTAMP_PATTERN.match(value):
            raise ValueError(f"expected half-hour aligned YYYY-MM-DDTHH:MMZ, got {value!r}")
        datetime.strptime(value, TIMESTAMP_FORMAT)
        return value

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        # Fixed-width format, so string order is chronological
        if self.start >= self.end:
            raise ValueError(f"window start {self.start} must precede end {self.end}")
        return self

    @classmethod
    def from_datetimes(cls, start: datetime, end: datetime) -> "TimeWindow":
        """Build a window from two datetimes, converting aware values to UTC."""
        return cls(start=_format_utc(start), end=_format_utc(end))

    @property
    def start_datetime(self) -> datetime:
        return datetime.strptime(self.start, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)

    @property
    def end_datetime(self) -> datetime:
        return datetime.strptime(self.end, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def _format_utc(dt: datetime) -> str:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(TIMESTAMP_FORMAT)


class RequestMode(BaseModel):
    """Independent dataset selection flags for one pipeline run."""

    want_intensity: bool = False
    want_generation: bool = False
    want_regional_wide: bool = False
    want_regional_long: bool = False

    model_config = {"frozen": True}


class Plan(BaseModel):
    """Resolved fetch and assembly steps for a RequestMode."""

    fetch: tuple[EndpointKind, ...]
    build_regional_wide: bool
    wide_sources: tuple[WideSource, ...]
    produce_long: bool

    model_config = {"frozen": True}

    @property
    def produces_wide(self) -> bool:
        return bool(self.wide_sources)

    @property
    def shape(self) -> OutputShape:
        if self.produces_wide and self.produce_long:
            return OutputShape.BOTH
        if self.produces_wide:
            return OutputShape.WIDE
        return OutputShape.LONG


class Output(BaseModel):
    """Final datasets of a run: wide, long, or both."""

    wide: pd.DataFrame | None = None
    long: pd.DataFrame | None = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def shape(self) -> OutputShape:
        if self.wide is not None and self.long is not None:
            return OutputShape.BOTH
        if self.wide is not None:
            return OutputShape.WIDE
        return OutputShape.LONG

    def unpack(self) -> tuple[pd.DataFrame, ...]:
        """Return the present datasets, wide first."""
        return tuple(frame for frame in (self.wide, self.long) if frame is not None)
