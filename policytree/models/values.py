"""
Condition value shapes.

Pydantic models for the composite values a condition can carry (ranges,
durations, locations) plus key-based detectors used when a stored value has
to be classified without knowing the operator it was written for.
"""

import re
from datetime import datetime
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt, model_validator

from policytree.models.operators import TimeUnit

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

LOCATION_KEYS = ("countryId", "cityId", "stateId", "districtId")

NumericValue = Union[StrictInt, StrictFloat]
NonEmptyStr = Annotated[str, Field(min_length=1)]
StringList = Annotated[list[str], Field(min_length=1)]


# -----------------------------------------------------------------------------
# Value models (strict, used by domain condition models)
# -----------------------------------------------------------------------------


class RangeValue(BaseModel):
    """Inclusive numeric range."""

    min: float = Field(..., description="Lower bound")
    max: float = Field(..., description="Upper bound")

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def _check_bounds(self) -> "RangeValue":
        if self.min > self.max:
            raise ValueError("min must not be greater than max")
        return self


class DateRangeValue(BaseModel):
    """Inclusive ISO-8601 datetime range."""

    from_: datetime = Field(..., alias="from", description="Start of the range")
    to: datetime = Field(..., description="End of the range")

    model_config = {"extra": "forbid", "populate_by_name": True}

    @model_validator(mode="after")
    def _check_order(self) -> "DateRangeValue":
        if self.from_ > self.to:
            raise ValueError("start date must not be after end date")
        return self


class TimeRangeValue(BaseModel):
    """Time-of-day window in HH:MM."""

    from_: str = Field(..., alias="from", pattern=TIME_PATTERN.pattern, description="Start time (HH:MM)")
    to: str = Field(..., pattern=TIME_PATTERN.pattern, description="End time (HH:MM)")

    model_config = {"extra": "forbid", "populate_by_name": True}

    @model_validator(mode="after")
    def _check_order(self) -> "TimeRangeValue":
        if _minutes(self.from_) > _minutes(self.to):
            raise ValueError("start time must not be after end time")
        return self


class DurationValue(BaseModel):
    amount: int = Field(..., gt=0, description="Positive number of units")
    unit: TimeUnit = Field(..., description="Time unit")

    model_config = {"extra": "forbid"}


class LocationValue(BaseModel):
    """Composite location reference; any level may be unset."""

    country_id: Optional[str] = Field(None, alias="countryId")
    city_id: Optional[str] = Field(None, alias="cityId")
    state_id: Optional[str] = Field(None, alias="stateId")
    district_id: Optional[str] = Field(None, alias="districtId")
    value: Optional[str] = Field(None, description="Display text of the picked location")

    model_config = {"extra": "forbid", "populate_by_name": True}


def _minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


# -----------------------------------------------------------------------------
# Shape detectors (lenient, never raise)
# -----------------------------------------------------------------------------


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_duration_value(value: Any) -> bool:
    return isinstance(value, dict) and "amount" in value and "unit" in value


def is_range_value(value: Any) -> bool:
    return isinstance(value, dict) and "min" in value and "max" in value


def is_date_range_value(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and "from" in value
        and "to" in value
        and "amount" not in value
        and "min" not in value
    )


def is_location_value(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    if "min" in value or "amount" in value or "from" in value:
        return False
    return any(key in value for key in LOCATION_KEYS)


def is_time_string(value: Any) -> bool:
    return isinstance(value, str) and TIME_PATTERN.match(value) is not None


def is_time_range_value(value: Any) -> bool:
    """Date-range-shaped dict whose bounds are both HH:MM strings."""
    if not is_date_range_value(value):
        return False
    return is_time_string(value["from"]) and is_time_string(value["to"])
