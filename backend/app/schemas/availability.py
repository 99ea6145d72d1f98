# backend/app/schemas/availability.py

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ._strict_base import HHMM_PATTERN, StrictModel, StrictRequestModel

DayName = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class GlobalAvailabilityIn(StrictRequestModel):
    """Weekly template row. Dates are optional but come as a pair."""

    day: DayName
    start_time: str = Field(..., pattern=HHMM_PATTERN)
    end_time: str = Field(..., pattern=HHMM_PATTERN)
    is_available: bool = True
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class GlobalAvailabilityBulk(StrictRequestModel):
    items: List[GlobalAvailabilityIn] = Field(..., min_length=1)


class SpecialAvailabilityIn(StrictRequestModel):
    day: DayName
    start_time: str = Field(..., pattern=HHMM_PATTERN)
    end_time: str = Field(..., pattern=HHMM_PATTERN)
    is_available: bool = True
    start_date: date
    end_date: date


class AvailabilityRowResponse(BaseModel):
    id: str
    day: str
    start_time: str
    end_time: str
    is_available: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EffectiveAvailabilityResponse(StrictModel):
    date: date
    day: str
    is_available: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    source: Literal["special", "global", "none"]
