"""Strict schema bases and the field patterns shared across request DTOs."""

from pydantic import BaseModel, ConfigDict

# ASCII digits only; pydantic's regex engine lets \d match any Unicode digit
HHMM_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"
OTP_CODE_PATTERN = r"^[0-9]{6}$"


class StrictModel(BaseModel):
    """Response DTO base: unknown fields are an error and assignments are validated."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(StrictModel):
    """Request DTO base; clients sending extra fields get a 422."""
