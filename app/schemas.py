"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Sample(BaseModel):
    """A persisted temperature reading."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    value: float
    timestamp: datetime


class CreateSampleRequest(BaseModel):
    """Body of ``POST /api/temperatures``; a missing ``value`` is rejected by the service.

    Only finite JSON numbers are accepted: booleans, numeric strings, NaN and
    infinities fail validation.
    """

    value: Optional[float] = Field(
        default=None,
        strict=True,
        allow_inf_nan=False,
        description="Temperature reading.",
    )


class DayReadings(BaseModel):
    """All samples recorded on one calendar date, oldest first."""

    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(..., alias="date")
    count: int = Field(..., ge=0)
    data: List[Sample] = Field(default_factory=list)


class Stats(BaseModel):
    """Aggregate statistics for one calendar date."""

    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(..., alias="date")
    count: int = Field(..., ge=1)
    average: float
    min_value: float = Field(..., alias="min")
    max_value: float = Field(..., alias="max")
    first_record: Sample = Field(..., alias="firstRecord")
    last_record: Sample = Field(..., alias="lastRecord")


class HelloMessage(BaseModel):
    message: str
    timestamp: datetime


class DataReceipt(BaseModel):
    status: str
    received: Any = None
