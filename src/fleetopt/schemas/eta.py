"""ETA request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .routing import CoordinateModel


class ETAPredictionRequest(BaseModel):
    origin: CoordinateModel
    destination: CoordinateModel
    vehicle_type: Optional[str] = None
    time_of_day: datetime


class ETAPredictionResponse(BaseModel):
    minutes: float
    route_key: str
    historical_samples: int


class ETAObservationRequest(BaseModel):
    origin: CoordinateModel
    destination: CoordinateModel
    actual_minutes: float = Field(..., ge=0)


class ETAObservationResponse(BaseModel):
    route_key: str
    historical_samples: int
