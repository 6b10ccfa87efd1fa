from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class RiskAssessment(BaseModel):
    """Score for one leg. `factors` keeps rule order; do not re-sort."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    factors: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()
    distance_km: Optional[float] = None  # cruise leg only


class Feasibility(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    tier: str  # high | medium | low | not_recommended
    css_class: str


class FlightEvaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime
    from_airport_id: str
    to_airport_id: str
    flight_number: Optional[str] = None
    departure_at: Optional[str] = None

    departure_risk: RiskAssessment
    arrival_risk: RiskAssessment
    cruise_risk: RiskAssessment
    total_risk: int = Field(..., ge=0, le=100)
    feasibility: Feasibility


class EvaluateRequest(BaseModel):
    from_airport_id: str = Field(..., min_length=3, max_length=4, description="Departure airport code")
    to_airport_id: str = Field(..., min_length=3, max_length=4, description="Arrival airport code")
    flight_number: Optional[str] = Field(None, max_length=12)
    departure_at: Optional[str] = Field(None, description="Planned departure, as entered by the dispatcher")


class EvaluationResponse(FlightEvaluation):
    map_url: str
