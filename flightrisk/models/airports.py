from pydantic import BaseModel
from typing import List, Optional

from flightrisk.models.evaluation import RiskAssessment

class AirportOut(BaseModel):
    id: str
    name: str
    city: str
    lat: float
    lon: float
    region: Optional[str] = None


class AirportSearchResult(AirportOut):
    score: int


class RegionOut(BaseModel):
    id: str
    name: str
    bounds: List[List[float]]  # [[lat_min, lon_min], [lat_max, lon_max]]


class AirportWeather(BaseModel):
    airport_id: str
    fetched_at: Optional[int] = None  # epoch ms
    description: Optional[str] = None
    temp_c: Optional[float] = None
    feels_like_c: Optional[float] = None
    wind_speed_ms: Optional[float] = None
    wind_gust_ms: Optional[float] = None
    pressure_hpa: Optional[float] = None
    humidity_pct: Optional[float] = None
    clouds_pct: Optional[float] = None
    visibility_km: Optional[float] = None
    precip_mm_h: Optional[float] = None
    surface_risk: RiskAssessment
    risk_level: str
