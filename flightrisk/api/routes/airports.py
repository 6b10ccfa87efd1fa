from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from flightrisk.api.deps import get_evaluation_service, rate_limit
from flightrisk.data.airports_repo import Airport, airports_repo
from flightrisk.models.airports import AirportOut, AirportSearchResult, AirportWeather, RegionOut
from flightrisk.services.evaluation_service import EvaluationService
from flightrisk.services.risk_engine import evaluate_surface_risk, precip_per_hour, risk_level_label
from flightrisk.utils.numeric import read_number, read_value

router = APIRouter()

def _airport_out(rec: Airport) -> AirportOut:
    return AirportOut(id=rec.id, name=rec.name, city=rec.city, lat=rec.lat, lon=rec.lon, region=rec.region)

@router.get("/airports", response_model=List[AirportOut])
async def list_airports(city: Optional[str] = Query(None, max_length=64)):
    recs = airports_repo.by_city(city) if city else airports_repo.all()
    return [_airport_out(rec) for rec in recs]

@router.get("/airports/search", response_model=List[AirportSearchResult])
async def search_airports(
    q: str = Query(..., min_length=1, max_length=64),
    limit: int = Query(10, ge=1, le=25),
    _=Depends(rate_limit),
):
    results = airports_repo.search(q=q, limit=limit)
    return [
        AirportSearchResult(**_airport_out(rec).model_dump(), score=score)
        for rec, score in results
    ]

@router.get("/cities", response_model=List[str])
async def list_cities():
    return airports_repo.cities()

@router.get("/regions", response_model=List[RegionOut])
async def list_regions():
    return [
        RegionOut(id=r.id, name=r.name, bounds=[list(r.bounds[0]), list(r.bounds[1])])
        for r in airports_repo.regions()
    ]

@router.get("/airports/{airport_id}/weather", response_model=AirportWeather)
async def airport_weather(
    airport_id: str,
    _=Depends(rate_limit),
    svc: EvaluationService = Depends(get_evaluation_service),
):
    entry = await svc.ensure_weather(airport_id)
    obs = entry.observation
    visibility = read_number(obs, "visibility")
    description = read_value(obs, "weather[0].description")
    risk = evaluate_surface_risk(obs)

    return AirportWeather(
        airport_id=airport_id.strip().upper(),
        fetched_at=entry.fetched_at,
        description=description if isinstance(description, str) else None,
        temp_c=read_number(obs, "main.temp"),
        feels_like_c=read_number(obs, "main.feels_like"),
        wind_speed_ms=read_number(obs, "wind.speed"),
        wind_gust_ms=read_number(obs, "wind.gust"),
        pressure_hpa=read_number(obs, "main.pressure"),
        humidity_pct=read_number(obs, "main.humidity"),
        clouds_pct=read_number(obs, "clouds.all"),
        visibility_km=None if visibility is None else round(visibility / 1000, 1),
        precip_mm_h=precip_per_hour(obs),
        surface_risk=risk,
        risk_level=risk_level_label(risk.score),
    )
