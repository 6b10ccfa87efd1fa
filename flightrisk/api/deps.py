import time
from functools import lru_cache

from fastapi import Request, HTTPException

from flightrisk.core.config import settings
from flightrisk.clients.openweather import OpenWeatherClient
from flightrisk.services.evaluation_service import EvaluationService
from flightrisk.services.map_service import MapService
from flightrisk.storage.flight_store import FlightStore
from flightrisk.storage.map_store import MapStore
from flightrisk.utils.cache import WeatherCache


_rate_bucket = {}  # ip -> (window_start_epoch, count)

async def rate_limit(request: Request):
    ip = request.client.host if request.client else "unknown"
    now = int(time.time())
    window = now - (now % 60)

    win_start, count = _rate_bucket.get(ip, (window, 0))
    if win_start != window:
        win_start, count = window, 0

    for stale in [k for k, (w, _) in _rate_bucket.items() if w != window]:
        del _rate_bucket[stale]

    count += 1
    _rate_bucket[ip] = (win_start, count)

    if count > settings.rate_limit_per_minute:
        raise HTTPException(status_code=429, detail="Rate limit exceeded. Try again in a minute.")

def get_map_store() -> MapStore:
    return MapStore(maps_dir=settings.maps_dir, ttl_seconds=settings.map_ttl_seconds)

def get_map_service() -> MapService:
    return MapService()

def get_flight_store() -> FlightStore:
    return FlightStore(path=settings.flights_path)

@lru_cache
def get_evaluation_service() -> EvaluationService:
    # one per process: the weather cache and in-flight fetches are shared by all requests
    return EvaluationService(
        cache=WeatherCache(ttl_ms=settings.weather_cache_ttl_seconds * 1000),
        weather=OpenWeatherClient(timeout_seconds=settings.http_timeout_seconds),
    )
