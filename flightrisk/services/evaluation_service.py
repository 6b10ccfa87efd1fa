from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

import structlog

from flightrisk.core.errors import InvalidRoute, UnknownAirport, WeatherUnavailable
from flightrisk.data.airports_repo import Airport, AirportsRepo, airports_repo
from flightrisk.models.evaluation import FlightEvaluation
from flightrisk.services.risk_engine import (
    evaluate_cruise_risk,
    evaluate_surface_risk,
    get_feasibility,
)
from flightrisk.utils.cache import CacheEntry, WeatherCache, is_fresh
from flightrisk.utils.ids import new_id
from flightrisk.utils.numeric import clamp_score

logger = structlog.get_logger(__name__)

# ground phases dominate accident risk
DEPARTURE_WEIGHT = 0.4
ARRIVAL_WEIGHT = 0.4
CRUISE_WEIGHT = 0.2


class WeatherFetcher(Protocol):
    async def fetch_observation(self, lat: float, lon: float) -> Mapping[str, Any]: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


def combine_total(departure: int, arrival: int, cruise: int) -> int:
    return clamp_score(DEPARTURE_WEIGHT * departure + ARRIVAL_WEIGHT * arrival + CRUISE_WEIGHT * cruise)


class EvaluationService:
    """
    Turns "evaluate this route now" into a FlightEvaluation: fresh-or-fetched
    weather for both ends, three leg scores, weighted total, feasibility.
    """

    def __init__(
        self,
        cache: WeatherCache,
        weather: WeatherFetcher,
        airports: AirportsRepo = airports_repo,
        clock: Callable[[], int] = _now_ms,
    ):
        self.cache = cache
        self.weather = weather
        self.airports = airports
        self.clock = clock
        self._inflight: Dict[str, asyncio.Task] = {}

    def airport(self, airport_id: str) -> Airport:
        rec = self.airports.get(airport_id)
        if rec is None:
            raise UnknownAirport((airport_id or "").strip().upper())
        return rec

    async def ensure_weather(self, airport_id: str, now_ms: Optional[int] = None) -> CacheEntry:
        """Cached entry if still fresh, else fetch once (shared by concurrent callers) and store it."""
        airport = self.airport(airport_id)
        now_ms = self.clock() if now_ms is None else now_ms

        entry = self.cache.get(airport.id)
        if is_fresh(entry, now_ms, self.cache.ttl_ms):
            logger.debug("weather_cache_hit", airport=airport.id)
            return entry

        task = self._inflight.get(airport.id)
        if task is None:
            logger.debug("weather_cache_miss", airport=airport.id)
            task = asyncio.ensure_future(self._fetch_and_store(airport, now_ms))
            self._inflight[airport.id] = task
            task.add_done_callback(lambda t, key=airport.id: self._forget(key, t))
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _fetch_and_store(self, airport: Airport, fetched_at: int) -> CacheEntry:
        # same timeline as the now_ms that is_fresh is judged against
        try:
            observation = await self.weather.fetch_observation(airport.lat, airport.lon)
        except WeatherUnavailable as e:
            if e.airport_id is None:
                e.airport_id = airport.id
            raise
        except Exception as e:
            logger.warning("weather_fetch_error", airport=airport.id, error=repr(e))
            raise WeatherUnavailable(
                f"Could not get weather for {airport.id}: {type(e).__name__}", airport_id=airport.id
            ) from e

        if not isinstance(observation, Mapping):
            raise WeatherUnavailable(f"Malformed weather response for {airport.id}", airport_id=airport.id)

        return self.cache.put(airport.id, observation, fetched_at)

    async def evaluate(
        self,
        from_airport_id: str,
        to_airport_id: str,
        now_ms: Optional[int] = None,
        flight_number: Optional[str] = None,
        departure_at: Optional[str] = None,
    ) -> FlightEvaluation:
        origin = self.airport(from_airport_id)
        dest = self.airport(to_airport_id)
        if origin.id == dest.id:
            raise InvalidRoute("Departure and arrival airports must be different.")

        now_ms = self.clock() if now_ms is None else now_ms

        results = await asyncio.gather(
            self.ensure_weather(origin.id, now_ms),
            self.ensure_weather(dest.id, now_ms),
            return_exceptions=True,
        )
        for r in results:
            if isinstance(r, BaseException):
                logger.warning("evaluation_aborted", origin=origin.id, destination=dest.id, error=str(r))
                if isinstance(r, WeatherUnavailable):
                    raise r
                raise WeatherUnavailable(f"Weather lookup failed: {type(r).__name__}") from r

        dep_entry, arr_entry = results
        dep_obs, arr_obs = dep_entry.observation, arr_entry.observation

        departure = evaluate_surface_risk(dep_obs)
        arrival = evaluate_surface_risk(arr_obs)
        cruise = evaluate_cruise_risk(origin, dest, dep_obs, arr_obs)
        total = combine_total(departure.score, arrival.score, cruise.score)

        evaluation = FlightEvaluation(
            id=new_id(),
            created_at=datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc),
            from_airport_id=origin.id,
            to_airport_id=dest.id,
            flight_number=(flight_number or "").strip().upper() or None,
            departure_at=departure_at or None,
            departure_risk=departure,
            arrival_risk=arrival,
            cruise_risk=cruise,
            total_risk=total,
            feasibility=get_feasibility(total),
        )
        logger.info(
            "route_evaluated",
            id=evaluation.id,
            origin=origin.id,
            destination=dest.id,
            total=total,
            tier=evaluation.feasibility.tier,
        )
        return evaluation
