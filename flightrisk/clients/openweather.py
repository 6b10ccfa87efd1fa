from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import structlog

from flightrisk.core.config import settings
from flightrisk.core.errors import WeatherUnavailable

logger = structlog.get_logger(__name__)


class OpenWeatherClient:
    """
    Current weather at a point, as OpenWeather returns it (units=metric).
    No caching here; freshness is the caller's business.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float | None = None,
        lang: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openweather_api_key
        self.base_url = base_url or settings.weather_api_url
        self.timeout = timeout_seconds or settings.http_timeout_seconds
        self.lang = lang or settings.weather_lang
        self._transport = transport

    async def fetch_observation(self, lat: float, lon: float) -> Dict[str, Any]:
        params = {
            "lat": str(lat),
            "lon": str(lon),
            "appid": self.api_key or "",
            "units": "metric",
            "lang": self.lang,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.warning("weather_fetch_failed", lat=lat, lon=lon, error=type(e).__name__)
            raise WeatherUnavailable(f"Weather provider unreachable: {type(e).__name__}") from e

        if not r.is_success:
            logger.warning("weather_fetch_failed", lat=lat, lon=lon, status=r.status_code)
            raise WeatherUnavailable(f"Weather HTTP {r.status_code}")

        try:
            data = r.json()
        except ValueError as e:
            raise WeatherUnavailable("Weather provider returned malformed JSON") from e

        if not isinstance(data, dict):
            raise WeatherUnavailable("Weather provider returned an unexpected payload")
        return data
