import asyncio
import copy

import pytest

from flightrisk.services.evaluation_service import EvaluationService
from flightrisk.utils.cache import WeatherCache

T0 = 1_700_000_000_000


def calm_observation():
    return {
        "weather": [{"id": 800, "description": "clear sky"}],
        "main": {"temp": 10.0, "feels_like": 8.5, "pressure": 1013, "humidity": 60},
        "visibility": 10000,
        "wind": {"speed": 3.0, "gust": 4.0},
        "clouds": {"all": 0},
    }


def stormy_observation():
    return {
        "weather": [{"id": 201, "description": "thunderstorm with rain"}],
        "main": {"temp": 15.0, "pressure": 1013},
        "visibility": 1000,
        "wind": {"speed": 20.0, "gust": 25.0},
        "rain": {"1h": 3.2},
    }


class FakeWeather:
    """Stands in for the OpenWeather client; records every fetch."""

    def __init__(self, by_coords=None, default=None, fail=None, delay=0.0):
        self.by_coords = by_coords or {}
        self.default = default if default is not None else calm_observation()
        self.fail = fail or {}
        self.delay = delay
        self.calls = []

    async def fetch_observation(self, lat, lon):
        self.calls.append((lat, lon))
        if self.delay:
            await asyncio.sleep(self.delay)
        if (lat, lon) in self.fail:
            raise self.fail[(lat, lon)]
        return copy.deepcopy(self.by_coords.get((lat, lon), self.default))


class Clock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def fake_weather():
    return FakeWeather()


@pytest.fixture
def make_service(clock):
    def _make(weather, ttl_ms=600_000):
        return EvaluationService(cache=WeatherCache(ttl_ms=ttl_ms), weather=weather, clock=clock)
    return _make
