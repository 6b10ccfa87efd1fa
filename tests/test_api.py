import asyncio
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from conftest import FakeWeather, stormy_observation
from flightrisk.api import deps
from flightrisk.core.errors import WeatherUnavailable
from flightrisk.data.airports_repo import airports_repo
from flightrisk.main import app
from flightrisk.storage.flight_store import FlightStore
from flightrisk.storage.map_store import MapStore

LED = airports_repo.get("LED")
MMK = airports_repo.get("MMK")


async def _no_rate_limit():
    return None


@pytest.fixture
def weather():
    return FakeWeather(
        by_coords={(MMK.lat, MMK.lon): stormy_observation()},
        fail={(LED.lat, LED.lon): WeatherUnavailable("Weather HTTP 503")},
    )


@pytest.fixture
def client(tmp_path, make_service, weather):
    svc = make_service(weather)
    app.dependency_overrides[deps.get_evaluation_service] = lambda: svc
    app.dependency_overrides[deps.get_flight_store] = lambda: FlightStore(str(tmp_path / "flights.json"))
    app.dependency_overrides[deps.get_map_store] = lambda: MapStore(str(tmp_path / "maps"), ttl_seconds=60)
    app.dependency_overrides[deps.rate_limit] = _no_rate_limit
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_evaluate_records_history_and_renders_map(client):
    r = client.post("/api/evaluations", json={
        "from_airport_id": "SVO", "to_airport_id": "VVO", "flight_number": "su1702",
    })
    assert r.status_code == 200
    body = r.json()
    assert body["from_airport_id"] == "SVO"
    assert body["flight_number"] == "SU1702"
    assert body["departure_risk"]["score"] == 0
    assert body["cruise_risk"]["factors"][0] == "long-haul route"
    assert body["feasibility"]["tier"] == "high"
    assert body["map_url"] == f"/maps/{body['id']}.html"

    page = client.get(body["map_url"])
    assert page.status_code == 200
    assert "text/html" in page.headers["content-type"]
    assert "SVO" in page.text

    history = client.get("/api/evaluations").json()
    assert [e["id"] for e in history] == [body["id"]]
    assert client.get(f"/api/evaluations/{body['id']}").json()["total_risk"] == body["total_risk"]


def test_storm_at_departure(client):
    body = client.post("/api/evaluations", json={"from_airport_id": "MMK", "to_airport_id": "SVO"}).json()
    assert body["departure_risk"]["score"] == 100
    assert "thunderstorm activity" in body["departure_risk"]["factors"]


def test_unknown_airport_is_404(client):
    r = client.post("/api/evaluations", json={"from_airport_id": "SVO", "to_airport_id": "XXX"})
    assert r.status_code == 404
    assert r.json() == {"detail": "Unknown airport: XXX"}


def test_same_airports_is_400(client):
    r = client.post("/api/evaluations", json={"from_airport_id": "SVO", "to_airport_id": "SVO"})
    assert r.status_code == 400


def test_weather_outage_is_502_and_nothing_recorded(client):
    r = client.post("/api/evaluations", json={"from_airport_id": "SVO", "to_airport_id": "LED"})
    assert r.status_code == 502
    assert r.json() == {"detail": "Weather HTTP 503"}
    assert client.get("/api/evaluations").json() == []


def test_unknown_evaluation_and_map(client):
    assert client.get("/api/evaluations/flight_nope").status_code == 404
    assert client.get("/maps/flight_nope.html").status_code == 404


def test_airport_weather_card(client):
    r = client.get("/api/airports/mmk/weather")
    assert r.status_code == 200
    body = r.json()
    assert body["airport_id"] == "MMK"
    assert body["description"] == "thunderstorm with rain"
    assert body["visibility_km"] == 1.0
    assert body["precip_mm_h"] == 3.2
    assert body["surface_risk"]["score"] == 100
    assert body["risk_level"] == "critical"


def test_reference_data(client):
    assert len(client.get("/api/airports").json()) == 17
    assert {a["id"] for a in client.get("/api/airports", params={"city": "Moscow"}).json()} == {"SVO", "DME", "VKO"}
    assert len(client.get("/api/regions").json()) == 6
    assert "Moscow" in client.get("/api/cities").json()
    top = client.get("/api/airports/search", params={"q": "led"}).json()[0]
    assert top["id"] == "LED"
    assert top["score"] == 100


def test_rate_limit_drops_stale_windows(monkeypatch):
    monkeypatch.setattr(deps, "_rate_bucket", {"10.0.0.1": (0, 5), "10.0.0.2": (60, 1)})
    request = SimpleNamespace(client=SimpleNamespace(host="10.0.0.3"))

    asyncio.run(deps.rate_limit(request))

    assert list(deps._rate_bucket) == ["10.0.0.3"]
    assert deps._rate_bucket["10.0.0.3"][1] == 1


def test_rate_limit_rejects_over_the_limit(monkeypatch):
    monkeypatch.setattr(deps, "_rate_bucket", {})
    monkeypatch.setattr(deps.settings, "rate_limit_per_minute", 2)
    request = SimpleNamespace(client=SimpleNamespace(host="10.0.0.9"))

    asyncio.run(deps.rate_limit(request))
    asyncio.run(deps.rate_limit(request))
    with pytest.raises(HTTPException) as exc:
        asyncio.run(deps.rate_limit(request))
    assert exc.value.status_code == 429
