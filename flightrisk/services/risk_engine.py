"""
Risk scoring for the three legs of a flight.

Every function here is total: malformed or partial observations never raise.
Missing fields are reported by their dotted path in `missing`; when one of
the load-bearing fields (wind speed, visibility, condition code) is absent the
leg gets a flat 90 and the decision goes back to the dispatcher.
"""
from __future__ import annotations

from typing import Any, List, Mapping, Optional

from flightrisk.models.evaluation import Feasibility, RiskAssessment
from flightrisk.utils.geo import as_latlon, haversine_distance_km
from flightrisk.utils.numeric import clamp_score, read_number

DEFER_SCORE = 90
CRUISE_BASE_SCORE = 10

WIND_SPEED = "wind.speed"
WIND_GUST = "wind.gust"
VISIBILITY = "visibility"
PRESSURE = "main.pressure"
TEMPERATURE = "main.temp"
CONDITION_CODE = "weather[0].id"

LOAD_BEARING = (WIND_SPEED, VISIBILITY, CONDITION_CODE)

# (upper bound inclusive, tier, label, risk level, css class)
_TIERS = (
    (30, "high", "High feasibility", "low", "risk-low"),
    (55, "medium", "Medium feasibility", "moderate", "risk-medium"),
    (75, "low", "Low feasibility", "high", "risk-high"),
)
_TOP_TIER = ("not_recommended", "Not recommended", "critical", "risk-critical")


def _deferred(reason: str, listed: List[str], missing: List[str], **extra: Any) -> RiskAssessment:
    return RiskAssessment(
        score=DEFER_SCORE,
        factors=(f"{reason} — dispatcher decision required", f"missing: {', '.join(listed)}"),
        missing=tuple(missing),
        **extra,
    )


def evaluate_surface_risk(observation: Optional[Mapping[str, Any]]) -> RiskAssessment:
    """Takeoff/landing hazard at one airport from one observation."""
    if observation is None:
        return RiskAssessment(
            score=DEFER_SCORE,
            factors=("no weather data for airport — dispatcher decision required",),
            missing=("weather",),
        )

    wind = read_number(observation, WIND_SPEED)
    gust = read_number(observation, WIND_GUST)
    visibility = read_number(observation, VISIBILITY)
    pressure = read_number(observation, PRESSURE)
    temp = read_number(observation, TEMPERATURE)
    code = read_number(observation, CONDITION_CODE)

    values = {
        WIND_SPEED: wind,
        WIND_GUST: gust,
        VISIBILITY: visibility,
        PRESSURE: pressure,
        TEMPERATURE: temp,
        CONDITION_CODE: code,
    }
    missing = [path for path, v in values.items() if v is None]

    critical = [path for path in LOAD_BEARING if values[path] is None]
    if critical:
        return _deferred("data incomplete", critical, missing)

    score = 0
    factors: List[str] = []

    if wind >= 12:
        score += 16
        factors.append(f"wind {wind:.1f} m/s")
    if wind >= 18:
        score += 15

    if gust is not None and gust >= 20:
        score += 18
        factors.append(f"gusts {gust:.1f} m/s")

    if visibility < 5000:
        score += 12
        factors.append(f"visibility {visibility:g} m")
    if visibility < 1500:
        score += 20

    if pressure is not None and (pressure < 985 or pressure > 1035):
        score += 8
        factors.append(f"pressure {pressure:g} hPa")

    if temp is not None and (temp <= -30 or temp >= 38):
        score += 8
        factors.append(f"extreme temperature {temp:.1f} °C")

    if 200 <= code < 300:
        score += 34
        factors.append("thunderstorm activity")
    elif 300 <= code < 600:
        score += 14
        factors.append("precipitation")
    elif code in (701, 741):
        score += 16
        factors.append("fog/haze")

    if missing:
        factors.append(f"partial data, not scored: {', '.join(missing)}")

    return RiskAssessment(score=clamp_score(score), factors=tuple(factors), missing=tuple(missing))


def evaluate_cruise_risk(
    from_airport: Any,
    to_airport: Any,
    dep_observation: Optional[Mapping[str, Any]],
    arr_observation: Optional[Mapping[str, Any]],
) -> RiskAssessment:
    """
    En-route proxy built from the two endpoint observations only; there is
    no real en-route data. Cruise never scores below the base of 10.
    """
    missing: List[str] = []

    dep_wind = read_number(dep_observation, WIND_SPEED)
    if dep_wind is None:
        missing.append(f"dep {WIND_SPEED}")
    arr_wind = read_number(arr_observation, WIND_SPEED)
    if arr_wind is None:
        missing.append(f"arr {WIND_SPEED}")
    dep_pressure = read_number(dep_observation, PRESSURE)
    if dep_pressure is None:
        missing.append(f"dep {PRESSURE}")
    arr_pressure = read_number(arr_observation, PRESSURE)
    if arr_pressure is None:
        missing.append(f"arr {PRESSURE}")

    a, b = as_latlon(from_airport), as_latlon(to_airport)
    distance_km = haversine_distance_km(a, b) if a and b else None

    if dep_wind is None or arr_wind is None:
        return _deferred("data incomplete for route assessment", missing, missing, distance_km=distance_km)

    score = CRUISE_BASE_SCORE
    factors: List[str] = []

    if distance_km is None:
        factors.append("route coordinates unavailable, distance and latitude not scored")
    else:
        if distance_km >= 2000:
            score += 10
            factors.append("long-haul route")
        if distance_km >= 4000:
            score += 12

        if (abs(a[0]) + abs(b[0])) / 2 >= 50:
            score += 12
            factors.append("likely jet-stream band")

    wind_proxy = max(dep_wind, arr_wind)
    if wind_proxy >= 14:
        score += 10
        factors.append("strong boundary wind at route ends")
    if wind_proxy >= 20:
        score += 10

    if dep_pressure is not None and arr_pressure is not None:
        delta = abs(dep_pressure - arr_pressure)
        if delta >= 20:
            score += 8
            factors.append("high pressure differential")
        if delta >= 35:
            score += 8
    else:
        factors.append("no pressure data at both ends, pressure contrast not checked")

    if missing:
        factors.append(f"partial data, not scored: {', '.join(missing)}")

    return RiskAssessment(
        score=clamp_score(score),
        factors=tuple(factors),
        missing=tuple(missing),
        distance_km=distance_km,
    )


def _tier_for(total: Any):
    score = clamp_score(total)
    for upper, *rest in _TIERS:
        if score <= upper:
            return rest
    return None


def get_feasibility(total_score: Any) -> Feasibility:
    row = _tier_for(total_score)
    if row is None:
        tier, label, _, css = _TOP_TIER
    else:
        tier, label, _, css = row
    return Feasibility(label=label, tier=tier, css_class=css)


def risk_level_label(score: Any) -> str:
    row = _tier_for(score)
    return _TOP_TIER[2] if row is None else row[2]


def risk_class(score: Any) -> str:
    row = _tier_for(score)
    return _TOP_TIER[3] if row is None else row[3]


def precip_per_hour(observation: Optional[Mapping[str, Any]]) -> Optional[float]:
    """Heavier of rain/snow over the last hour in mm, None when neither is reported."""
    values = [v for v in (read_number(observation, "rain.1h"), read_number(observation, "snow.1h")) if v is not None]
    return max(values) if values else None
