from __future__ import annotations

import html as _html
from typing import Iterable

import folium

from flightrisk.data.airports_repo import Airport, Region
from flightrisk.models.evaluation import FlightEvaluation, RiskAssessment
from flightrisk.services.risk_engine import risk_class, risk_level_label
from flightrisk.utils.geo import bounding_box, build_curved_route

RISK_COLORS = {
    "risk-low": "#2e9e44",
    "risk-medium": "#e0b000",
    "risk-high": "#e06c00",
    "risk-critical": "#c62828",
}

MARKER_FILL = "#ffd633"


def _color(css_class: str) -> str:
    return RISK_COLORS.get(css_class, "gray")


def _leg_html(title: str, risk: RiskAssessment) -> str:
    items = "".join(f"<li>{_html.escape(f)}</li>" for f in risk.factors)
    color = _color(risk_class(risk.score))
    return (
        f"<div style='margin-bottom:6px;'><b>{_html.escape(title)}</b> "
        f"<span style='padding:2px 6px;border-radius:10px;background:{color};color:white;'>"
        f"{risk.score}/100 ({risk_level_label(risk.score)})</span>"
        + (f"<ul style='padding-left:18px;margin:4px 0;'>{items}</ul>" if items else "")
        + "</div>"
    )


class MapService:
    """
    Folium HTML map of one evaluation: the route drawn as an arc coloured by
    feasibility, both airports with their leg scores, and the regions they
    sit in. Display only; nothing here affects scoring.
    """

    def build(
        self,
        evaluation: FlightEvaluation,
        origin: Airport,
        destination: Airport,
        regions: Iterable[Region] = (),
        embed: bool = False,
    ) -> str:
        points = build_curved_route(origin, destination)
        mid = points[len(points) // 2] if points else (origin.lat, origin.lon)
        m = folium.Map(location=[mid[0], mid[1]], zoom_start=4, control_scale=True)

        region_layer = folium.FeatureGroup(name="Regions", show=True)
        for region in regions:
            (lat_min, lon_min), (lat_max, lon_max) = region.bounds
            folium.Rectangle(
                bounds=[[lat_min, lon_min], [lat_max, lon_max]],
                color="#1f77b4",
                weight=1,
                fill=True,
                fill_opacity=0.06,
                tooltip=region.name,
            ).add_to(region_layer)
        region_layer.add_to(m)

        route_color = _color(evaluation.feasibility.css_class)
        folium.PolyLine(
            locations=points,
            color=route_color,
            weight=3,
            opacity=0.95,
            dash_array="7 6",
            tooltip=f"{origin.id} → {destination.id}: {evaluation.feasibility.label}",
        ).add_to(m)

        for airport, title, risk in (
            (origin, "Departure", evaluation.departure_risk),
            (destination, "Arrival", evaluation.arrival_risk),
        ):
            popup = (
                f"<div style=\"font: 13px/1.4 system-ui,-apple-system,'Segoe UI',Roboto,Arial; max-width: 300px;\">"
                f"<div style='margin-bottom:6px;'><b>{_html.escape(airport.id)}</b> "
                f"{_html.escape(airport.name)}, {_html.escape(airport.city)}</div>"
                f"{_leg_html(title, risk)}</div>"
            )
            folium.CircleMarker(
                location=[airport.lat, airport.lon],
                radius=8,
                color="#111",
                weight=2,
                fill=True,
                fill_color=MARKER_FILL,
                fill_opacity=0.95,
                tooltip=f"{title}: {airport.id} ({risk.score}/100)",
                popup=folium.Popup(popup, max_width=340),
            ).add_to(m)

        if not embed:
            distance = evaluation.cruise_risk.distance_km
            title = _html.escape(evaluation.flight_number or "Route")
            span = f"({distance:.0f} km)" if distance is not None else ""
            legs = "".join(
                _leg_html(name, risk)
                for name, risk in (
                    ("Departure", evaluation.departure_risk),
                    ("Arrival", evaluation.arrival_risk),
                    ("Cruise", evaluation.cruise_risk),
                )
            )
            feasibility = _html.escape(evaluation.feasibility.label)
            panel = f"""
            <div style="
                position: fixed; top: 14px; left: 14px; z-index: 10000;
                background: rgba(255,255,255,0.97); padding: 12px 14px; border-radius: 10px;
                box-shadow: 0 4px 16px rgba(0,0,0,.25);
                font: 13px/1.45 system-ui,-apple-system,'Segoe UI',Roboto,Arial; max-width: 360px;">
              <div style="font-weight:600; margin-bottom:6px;">
                {title} {origin.id} → {destination.id}
                {span}
              </div>
              <div style="margin-bottom:8px;">
                Total risk <b>{evaluation.total_risk}/100</b>
                ({risk_level_label(evaluation.total_risk)}),
                <span style="color:{route_color};font-weight:600;">{feasibility}</span>
              </div>
              {legs}
            </div>
            """
            m.get_root().html.add_child(folium.Element(panel))

        bounds = bounding_box(points, pad_deg=1.0)
        if bounds:
            m.fit_bounds([list(bounds[0]), list(bounds[1])], max_zoom=6)

        folium.LayerControl(collapsed=True).add_to(m)
        return m.get_root().render()
