from fastapi import APIRouter, Depends, HTTPException
from typing import List

from flightrisk.api.deps import (
    get_evaluation_service,
    get_flight_store,
    get_map_service,
    get_map_store,
    rate_limit,
)
from flightrisk.data.airports_repo import airports_repo
from flightrisk.models.evaluation import EvaluateRequest, EvaluationResponse, FlightEvaluation
from flightrisk.services.evaluation_service import EvaluationService
from flightrisk.services.map_service import MapService
from flightrisk.storage.flight_store import FlightStore
from flightrisk.storage.map_store import MapStore

router = APIRouter()

@router.post("/evaluations", response_model=EvaluationResponse)
async def post_evaluation(
    payload: EvaluateRequest,
    _=Depends(rate_limit),
    svc: EvaluationService = Depends(get_evaluation_service),
    store: FlightStore = Depends(get_flight_store),
    maps: MapStore = Depends(get_map_store),
    map_service: MapService = Depends(get_map_service),
):
    # UnknownAirport / InvalidRoute / WeatherUnavailable are mapped in main.py
    evaluation = await svc.evaluate(
        payload.from_airport_id,
        payload.to_airport_id,
        flight_number=payload.flight_number,
        departure_at=payload.departure_at,
    )
    store.record(evaluation)

    origin = svc.airport(evaluation.from_airport_id)
    dest = svc.airport(evaluation.to_airport_id)
    html = map_service.build(evaluation, origin, dest, regions=airports_repo.regions_for(origin, dest))
    maps.save_html(evaluation.id, html)

    return EvaluationResponse(**evaluation.model_dump(), map_url=f"/maps/{evaluation.id}.html")

@router.get("/evaluations", response_model=List[FlightEvaluation])
async def list_evaluations(store: FlightStore = Depends(get_flight_store)):
    return store.load()

@router.get("/evaluations/{evaluation_id}", response_model=FlightEvaluation)
async def get_evaluation(evaluation_id: str, store: FlightStore = Depends(get_flight_store)):
    evaluation = store.get(evaluation_id)
    if evaluation is None:
        raise HTTPException(status_code=404, detail="Evaluation not found.")
    return evaluation
