import os

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flightrisk.core.config import settings
from flightrisk.core.errors import FlightRiskError
from flightrisk.core.logging import configure_logging
from flightrisk.api.routes.airports import router as airports_router
from flightrisk.api.routes.evaluations import router as evaluations_router
from flightrisk.api.routes.maps import router as maps_router

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    configure_logging(settings.log_level, settings.log_format)
    app = FastAPI(title=settings.app_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(FlightRiskError)
    async def flight_risk_error(request: Request, exc: FlightRiskError):
        logger.info("request_rejected", path=request.url.path, error=type(exc).__name__, detail=str(exc))
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    app.include_router(evaluations_router, prefix="/api", tags=["evaluations"])
    app.include_router(airports_router, prefix="/api", tags=["airports"])
    app.include_router(maps_router, tags=["maps"])

    os.makedirs(settings.maps_dir, exist_ok=True)
    return app

app = create_app()
