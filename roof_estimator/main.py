from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roof_estimator.clients.crm import CrmClient
from roof_estimator.clients.google_maps import GoogleMapsClient
from roof_estimator.config import Settings, settings
from roof_estimator.errors import EstimatorError
from roof_estimator.measurement.roof import RoofMeasurer
from roof_estimator.observability.logging import configure_logging, log
from roof_estimator.observability.prometheus import PrometheusMiddleware
from roof_estimator.observability.request_id import RequestIdMiddleware
from roof_estimator.pricing.factory import build_pricing
from roof_estimator.routes import router
from roof_estimator.services.estimate_service import EstimateService
from roof_estimator.storage.results import InMemoryResultStore, ResultStore, S3ResultStore
from roof_estimator.storage.s3 import S3Storage

configure_logging()
log().info("logging_configured", env=settings.env)


def build_result_store(cfg: Settings) -> ResultStore:
    if cfg.result_store_backend == "s3":
        return S3ResultStore(
            S3Storage(bucket=cfg.s3_bucket_results),
            prefix=cfg.s3_results_prefix,
            ttl_seconds=cfg.result_store_ttl_seconds,
        )
    return InMemoryResultStore(
        ttl_seconds=cfg.result_store_ttl_seconds,
        max_entries=cfg.result_store_max_entries,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and cleanup application resources."""
    log().info("initializing_resources")
    maps = GoogleMapsClient()
    crm = CrmClient()
    app.state.result_store = build_result_store(settings)
    app.state.estimate_service = EstimateService(
        measurer=RoofMeasurer(maps),
        pricing=build_pricing(settings),
        crm=crm,
        result_store=app.state.result_store,
    )
    log().info(
        "resources_initialized",
        measurement_configured=maps.configured,
        writeback_enabled=crm.enabled,
        pricing_strategy=settings.pricing_strategy,
        result_store=settings.result_store_backend,
    )

    yield

    log().info("shutting_down")
    maps.close()
    crm.close()


async def estimator_error_handler(request: Request, exc: EstimatorError) -> JSONResponse:
    log().warning("request_rejected", error=exc.code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log().exception("unhandled_error", error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "internal_error",
            "message": "Internal server error.",
        },
    )


def create_app() -> FastAPI:
    api = FastAPI(
        title="Roof Estimator Webhook",
        version="1.0.0",
        lifespan=lifespan,
    )

    api.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    api.add_middleware(RequestIdMiddleware)
    api.add_middleware(PrometheusMiddleware)
    api.add_exception_handler(EstimatorError, estimator_error_handler)
    api.add_exception_handler(Exception, unhandled_error_handler)
    api.include_router(router)

    return api


app = create_app()
