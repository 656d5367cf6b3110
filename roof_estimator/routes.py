from fastapi import APIRouter, Depends, Request, status
from starlette.concurrency import run_in_threadpool

from roof_estimator.api.examples import ROOF_WEBHOOK_EXAMPLES
from roof_estimator.api.payload import read_json_object
from roof_estimator.api.routes.callbacks import router as callbacks_router
from roof_estimator.api.routes.metrics import router as metrics_router
from roof_estimator.config import settings
from roof_estimator.dependencies import get_estimate_service
from roof_estimator.schemas import (
    ErrorResponse,
    HealthCheckResponse,
    ReadyResponse,
    WebhookResponse,
)
from roof_estimator.services.estimate_service import EstimateService

router = APIRouter()
router.include_router(metrics_router)
router.include_router(callbacks_router)


@router.get(
    "/health",
    tags=["healthcheck"],
    summary="Perform a Health Check",
    response_description="Return HTTP Status Code 200 (OK)",
    status_code=status.HTTP_200_OK,
    response_model=HealthCheckResponse,
)
async def get_health() -> HealthCheckResponse:
    return HealthCheckResponse(status="ok", env=settings.env)


@router.get(
    "/ready",
    tags=["readycheck"],
    summary="Report which external collaborators are configured",
    response_model=ReadyResponse,
)
def get_ready(service: EstimateService = Depends(get_estimate_service)) -> ReadyResponse:
    return ReadyResponse(
        measurement_configured=service.measurer.client.configured,
        writeback_enabled=service.crm.enabled,
        pricing_strategy=service.pricing.name,
        result_store=(
            type(service.result_store).__name__ if service.result_store is not None else "none"
        ),
    )


@router.post(
    "/roof",
    response_model=WebhookResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed or invalid input"},
        502: {"description": "Estimate computed but CRM write-back failed"},
    },
    tags=["estimation"],
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"examples": ROOF_WEBHOOK_EXAMPLES}},
            "required": True,
        }
    },
)
async def roof_webhook(
    request: Request,
    service: EstimateService = Depends(get_estimate_service),
):
    payload = await read_json_object(request)
    return await run_in_threadpool(service.handle, payload)
