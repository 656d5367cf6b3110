from fastapi import APIRouter

from roof_estimator.observability.prometheus import prometheus_response

router = APIRouter(prefix="/metrics", tags=["monitoring"])


@router.get("/prometheus")
def metrics_prometheus():
    return prometheus_response()
