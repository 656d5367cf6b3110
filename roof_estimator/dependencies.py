"""Dependency injection utilities for FastAPI."""

from fastapi import Request

from roof_estimator.services.estimate_service import EstimateService
from roof_estimator.storage.results import ResultStore


def get_estimate_service(request: Request) -> EstimateService:
    return request.app.state.estimate_service


def get_result_store(request: Request) -> ResultStore:
    return request.app.state.result_store
