"""
Webhook pipeline: resolve -> normalize -> (insurance short-circuit) -> measure ->
price -> CRM write-back.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from roof_estimator.clients.crm import CrmClient
from roof_estimator.config import settings
from roof_estimator.errors import MissingRequiredFieldError, WritebackFailedError
from roof_estimator.intake.normalizer import NormalizedInputs, normalize_inputs
from roof_estimator.intake.resolver import resolve_fields
from roof_estimator.measurement.roof import RoofMeasurer, apply_buffer
from roof_estimator.observability.logging import log
from roof_estimator.observability.prometheus import ESTIMATES_TOTAL
from roof_estimator.pricing.base import PricingStrategy
from roof_estimator.schemas import (
    AppointmentResponse,
    InsuranceResponse,
    ManualInputRequiredResponse,
    RetailEstimateResponse,
    WritebackStatus,
)
from roof_estimator.storage.results import ResultStore
from roof_estimator.storage.s3 import S3StorageError


class EstimateService:
    def __init__(
        self,
        measurer: RoofMeasurer,
        pricing: PricingStrategy,
        crm: CrmClient,
        result_store: Optional[ResultStore] = None,
        currency: Optional[str] = None,
    ):
        self.measurer = measurer
        self.pricing = pricing
        self.crm = crm
        self.result_store = result_store
        self.currency = currency or settings.currency

    def handle(self, payload: Mapping[str, Any]):
        inputs = normalize_inputs(resolve_fields(payload))
        log().info(
            "webhook_inputs_normalized",
            job_type=inputs.job_type,
            stories=inputs.stories,
            squares=inputs.squares,
            has_address=bool(inputs.address),
            contact_id=inputs.contact_id,
        )

        try:
            outcome = self._evaluate(inputs)
        except WritebackFailedError as e:
            ESTIMATES_TOTAL.labels(mode="writeback_failed").inc()
            self._remember(inputs.callback_id, "writeback_failed", e.to_body())
            raise

        ESTIMATES_TOTAL.labels(mode=outcome.mode).inc()
        self._remember(inputs.callback_id, outcome.mode, outcome.model_dump())
        return outcome

    def _evaluate(self, inputs: NormalizedInputs):
        if inputs.is_insurance:
            return InsuranceResponse(job_type=inputs.job_type)

        material_aware = self.pricing.name == "material"
        if material_aware and inputs.roof_type_unknown:
            return AppointmentResponse(roof_type=inputs.roof_type_raw)

        if self.crm.enabled and not inputs.contact_id:
            raise MissingRequiredFieldError(
                "contact_id", "contact_id is required to write the estimate back to the CRM."
            )

        raw_measured: Optional[int] = None
        if inputs.squares is not None:
            final_squares = inputs.squares
            source = "manual"
        elif not inputs.address:
            return ManualInputRequiredResponse(
                reason="missing_address",
                stories=inputs.stories,
                message="Address required when squares is not provided.",
            )
        else:
            measurement = self.measurer.measure(inputs.address)
            if measurement is None:
                return ManualInputRequiredResponse(
                    reason="measurement_unavailable",
                    address=inputs.address,
                    stories=inputs.stories,
                    message="Unable to auto-measure roof. Manual squares required.",
                )
            raw_measured = measurement.raw_squares
            final_squares = apply_buffer(measurement.raw_squares)
            source = "measured"

        roof_type = inputs.roof_type if material_aware else None
        estimate = self.pricing.estimate(final_squares, inputs.stories, roof_type)

        response = RetailEstimateResponse(
            job_type=inputs.job_type,
            roof_type=roof_type,
            stories=inputs.stories,
            squares=estimate.final_squares,
            squares_source=source,
            raw_measured_squares=raw_measured,
            price_per_square=estimate.price_per_unit,
            total_estimate=estimate.total_estimate,
            currency=self.currency,
            pricing_strategy=self.pricing.name,
            address=inputs.address,
            contact_id=inputs.contact_id,
            writeback=WritebackStatus(status="disabled"),
        )

        if not self.crm.enabled:
            return response

        try:
            written = self.crm.update_estimate(inputs.contact_id, estimate.total_estimate)
        except WritebackFailedError as e:
            e.estimate = response.model_dump(exclude={"writeback"})
            log().error(
                "crm_writeback_failed",
                contact_id=inputs.contact_id,
                upstream_status=e.upstream_status,
                total_estimate=estimate.total_estimate,
            )
            raise

        response.writeback = WritebackStatus(**written)
        return response

    def _remember(self, callback_id: Optional[str], status: str, body: dict[str, Any]) -> None:
        if not callback_id or self.result_store is None:
            return

        total = body.get("total_estimate")
        if total is None and isinstance(body.get("estimate"), dict):
            total = body["estimate"].get("total_estimate")

        record = {
            "callback_id": callback_id,
            "status": status,
            "total_estimate": total,
            "message": body.get("message"),
            "received_at": datetime.now(timezone.utc).isoformat(),
            "result": body,
        }
        # outcome is already final here
        try:
            self.result_store.put(callback_id, record)
        except S3StorageError:
            log().exception("callback_result_store_failed", callback_id=callback_id, status=status)
