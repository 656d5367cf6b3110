from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class HealthCheckResponse(BaseModel):
    status: str
    service: str = "roof-estimator"
    env: str


class ReadyResponse(BaseModel):
    status: str = "ready"
    measurement_configured: bool
    writeback_enabled: bool
    pricing_strategy: str
    result_store: str


class WritebackStatus(BaseModel):
    status: Literal["written", "disabled"]
    contact_id: Optional[str] = None
    field_id: Optional[str] = None


class RetailEstimateResponse(BaseModel):
    success: bool = True
    mode: Literal["retail-estimate"] = "retail-estimate"
    needs_estimator: bool = True
    job_type: str
    roof_type: Optional[str] = None
    stories: int
    squares: int
    squares_source: Literal["manual", "measured"]
    raw_measured_squares: Optional[int] = None
    price_per_square: float
    total_estimate: float
    currency: str = "USD"
    pricing_strategy: str
    address: Optional[str] = None
    contact_id: Optional[str] = None
    writeback: WritebackStatus
    message: str = "Estimated price generated successfully."


class InsuranceResponse(BaseModel):
    success: bool = True
    mode: Literal["insurance"] = "insurance"
    needs_estimator: bool = False
    job_type: str
    message: str = "Insurance claim. Route to Insurance Workflow."


class AppointmentResponse(BaseModel):
    success: bool = True
    mode: Literal["appointment"] = "appointment"
    needs_estimator: bool = False
    roof_type: Optional[str] = None
    message: str = "Roof type unknown. Route to Appointment Workflow."


class ManualInputRequiredResponse(BaseModel):
    success: bool = False
    mode: Literal["manual_input_required"] = "manual_input_required"
    needs_estimator: bool = True
    reason: Literal["missing_address", "measurement_unavailable"]
    address: Optional[str] = None
    stories: int
    message: str


WebhookResponse = Annotated[
    Union[
        RetailEstimateResponse,
        InsuranceResponse,
        AppointmentResponse,
        ManualInputRequiredResponse,
    ],
    Field(discriminator="mode"),
]


class CallbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    callback_id: str = Field(..., alias="callbackId", min_length=1, max_length=200)
    status: Optional[str] = None
    total_estimate: Optional[float] = Field(default=None, alias="totalEstimate")
    message: Optional[str] = None


class CallbackRecord(BaseModel):
    callback_id: str
    status: Optional[str] = None
    total_estimate: Optional[float] = None
    message: Optional[str] = None
    received_at: str
    result: Optional[dict[str, Any]] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
