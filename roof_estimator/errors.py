"""Error taxonomy for the roof estimate webhook.

Every error that reaches the HTTP layer is an ``EstimatorError`` carrying its own
status code and machine-readable ``code``; ``main.py`` renders them uniformly.
"""

from typing import Any, Optional


class EstimatorError(Exception):
    status_code: int = 400
    code: str = "estimator_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": False,
            "error": self.code,
            "message": self.message,
        }
        body.update(self.details)
        return body


class MalformedRequestError(EstimatorError):
    status_code = 400
    code = "malformed_request"


class MissingRequiredFieldError(EstimatorError):
    status_code = 400
    code = "missing_required_field"

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field} is required.", {"field": field})
        self.field = field


class InvalidInputError(EstimatorError):
    status_code = 400
    code = "invalid_input"

    def __init__(self, field: str, message: str):
        super().__init__(message, {"field": field})
        self.field = field


class MeasurementUnavailableError(EstimatorError):
    """Raised inside the measurement chain; never rendered as an HTTP error."""

    status_code = 200
    code = "measurement_unavailable"

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or reason, {"reason": reason})
        self.reason = reason


class WritebackFailedError(EstimatorError):
    status_code = 502
    code = "writeback_failed"

    def __init__(
        self,
        contact_id: str,
        upstream_status: Optional[int],
        upstream_body: str = "",
        estimate: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            f"Estimate computed but CRM contact {contact_id} was not updated.",
            {
                "contact_id": contact_id,
                "upstream_status": upstream_status,
                "upstream_body": upstream_body[:500],
            },
        )
        self.contact_id = contact_id
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body
        self.estimate = estimate

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        if self.estimate is not None:
            body["estimate"] = self.estimate
        return body
