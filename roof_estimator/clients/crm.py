import time
from typing import Any
from urllib.parse import quote

import httpx

from roof_estimator.config import settings
from roof_estimator.errors import WritebackFailedError
from roof_estimator.observability.logging import log
from roof_estimator.observability.prometheus import OUTBOUND_LATENCY, WRITEBACKS_TOTAL

RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


class CrmClient:
    """Writes the computed estimate into a custom field on a CRM contact."""

    def __init__(
        self,
        token: str | None = None,
        field_id: str | None = None,
        base_url: str | None = None,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.token = settings.crm_api_token if token is None else token
        self.field_id = settings.crm_estimate_field_id if field_id is None else field_id
        self.base_url = (base_url or settings.crm_base_url).rstrip("/")
        self.max_attempts = max_attempts or settings.crm_max_attempts
        self.backoff_seconds = (
            settings.crm_backoff_seconds if backoff_seconds is None else backoff_seconds
        )
        seconds = settings.crm_timeout_seconds if timeout is None else timeout
        self._client = httpx.Client(
            timeout=httpx.Timeout(seconds, connect=min(seconds, 5.0)),
            headers={
                "Authorization": f"Bearer {self.token}",
                "Version": settings.crm_api_version,
                "Accept": "application/json",
            },
            transport=transport,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.field_id)

    def close(self) -> None:
        self._client.close()

    def update_estimate(self, contact_id: str, total_estimate: float) -> dict[str, Any]:
        """
        PUT the estimate onto the contact. One bounded retry on transport errors,
        429 and 5xx; any other non-2xx fails immediately.

        Raises WritebackFailedError carrying the last upstream status and body.
        """
        url = f"{self.base_url}/contacts/{quote(contact_id, safe='')}"
        payload = {"customFields": [{"id": self.field_id, "field_value": total_estimate}]}

        status: int | None = None
        body = ""
        for attempt in range(1, self.max_attempts + 1):
            started = time.perf_counter()
            try:
                resp = self._client.put(url, json=payload)
            except httpx.RequestError as e:
                status, body = None, f"{type(e).__name__}: {e}"
                retryable = True
            else:
                status, body = resp.status_code, resp.text
                if 200 <= status < 300:
                    WRITEBACKS_TOTAL.labels(outcome="ok").inc()
                    log().info("crm_writeback_ok", contact_id=contact_id, attempt=attempt)
                    return {"status": "written", "contact_id": contact_id, "field_id": self.field_id}
                retryable = status in RETRYABLE_STATUSES
            finally:
                OUTBOUND_LATENCY.labels(provider="crm").observe(time.perf_counter() - started)

            log().warning(
                "crm_writeback_attempt_failed",
                contact_id=contact_id,
                attempt=attempt,
                upstream_status=status,
            )
            if not retryable or attempt >= self.max_attempts:
                break
            time.sleep(self.backoff_seconds * (2 ** (attempt - 1)))

        WRITEBACKS_TOTAL.labels(outcome="failed").inc()
        raise WritebackFailedError(contact_id, status, body)
