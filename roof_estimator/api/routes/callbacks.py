from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from roof_estimator.api.examples import CALLBACK_EXAMPLES
from roof_estimator.api.payload import read_json_object
from roof_estimator.dependencies import get_result_store
from roof_estimator.errors import InvalidInputError, MissingRequiredFieldError
from roof_estimator.intake.resolver import resolve
from roof_estimator.observability.logging import log
from roof_estimator.schemas import CallbackRecord, CallbackRequest
from roof_estimator.storage.results import ResultStore

router = APIRouter(prefix="/estimate-callback", tags=["callbacks"])


@router.post(
    "",
    summary="Store an asynchronous estimate result",
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"examples": CALLBACK_EXAMPLES}},
            "required": True,
        }
    },
)
async def post_callback(
    request: Request,
    store: ResultStore = Depends(get_result_store),
) -> dict[str, bool]:
    payload = await read_json_object(request)
    callback_id = resolve(payload, "callback_id")
    if callback_id is None:
        raise MissingRequiredFieldError("callbackId", "Missing callbackId")

    try:
        body = CallbackRequest.model_validate({**payload, "callbackId": str(callback_id).strip()})
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(x) for x in first.get("loc", ())) or "body"
        raise InvalidInputError(field, first.get("msg", "invalid")) from e

    record = CallbackRecord(
        callback_id=body.callback_id,
        status=body.status,
        total_estimate=body.total_estimate,
        message=body.message,
        received_at=datetime.now(timezone.utc).isoformat(),
    )
    store.put(body.callback_id, record.model_dump())
    log().info("callback_stored", callback_id=body.callback_id, status=body.status)
    return {"ok": True}


@router.get("/{callback_id}", response_model=CallbackRecord)
def get_callback(
    callback_id: str,
    store: ResultStore = Depends(get_result_store),
) -> CallbackRecord:
    record = store.get(callback_id)
    if record is None:
        raise HTTPException(status_code=404, detail="callback_not_found")
    return CallbackRecord.model_validate(record)
