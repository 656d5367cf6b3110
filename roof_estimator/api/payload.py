import json
from typing import Any

from fastapi import Request

from roof_estimator.errors import MalformedRequestError


async def read_json_object(request: Request) -> dict[str, Any]:
    """
    Parse the request body into a JSON object.

    Some workflow builders send the JSON document as a JSON-encoded string, so one
    level of string wrapping is unwrapped. An empty body is an empty object.
    """
    raw = await request.body()
    if not raw.strip():
        return {}

    try:
        data = json.loads(raw)
        if isinstance(data, str):
            data = json.loads(data) if data.strip() else {}
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedRequestError("Invalid JSON body.") from e

    if not isinstance(data, dict):
        raise MalformedRequestError("JSON body must be an object.")
    return data
