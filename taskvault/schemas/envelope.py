"""Response Envelope — {success, data?, error?, errors?, meta?} for every JSON reply.

Invariants:
    - Successful replies always carry success=True; data/meta only when present
    - Failure envelopes are produced by TaskVaultError.to_response()
"""

from typing import Any

from pydantic import BaseModel


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


def success_envelope(data: Any = None, meta: dict | None = None) -> dict:
    response: dict[str, Any] = {"success": True}
    if data is not None:
        response["data"] = _dump(data)
    if meta is not None:
        response["meta"] = meta
    return response
