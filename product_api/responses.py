# product_api/responses.py
from __future__ import annotations

from typing import Any, Mapping, Optional

from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse

from product_api.schemas.product import ErrorEnvelope, ResultEnvelope


def respond_with_json(status_code: int, payload: Any, headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload), headers=dict(headers or {}))


def respond_with_error(status_code: int, message: str, headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
    """Envelope unitar pentru erori: {"error": "..."}."""
    return respond_with_json(status_code, ErrorEnvelope(error=str(message)), headers=headers)


def success_envelope() -> ResultEnvelope:
    return ResultEnvelope(result="success")
