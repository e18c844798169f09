"""The ApiResponse envelope shared by every endpoint and error path.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "...", "request_id": "req_..."}

``code`` is 0 on success and the AppError code otherwise; ``data`` is null on
errors. request_id comes from request.state (RequestLogMiddleware) so the
body, the X-Request-ID header and the access log line agree.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.requests import Request

from src.hb_common.errors import AppError


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    request_id: str = Field(default_factory=_new_request_id)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or _new_request_id()


def respond(request: Request, data: Any = None, message: str = "success") -> ApiResponse:
    return ApiResponse(data=data, message=message, request_id=_request_id(request))


def error_json(
    request: Request, exc: AppError, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Render ``exc`` as an error envelope with its HTTP status."""
    body = ApiResponse(code=exc.code, message=exc.message, request_id=_request_id(request))
    return JSONResponse(status_code=exc.http_status, content=body.model_dump(), headers=headers)
