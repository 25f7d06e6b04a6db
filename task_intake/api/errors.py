from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from task_intake.errors import IntakeError, ProviderTransportError

logger = structlog.get_logger()


def _get_request_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _error_response(
    request: Request,
    *,
    status_code: int,
    detail: Any,
    code: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the `{"detail", "code", "request_id"?}` body shared by non-domain errors."""
    payload: dict[str, Any] = {"detail": detail, "code": code}
    request_id = _get_request_id(request)
    if request_id:
        payload["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Register service-wide exception handlers on a FastAPI app.

    Every error body carries `detail` plus a stable `code` and the `request_id`.
    """

    @app.exception_handler(IntakeError)
    async def _intake_error_handler(request: Request, exc: IntakeError) -> Response:
        if isinstance(exc, ProviderTransportError):
            logger.error("External API error", service=exc.service, error=exc.details)
        else:
            logger.warning("Processing error", code=exc.code, error=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_public_dict(request_id=_get_request_id(request)),
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> Response:
        return _error_response(
            request,
            status_code=int(exc.status_code),
            detail=exc.detail,
            code=f"http.{exc.status_code}",
            headers=dict(exc.headers or {}),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
        return _error_response(
            request,
            status_code=422,
            detail=jsonable_encoder(exc.errors()),
            code="http.validation_error",
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
        logger.exception(
            "Unexpected error processing request",
            request_id=_get_request_id(request),
            error=str(exc),
        )
        return _error_response(
            request,
            status_code=500,
            detail="Internal server error",
            code="internal.unhandled",
        )
