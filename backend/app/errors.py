from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from synapse.exceptions import DocumentError, GenerationError, StoreError

logger = logging.getLogger("synapse.api")


class ErrorType(str, Enum):
    VALIDATION = "VALIDATION"
    AUTHENTICATION = "AUTHENTICATION"
    AUTHORIZATION = "AUTHORIZATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    GRAPH_PROCESSING = "GRAPH_PROCESSING"
    NETWORK = "NETWORK"
    UNKNOWN = "UNKNOWN"


class AppError(Exception):
    """
    Error raised by route and service code, rendered as
    ``{"error", "type", "details"?}`` with ``status_code``.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: ErrorType = ErrorType.UNKNOWN,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details


def _error_body(message: str, error_type: ErrorType, details: Any = None) -> dict:
    body = {"error": message, "type": error_type.value}
    if details is not None:
        body["details"] = details
    return body


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[api] %s %s -> %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.error_type, exc.details),
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=_error_body(
            "Invalid request",
            ErrorType.VALIDATION,
            jsonable_encoder(exc.errors()),
        ),
    )


async def _generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    logger.error("[api] model call failed: %s", exc)
    return JSONResponse(
        status_code=502,
        content=_error_body("Failed to generate graph", ErrorType.NETWORK),
    )


async def _document_error_handler(request: Request, exc: DocumentError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=_error_body(str(exc), ErrorType.VALIDATION),
    )


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("[api] %s %s -> store unavailable: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content=_error_body("Verification service unavailable", ErrorType.NETWORK),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "[api] %s %s -> unhandled error", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal Server Error", ErrorType.UNKNOWN),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(GenerationError, _generation_error_handler)
    app.add_exception_handler(DocumentError, _document_error_handler)
    app.add_exception_handler(StoreError, _store_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
