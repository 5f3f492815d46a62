"""
FastAPI exception handlers that map domain errors to HTTP responses.

Repositories and services raise `aqio.exceptions.domain.*` errors. Each error
knows its own status (`.http_status()`) and JSON body (`.to_payload()`), so the
handlers stay tiny. Storage internals never reach a response: by the time an
error gets here it has already been translated into domain vocabulary.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from aqio.exceptions.domain import (
    DataIntegrityError,
    DomainError,
    ExternalServiceError,
    SystemUnavailableError,
)

logger = logging.getLogger(__name__)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Client-side errors (404, 400, 409, 422, 401, 403).
    Payload: {"error": {"code": ..., "message": ..., "field"?: ..., "details"?: ...}}
    """
    logger.info(
        "api.domain_error",
        extra={
            "method": request.method,
            "path": request.url.path,
            "error_code": exc.error_code,
            "field": exc.field,
        },
    )
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def server_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Server-side errors (500, 503): stored data the system cannot read, or a
    dependency that is down. Logged at WARNING for triage.
    """
    logger.warning(
        "api.server_error",
        extra={
            "method": request.method,
            "path": request.url.path,
            "error_code": exc.error_code,
            "error_type": type(exc).__name__,
        },
    )
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette resolves handlers along the MRO, so the specific classes win over DomainError.
    app.add_exception_handler(SystemUnavailableError, server_error_handler)
    app.add_exception_handler(ExternalServiceError, server_error_handler)
    app.add_exception_handler(DataIntegrityError, server_error_handler)
    app.add_exception_handler(DomainError, domain_error_handler)


__all__ = ["register_exception_handlers", "domain_error_handler", "server_error_handler"]
