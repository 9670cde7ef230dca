"""
Error rendering for the HTTP layer.

Every failure leaves the API as ``{"error": "<message>"}`` with a
non-success status code.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from techassist.core.errors import PipelineError
from techassist.pipeline.orchestrator import format_validation_errors
from techassist.utils.logging import get_logger

logger = get_logger("techassist.api.errors")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_errors(exc.errors())
    logger.info("[API] Rejected request to %s: %s", request.url.path, message)
    return error_response(400, message)


async def _pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    logger.error("[API] %s on %s: %s", type(exc).__name__, request.url.path, exc)
    return error_response(exc.status_code, str(exc))


def register_error_handlers(app: FastAPI) -> None:
    """Attach the ``{"error": ...}`` handlers to an application."""
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(PipelineError, _pipeline_error_handler)
