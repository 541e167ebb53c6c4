"""
Error responses for the action endpoints.

Malformed input maps to 400, everything else to 500. Both carry
``{"error": <message>}``.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wahook.core.exceptions import ValidationError, WahookError
from wahook.core.logging.logger import get_logger

logger = get_logger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning(f"HTTP 400 - {request.method} {request.url.path} - {exc.message}")
    return _error_response(400, exc.message)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    logger.warning(f"HTTP 400 - {request.method} {request.url.path} - {message}")
    return _error_response(400, f"Invalid request body: {message}")


async def handle_wahook_error(request: Request, exc: WahookError) -> JSONResponse:
    logger.error(f"HTTP 500 - {request.method} {request.url.path} - {exc.message}")
    return _error_response(500, exc.message)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return _error_response(500, str(exc) or "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    # Starlette picks the most specific class first
    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(WahookError, handle_wahook_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
