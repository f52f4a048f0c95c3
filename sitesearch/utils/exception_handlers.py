import logging
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError

from .custom_utils import generate_response
from .logging.error_logger import error_logger

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: HTTPException):
    """Wrap HTTP exceptions in the standard response envelope."""
    return generate_response(
        status_code=exc.status_code,
        response_message=str(exc.detail),
        customer_message=str(exc.detail),
        body=None
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures field by field."""
    errors = [
        {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg")}
        for error in exc.errors()
    ]
    return generate_response(
        status_code=422,
        response_message="Request validation failed",
        customer_message="Some of the submitted values are invalid",
        body={"errors": errors}
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler; internal details only go to the error log."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    await error_logger.log_error(error=exc, request=request)
    return generate_response(
        status_code=500,
        response_message="Internal server error",
        customer_message="An unexpected error occurred",
        body=None
    )
